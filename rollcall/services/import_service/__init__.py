"""Import service package for turning uploaded member lists into member records."""

from .commit import CommitEngine, record_to_member_data
from .constants import (
    CANONICAL_MEMBER_FIELDS,
    HEADER_ALIASES,
    MAX_ROWS,
    TEMPLATE_ROWS,
)
from .converters import collect_results, row_to_record, validate_record
from .directory import (
    BeanieGroupDirectory,
    BeanieMemberDirectory,
    DirectoryEntry,
    GroupDirectory,
    MemberData,
    MemberDirectory,
)
from .duplicates import DuplicateMatcher, find_existing_member
from .extractors import DocumentTextExtractor, RecordExtractor, build_extractor
from .heuristic import HeuristicTextExtractor
from .mapping import ColumnMapper
from .normalizers import FieldNormalizer, normalize_date
from .parsers import parse_csv, parse_xls, parse_xlsx, read_table
from .processor import (
    ImportFileMissingError,
    ImportParseError,
    ImportStateError,
    claim_for_commit,
    commit_import_session,
    parse_import_session,
)
from .tabular import TabularExtractor
from .template import TEMPLATE_FILENAME, build_template_workbook

__all__ = [
    # Constants
    "CANONICAL_MEMBER_FIELDS",
    "HEADER_ALIASES",
    "MAX_ROWS",
    "TEMPLATE_ROWS",
    # Parsers
    "parse_csv",
    "parse_xls",
    "parse_xlsx",
    "read_table",
    # Mapping and normalization
    "ColumnMapper",
    "FieldNormalizer",
    "normalize_date",
    # Converters
    "collect_results",
    "row_to_record",
    "validate_record",
    # Extractors
    "DocumentTextExtractor",
    "HeuristicTextExtractor",
    "RecordExtractor",
    "TabularExtractor",
    "build_extractor",
    # Directory
    "BeanieGroupDirectory",
    "BeanieMemberDirectory",
    "DirectoryEntry",
    "GroupDirectory",
    "MemberData",
    "MemberDirectory",
    # Duplicates and commit
    "CommitEngine",
    "DuplicateMatcher",
    "find_existing_member",
    "record_to_member_data",
    # Processor
    "ImportFileMissingError",
    "ImportParseError",
    "ImportStateError",
    "claim_for_commit",
    "commit_import_session",
    "parse_import_session",
    # Template
    "TEMPLATE_FILENAME",
    "build_template_workbook",
]
