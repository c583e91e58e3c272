"""Tests for column header mapping."""

import pytest

from rollcall.services.import_service import CANONICAL_MEMBER_FIELDS, HEADER_ALIASES, ColumnMapper


@pytest.fixture
def mapper() -> ColumnMapper:
    return ColumnMapper()


@pytest.mark.parametrize(
    "header,expected",
    [
        ("First Name", "first_name"),
        ("firstname", "first_name"),
        ("Surname", "last_name"),
        ("E-mail", "email"),
        ("Mobile", "phone"),
        ("Telephone", "phone"),
        ("DOB", "birthday"),
        ("Date of Birth", "birthday"),
        ("Marital Status", "marital_status"),
        ("Member Status", "status"),
        ("Cell Group", "cell_group_name"),
        ("Group", "cell_group_name"),
        ("Referred By", "brought_by"),
        ("Comments", "notes"),
    ],
)
def test_map_header_synonyms(mapper: ColumnMapper, header: str, expected: str) -> None:
    assert mapper.map_header(header) == expected


def test_every_alias_matches_regardless_of_case_and_whitespace(mapper: ColumnMapper) -> None:
    """Any spelling of a synonym maps to the same field as the synonym itself."""
    for alias, field in HEADER_ALIASES.items():
        assert mapper.map_header(alias) == field
        assert mapper.map_header(f"  {alias.upper()}\t") == field
        assert mapper.map_header(alias.title()) == field


def test_aliases_target_canonical_fields() -> None:
    assert set(HEADER_ALIASES.values()) <= set(CANONICAL_MEMBER_FIELDS)


def test_unknown_and_empty_headers_are_unmapped(mapper: ColumnMapper) -> None:
    assert mapper.map_header("Favourite Colour") is None
    assert mapper.map_header("") is None
    assert mapper.map_header(None) is None


def test_build_field_map_drops_unmapped_columns(mapper: ColumnMapper) -> None:
    headers = ["First Name", "Shoe Size", "Last Name", None, "Email"]
    assert mapper.build_field_map(headers) == {0: "first_name", 2: "last_name", 4: "email"}


def test_aliases_are_read_only(mapper: ColumnMapper) -> None:
    with pytest.raises(TypeError):
        mapper.aliases["nickname"] = "first_name"


def test_custom_alias_table() -> None:
    mapper = ColumnMapper({"Vorname": "first_name", "Nachname": "last_name"})
    assert mapper.map_header("vorname") == "first_name"
    assert mapper.map_header("First Name") is None
