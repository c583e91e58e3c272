"""Constants for the member import service."""

from types import MappingProxyType
from typing import Mapping

# Maximum rows per import session (safety limit for MongoDB 16MB doc size)
MAX_ROWS = 5000

# Canonical member fields, in template column order
CANONICAL_MEMBER_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "birthday",
    "marital_status",
    "status",
    "cell_group_name",
    "brought_by",
    "notes",
)

# Header alias table: lowercase alias -> member field name
HEADER_ALIASES: Mapping[str, str] = MappingProxyType({
    # first_name
    "firstname": "first_name",
    "first_name": "first_name",
    "first name": "first_name",
    # last_name
    "lastname": "last_name",
    "last_name": "last_name",
    "last name": "last_name",
    "surname": "last_name",
    # email
    "email": "email",
    "e-mail": "email",
    "email address": "email",
    # phone
    "phone": "phone",
    "telephone": "phone",
    "mobile": "phone",
    "phone number": "phone",
    # address
    "address": "address",
    # birthday
    "birthday": "birthday",
    "birth_date": "birthday",
    "birth date": "birthday",
    "birthdate": "birthday",
    "date of birth": "birthday",
    "dob": "birthday",
    # marital_status
    "maritalstatus": "marital_status",
    "marital_status": "marital_status",
    "marital status": "marital_status",
    # status
    "status": "status",
    "member status": "status",
    # cell_group_name
    "cellgroupname": "cell_group_name",
    "cell_group_name": "cell_group_name",
    "cell group name": "cell_group_name",
    "cell group": "cell_group_name",
    "cellgroup": "cell_group_name",
    "group": "cell_group_name",
    "group name": "cell_group_name",
    # brought_by
    "broughtby": "brought_by",
    "brought_by": "brought_by",
    "brought by": "brought_by",
    "referred by": "brought_by",
    # notes
    "notes": "notes",
    "note": "notes",
    "comment": "notes",
    "comments": "notes",
})

# Lowercase substrings that mark a line of extracted text as a header
HEADER_KEYWORDS = ("first", "name", "email")

# Number of leading text lines searched for a header
HEADER_SCAN_LINES = 5

MISSING_FIRST_NAME = "Missing first name"
MISSING_LAST_NAME = "Missing last name"
NO_RECORDS_FOUND = "Could not parse any member records from text"

# Example rows for the downloadable template; headers are the keys
TEMPLATE_ROWS: tuple[dict[str, str], ...] = (
    {
        "First Name": "John",
        "Last Name": "Doe",
        "Email": "john.doe@example.com",
        "Phone": "555-123-4567",
        "Address": "123 Main Street, City",
        "Birthday": "1990-05-15",
        "Marital Status": "married",
        "Status": "active",
        "Cell Group": "Youth Group",
        "Brought By": "Jane Smith",
        "Notes": "Sample member entry",
    },
    {
        "First Name": "Jane",
        "Last Name": "Smith",
        "Email": "jane.smith@example.com",
        "Phone": "555-987-6543",
        "Address": "456 Oak Avenue, Town",
        "Birthday": "1985-12-20",
        "Marital Status": "single",
        "Status": "pending_approval",
        "Cell Group": "Women's Group",
        "Brought By": "",
        "Notes": "",
    },
)

# Column widths (characters) for the template sheet, by header
TEMPLATE_COLUMN_WIDTHS: dict[str, int] = {
    "First Name": 15,
    "Last Name": 15,
    "Email": 25,
    "Phone": 15,
    "Address": 30,
    "Birthday": 12,
    "Marital Status": 15,
    "Status": 18,
    "Cell Group": 20,
    "Brought By": 15,
    "Notes": 30,
}
