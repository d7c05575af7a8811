"""Header schema of the Microsoft Forms export and row decoding.

The column names are copied verbatim from the workbook table, including the
quotes and trailing newline around "Preferred Name" that the Forms export
puts there. Rows are positional, so the order of HEADERS must match the sheet.
"""

from typing import Any, Sequence

from src.onboarding.errors import MissingFieldError
from src.onboarding.models import RowDecodeResult

FIRST_NAME = "First Name as appears in government-issued ID"
LAST_NAME = "Last Name as appears in government-issued ID"
PREFERRED_NAME = '"Preferred Name\n"'
ACCOUNT_TYPE = "Account Type"
CLASS = "Class"

PARENT1_FIRST = "Parent or Legal Guardian #1 FIRST name (or preferred first name)"
PARENT1_LAST = "Parent or Legal Guardian #1 LAST name"
PARENT1_EMAIL = "Parent or Legal Guardian #1 - E-mail Address"
PARENT1_PHONE = "Parent or Legal Guardian #1 - Phone Number"
PARENT2_FIRST = "Parent or Legal Guardian #2 FIRST name (or preferred name)"
PARENT2_LAST = "Parent or Legal Guardian #2 LAST name"
PARENT2_EMAIL = "Parent or Legal Guardian #2 - E-mail Address"
PARENT2_PHONE = "Parent or Legal Guardian #2 - Phone Number"

HEADERS: tuple[str, ...] = (
    "Id",
    "Start time",
    "Completion time",
    "Email",
    "Name",
    "Language",
    FIRST_NAME,
    LAST_NAME,
    PREFERRED_NAME,
    "Start Date",
    ACCOUNT_TYPE,
    "Job Role",
    "Highest Teaching Grade",
    "Private E-mail Address (will only be used to deliver the temporary access information)",
    "Employment Type",
    CLASS,
    PARENT1_FIRST,
    PARENT1_LAST,
    PARENT1_EMAIL,
    PARENT1_PHONE,
    "Add another Parent or Legal Guardian?",
    PARENT2_FIRST,
    PARENT2_LAST,
    PARENT2_EMAIL,
    PARENT2_PHONE,
    "Wi-Fi Account Required?",
)

MANDATORY_COLUMNS: tuple[str, ...] = (FIRST_NAME, LAST_NAME)

# (slot, first, last, email, phone)
PARENT_SLOTS = (
    (1, PARENT1_FIRST, PARENT1_LAST, PARENT1_EMAIL, PARENT1_PHONE),
    (2, PARENT2_FIRST, PARENT2_LAST, PARENT2_EMAIL, PARENT2_PHONE),
)


def _cell_text(value: Any) -> str:
    """Render a workbook cell as text. Graph returns numbers for numeric cells."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def decode_row(row: Sequence[Any], headers: Sequence[str] = HEADERS) -> RowDecodeResult:
    """Decode a positional row into a named mapping.

    Cells beyond the schema are dropped and counted; schema fields the row
    does not reach are set to "" and listed in missing_columns.
    """
    fields = {name: "" for name in headers}
    for name, value in zip(headers, row):
        fields[name] = _cell_text(value)
    return RowDecodeResult(
        fields=fields,
        missing_columns=list(headers[len(row):]),
        surplus_cells=max(len(row) - len(headers), 0),
    )


def map_row(row: Sequence[Any]) -> dict[str, str]:
    """Return the field mapping for a row. Never fails."""
    return decode_row(row).fields


def validate(mapping: dict[str, str]) -> None:
    """Check the mandatory fields of a mapped row.

    Raises:
        MissingFieldError: For the first mandatory field that is blank.
    """
    for column in MANDATORY_COLUMNS:
        if not mapping.get(column, "").strip():
            raise MissingFieldError(column)
