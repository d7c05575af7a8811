"""Pydantic models for onboarding data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
"""

from enum import Enum

from pydantic import BaseModel, Field


class StudentIdentity(BaseModel):
    """Account attributes derived from one form row."""

    given_name: str
    surname: str
    username: str  # "maria.rossi", also the mailNickname
    user_principal_name: str  # "maria.rossi@ldv-muenchen.de"
    display_name: str
    password: str = Field(repr=False)  # never logged or written to disk


class ParentRecord(BaseModel):
    """One parent/guardian slot of a form row."""

    slot: int  # 1 or 2
    name: str
    email: str
    phone: str = ""

    @property
    def is_present(self) -> bool:
        return self.email != ""


class RowDecodeResult(BaseModel):
    """Outcome of decoding a positional row against the header schema."""

    fields: dict[str, str]
    missing_columns: list[str] = []  # schema fields the row was too short for
    surplus_cells: int = 0  # cells beyond the schema, ignored


class ProvisionStatus(str, Enum):
    CREATED = "created"
    ALREADY_PROCESSED = "already_processed"
    WOULD_CREATE = "would_create"


class ProvisionResult(BaseModel):
    user_principal_name: str
    password: str = Field(repr=False)
    status: ProvisionStatus
    notify_error: str | None = None


class RowAction(BaseModel):
    """One line of the run report. Never carries the password."""

    row_index: int
    action: str  # skipped | already_processed | created | would_create | failed
    upn: str | None = None
    reason: str | None = None
    error: str | None = None


class RunSummary(BaseModel):
    total_rows: int = 0
    skipped: int = 0
    already_processed: int = 0
    created: int = 0
    would_create: int = 0
    failed: int = 0
    notify_failed: int = 0
    actions: list[RowAction] = []

    def record(self, action: RowAction) -> None:
        self.actions.append(action)
        if action.action == "skipped":
            self.skipped += 1
        elif action.action == "already_processed":
            self.already_processed += 1
        elif action.action == "created":
            self.created += 1
        elif action.action == "would_create":
            self.would_create += 1
        elif action.action == "failed":
            self.failed += 1
