# Shared pytest fixtures: fake Graph client, recording contact provisioner
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.onboarding.config import OnboardingConfig
from src.onboarding.errors import ContactError
from src.onboarding.schema import (
    ACCOUNT_TYPE,
    CLASS,
    FIRST_NAME,
    HEADERS,
    LAST_NAME,
    PARENT1_EMAIL,
    PARENT1_FIRST,
    PARENT1_LAST,
    PARENT2_EMAIL,
    PARENT2_FIRST,
    PARENT2_LAST,
)

DOMAIN = "school.example"


def make_row(**overrides: str) -> list[str]:
    """Build a positional row. Keys are schema column names."""
    values = {
        FIRST_NAME: "Anna",
        LAST_NAME: "Bianchi",
        ACCOUNT_TYPE: "Student",
        CLASS: "5A",
    }
    values.update(overrides)
    return [values.get(name, "") for name in HEADERS]


def make_response(status_code: int, text: str = "{}") -> MagicMock:
    return MagicMock(status_code=status_code, text=text)


class FakeGraph:
    """Stands in for GraphClient. Records every call in a shared event list."""

    def __init__(self, events: list, rows: list | None = None) -> None:
        self.events = events
        self.rows = rows or []
        self.create_status = 201
        self.send_mail_error: Exception | None = None
        self.created_users: list[dict] = []
        self.sent_messages: list[dict] = []

    def get_token(self) -> str:
        self.events.append(("get_token",))
        return "token-123"

    def fetch_rows(self, token: str) -> list:
        self.events.append(("fetch_rows",))
        return self.rows

    def create_user(self, token: str, body: dict) -> MagicMock:
        self.events.append(("create_user", body["userPrincipalName"]))
        self.created_users.append(body)
        return make_response(self.create_status, '{"error": "conflict"}' if self.create_status >= 300 else "{}")

    def send_mail(self, token: str, sender_upn: str, message: dict) -> None:
        address = message["message"]["toRecipients"][0]["emailAddress"]["address"]
        self.events.append(("send_mail", address))
        if self.send_mail_error is not None:
            raise self.send_mail_error
        self.sent_messages.append(message)


class RecordingContacts:
    """Contact provisioner fake. Fails for any email listed in fail_for."""

    def __init__(self, events: list, fail_for: set[str] | None = None) -> None:
        self.events = events
        self.fail_for = fail_for or set()
        self.created: list[tuple[str, str, str]] = []

    def create_contact(self, name: str, email: str, class_name: str) -> None:
        self.events.append(("create_contact", email))
        if email in self.fail_for:
            raise ContactError("PowerShell script failed with exit status 1", "boom")
        self.created.append((name, email, class_name))


@pytest.fixture()
def events() -> list:
    return []


@pytest.fixture()
def fake_graph(events: list) -> FakeGraph:
    return FakeGraph(events)


@pytest.fixture()
def contacts(events: list) -> RecordingContacts:
    return RecordingContacts(events)


@pytest.fixture()
def config(tmp_path) -> OnboardingConfig:
    return OnboardingConfig(
        _env_file=None,
        tenant_id="tenant",
        client_id="client",
        azure_client_secret="secret",
        drive_id="drive",
        file_id="file",
        service_account_upn="svc@school.example",
        sender_email="it-admin@school.example",
        azure_domain=DOMAIN,
        ledger_path=str(tmp_path / "processed.log"),
        report_dir=str(tmp_path / "reports"),
    )


@pytest.fixture()
def two_parent_row() -> list[str]:
    return make_row(
        **{
            PARENT1_FIRST: "Paolo",
            PARENT1_LAST: "Bianchi",
            PARENT1_EMAIL: "paolo@example.com",
            PARENT2_FIRST: "Giulia",
            PARENT2_LAST: "Verdi",
            PARENT2_EMAIL: "giulia@example.com",
        }
    )


