from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.onboarding.contacts import LoggingContactProvisioner, PowerShellContactProvisioner
from src.onboarding.errors import ContactError


def _provisioner() -> PowerShellContactProvisioner:
    return PowerShellContactProvisioner(
        script_path="scripts/cont.ps1",
        service_account_upn="svc@school.example",
        executable="pwsh",
        timeout=5,
    )


def test_runs_script_with_named_parameters() -> None:
    completed = MagicMock(returncode=0, stdout="Contact created\n")
    with patch("src.onboarding.contacts.subprocess.run", return_value=completed) as run:
        _provisioner().create_contact("Paolo Bianchi", "paolo@example.com", "5A")

    args, kwargs = run.call_args
    assert args[0] == [
        "pwsh", "-File", "scripts/cont.ps1",
        "-Name", "Paolo Bianchi",
        "-Email", "paolo@example.com",
        "-Class", "5A",
    ]
    assert kwargs["env"]["SERVICE_ACCOUNT_UPN"] == "svc@school.example"
    assert kwargs["stderr"] is subprocess.STDOUT
    assert kwargs["timeout"] == 5


def test_non_zero_exit_raises_with_output() -> None:
    completed = MagicMock(returncode=1, stdout="New-MailContact: already exists")
    with patch("src.onboarding.contacts.subprocess.run", return_value=completed):
        with pytest.raises(ContactError) as exc_info:
            _provisioner().create_contact("Paolo Bianchi", "paolo@example.com", "5A")

    assert exc_info.value.output == "New-MailContact: already exists"
    assert "exit status 1" in str(exc_info.value)


def test_missing_executable_raises() -> None:
    with patch("src.onboarding.contacts.subprocess.run", side_effect=FileNotFoundError("pwsh")):
        with pytest.raises(ContactError, match="could not run"):
            _provisioner().create_contact("Paolo Bianchi", "paolo@example.com", "5A")


def test_timeout_raises() -> None:
    timeout = subprocess.TimeoutExpired(cmd="pwsh", timeout=5)
    with patch("src.onboarding.contacts.subprocess.run", side_effect=timeout):
        with pytest.raises(ContactError):
            _provisioner().create_contact("Paolo Bianchi", "paolo@example.com", "5A")


@pytest.mark.parametrize("name,email", [(" ", "paolo@example.com"), ("Paolo", "")])
def test_name_and_email_required(name: str, email: str) -> None:
    with patch("src.onboarding.contacts.subprocess.run") as run:
        with pytest.raises(ContactError, match="required"):
            _provisioner().create_contact(name, email, "5A")

    run.assert_not_called()


def _latin1_script(tmp_path: Path, exit_status: int) -> Path:
    # Stands in for pwsh printing "Schüler" in Windows-1252
    script = tmp_path / "fake-pwsh"
    script.write_text(
        f"#!/bin/sh\nprintf 'Sch\\374ler angelegt\\n'\nexit {exit_status}\n",
        encoding="ascii",
    )
    script.chmod(0o755)
    return script


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script")
def test_non_utf8_output_on_success(tmp_path: Path) -> None:
    provisioner = PowerShellContactProvisioner(
        script_path="scripts/cont.ps1",
        service_account_upn="svc@school.example",
        executable=str(_latin1_script(tmp_path, 0)),
        timeout=10,
    )

    provisioner.create_contact("Paolo Bianchi", "paolo@example.com", "5A")


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script")
def test_non_utf8_output_on_failure_is_contact_error(tmp_path: Path) -> None:
    provisioner = PowerShellContactProvisioner(
        script_path="scripts/cont.ps1",
        service_account_upn="svc@school.example",
        executable=str(_latin1_script(tmp_path, 1)),
        timeout=10,
    )

    with pytest.raises(ContactError) as exc_info:
        provisioner.create_contact("Paolo Bianchi", "paolo@example.com", "5A")

    assert "exit status 1" in str(exc_info.value)
    assert exc_info.value.output.startswith("Sch")
    assert "ler angelegt" in exc_info.value.output


def test_decode_failure_is_contact_error() -> None:
    error = UnicodeDecodeError("utf-8", b"\xfc", 0, 1, "invalid start byte")
    with patch("src.onboarding.contacts.subprocess.run", side_effect=error):
        with pytest.raises(ContactError, match="UnicodeDecodeError"):
            _provisioner().create_contact("Paolo Bianchi", "paolo@example.com", "5A")


def test_decodes_output_leniently() -> None:
    completed = MagicMock(returncode=0, stdout="ok")
    with patch("src.onboarding.contacts.subprocess.run", return_value=completed) as run:
        _provisioner().create_contact("Paolo Bianchi", "paolo@example.com", "5A")

    kwargs = run.call_args.kwargs
    assert kwargs["encoding"] == "utf-8"
    assert kwargs["errors"] == "replace"


def test_logging_provisioner_runs_nothing() -> None:
    provisioner = LoggingContactProvisioner()
    with patch("src.onboarding.contacts.subprocess.run") as run:
        provisioner.create_contact("Paolo Bianchi", "paolo@example.com", "5A")

    run.assert_not_called()
    assert provisioner.requested == [("Paolo Bianchi", "paolo@example.com", "5A")]
