"""Exchange mail contacts for parents.

The contact is created by a PowerShell script (Exchange Online cmdlets have
no Graph equivalent) which also adds it to the class distribution group.
"""

import os
import subprocess
from pathlib import Path
from typing import Protocol

from src.onboarding.errors import ContactError
from src.onboarding.logging import get_logger

logger = get_logger(__name__)


class ContactProvisioner(Protocol):
    def create_contact(self, name: str, email: str, class_name: str) -> None:
        """Create the mail contact or raise ContactError."""
        ...


class PowerShellContactProvisioner:
    """Runs `pwsh -File <script> -Name .. -Email .. -Class ..`."""

    def __init__(
        self,
        script_path: str | Path,
        service_account_upn: str,
        executable: str = "pwsh",
        timeout: float = 120.0,
    ) -> None:
        self.script_path = Path(script_path)
        self.service_account_upn = service_account_upn
        self.executable = executable
        self.timeout = timeout

    def create_contact(self, name: str, email: str, class_name: str) -> None:
        if not name.strip() or not email:
            raise ContactError("name and email are required")

        cmd = [
            self.executable,
            "-File", str(self.script_path),
            "-Name", name,
            "-Email", email,
            "-Class", class_name,
        ]
        env = dict(os.environ, SERVICE_ACCOUNT_UPN=self.service_account_upn)

        try:
            result = subprocess.run(
                cmd,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",  # pwsh on Windows may print in the ANSI code page
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ContactError(f"PowerShell script could not run: {e}") from e
        except Exception as e:
            raise ContactError(f"PowerShell script failed: {type(e).__name__}: {e}") from e

        output = (result.stdout or "").strip()
        if result.returncode != 0:
            raise ContactError(
                f"PowerShell script failed with exit status {result.returncode}", output
            )

        logger.info("contact_created", email=email, class_name=class_name, output=output)


class LoggingContactProvisioner:
    """Dry-run provisioner: logs the contact it would create, runs nothing."""

    def __init__(self) -> None:
        self.requested: list[tuple[str, str, str]] = []

    def create_contact(self, name: str, email: str, class_name: str) -> None:
        self.requested.append((name, email, class_name))
        logger.info("contact_would_be_created", name=name, email=email, class_name=class_name)
