"""Onboarding configuration loaded from environment variables.

For local development, put the values in a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from src.onboarding.errors import ConfigurationError

GRAPH_BASE = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"
LOGIN_BASE = "https://login.microsoftonline.com"


class OnboardingConfig(BaseSettings):
    """Onboarding configuration loaded from environment variables."""

    # Azure AD app registration (client-credentials flow)
    tenant_id: str = Field(default="", description="Azure AD tenant ID")
    client_id: str = Field(default="", description="App registration client ID")
    azure_client_secret: str = Field(
        default="",
        description="App registration client secret",
    )

    # Workbook holding the Microsoft Forms responses
    drive_id: str = Field(default="", description="OneDrive/SharePoint drive ID")
    file_id: str = Field(default="", description="Drive item ID of the workbook")
    workbook_table: str = Field(
        default="OfficeForms.Table",
        description="Name of the workbook table with the form responses",
    )

    # Accounts and mail
    azure_domain: str = Field(
        default="ldv-muenchen.de",
        description="Domain suffix for student userPrincipalNames",
    )
    service_account_upn: str = Field(
        default="",
        description="Mailbox used to send parent emails and run the contact script",
    )
    sender_email: str = Field(
        default="it-admin@ldv-muenchen.de",
        description="From address on parent emails",
    )
    school_logo_url: str = Field(
        default="https://i.imgur.com/0QV6BIW.png",
        description="Logo shown at the top of parent emails",
    )

    # Contact provisioning script
    contact_script_path: str = Field(
        default="scripts/cont.ps1",
        description="PowerShell script creating the Exchange contact",
    )
    pwsh_executable: str = Field(default="pwsh", description="PowerShell binary")
    contact_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for one contact script invocation",
    )

    # Local state
    ledger_path: str = Field(
        default="processed.log",
        description="Append-only file of already provisioned userPrincipalNames",
    )
    report_dir: str = Field(default="reports", description="Run report directory")

    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for each Graph HTTP request",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def token_url(self) -> str:
        return f"{LOGIN_BASE}/{self.tenant_id}/oauth2/v2.0/token"

    def require_live_settings(self) -> None:
        """Fail fast when a setting needed for a live run is empty.

        The client secret is left to the credential provider, which reports
        it as AuthError(MISSING_SECRET).

        Raises:
            ConfigurationError: Listing every missing environment variable.
        """
        required = {
            "TENANT_ID": self.tenant_id,
            "CLIENT_ID": self.client_id,
            "DRIVE_ID": self.drive_id,
            "FILE_ID": self.file_id,
            "SERVICE_ACCOUNT_UPN": self.service_account_upn,
            "SENDER_EMAIL": self.sender_email,
        }
        missing = [name for name, value in required.items() if not value.strip()]
        if missing:
            raise ConfigurationError(missing)


# Singleton pattern
_config: OnboardingConfig | None = None


def get_config() -> OnboardingConfig:
    """Get the onboarding configuration singleton.

    Returns:
        OnboardingConfig: Onboarding configuration instance
    """
    global _config
    if _config is None:
        _config = OnboardingConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the env."""
    global _config
    _config = None
