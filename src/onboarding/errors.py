"""Error hierarchy for the onboarding run.

Errors are split by the granularity at which they stop work:

- FatalSetupError: configuration, authentication or the initial table fetch
  failed. The whole run is aborted.
- RowSkipped: the row is not processable (missing mandatory field). Not an
  error, the driver logs it and moves on.
- ProvisionError: the account could not be created. The row stays out of the
  ledger so the next run retries it.
- NotifyError: the account exists but a parent was not reached. Logged only,
  the row is already in the ledger.

GraphError is raised by the Graph client for non-2xx responses. Throttling
(429) gets its own subclass so tenacity can retry only that case:

    @retry(retry=retry_if_exception_type(RateLimitError), stop=stop_after_attempt(3))
    def send_mail(...):
        ...
"""

from enum import Enum


class OnboardingError(Exception):
    """Base exception for all onboarding errors."""

    pass


class FatalSetupError(OnboardingError):
    """Failure before any row is processed - aborts the run."""

    pass


class ConfigurationError(FatalSetupError):
    """Required settings are missing from the environment."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required settings: {', '.join(missing)}")


class AuthReason(str, Enum):
    MISSING_SECRET = "missing_secret"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"


class AuthError(FatalSetupError):
    """Client-credentials token could not be obtained."""

    def __init__(self, reason: AuthReason, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


class FetchReason(str, Enum):
    EMPTY_RESULT = "empty_result"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"


class FetchError(FatalSetupError):
    """Onboarding table rows could not be read."""

    def __init__(
        self, reason: FetchReason, detail: str = "", status_code: int | None = None
    ) -> None:
        self.reason = reason
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


class RowSkipped(OnboardingError):
    """Row cannot be processed. Informational, never fatal."""

    pass


class MissingFieldError(RowSkipped):
    """A mandatory field is empty after trimming whitespace."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"missing mandatory field: {field!r}")


class ProvisionError(OnboardingError):
    """Account creation failed (transport error or status >= 300)."""

    def __init__(self, upn: str, detail: str, status_code: int | None = None) -> None:
        self.upn = upn
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"failed to create user {upn}: {detail}")


class NotifyReason(str, Enum):
    CONTACT_FAILED = "contact_failed"
    EMAIL_FAILED = "email_failed"


class NotifyError(OnboardingError):
    """A parent contact or credential email failed."""

    def __init__(self, reason: NotifyReason, email: str, detail: str) -> None:
        self.reason = reason
        self.email = email
        self.detail = detail
        super().__init__(f"{reason.value} for {email}: {detail}")


class ContactError(OnboardingError):
    """Contact provisioner could not create the mail contact."""

    def __init__(self, detail: str, output: str = "") -> None:
        self.detail = detail
        self.output = output
        super().__init__(f"{detail}\nOutput: {output}" if output else detail)


class GraphError(OnboardingError):
    """Microsoft Graph returned a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class RateLimitError(GraphError):
    """Graph throttled the request (429) - safe to retry after backoff."""

    pass
