"""Microsoft Graph client for the onboarding run.

Covers the four calls the job makes: client-credentials token, workbook
table rows, user creation and sendMail. Every request carries an explicit
timeout so a hung connection cannot stall the batch.
"""

from typing import Any

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.onboarding.config import GRAPH_BASE, GRAPH_SCOPE, OnboardingConfig
from src.onboarding.errors import (
    AuthError,
    AuthReason,
    FetchError,
    FetchReason,
    GraphError,
    RateLimitError,
)
from src.onboarding.logging import get_logger

logger = get_logger(__name__)


def raise_for_graph_status(resp: requests.Response) -> None:
    """Translate a non-2xx Graph response into the GraphError hierarchy."""
    if resp.status_code < 300:
        return
    message = resp.text[:300]
    if resp.status_code == 429:
        raise RateLimitError(resp.status_code, message)
    raise GraphError(resp.status_code, message)


class GraphClient:
    """Thin wrapper around a requests Session pointed at Graph v1.0."""

    def __init__(
        self,
        config: OnboardingConfig,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.timeout = config.request_timeout_seconds

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def get_token(self) -> str:
        """Get an app-only access token using client credentials flow.

        Raises:
            AuthError: Secret missing, transport failure, or no access_token.
        """
        if not self.config.azure_client_secret:
            raise AuthError(
                AuthReason.MISSING_SECRET, "AZURE_CLIENT_SECRET not set in environment"
            )

        data = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            "client_secret": self.config.azure_client_secret,
            "scope": GRAPH_SCOPE,
        }
        try:
            resp = self.session.post(
                self.config.token_url, data=data, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise AuthError(AuthReason.NETWORK_FAILURE, str(e)) from e

        try:
            body = resp.json()
        except ValueError as e:
            raise AuthError(
                AuthReason.MALFORMED_RESPONSE, f"{resp.status_code}: {resp.text[:200]}"
            ) from e

        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            # error/error_description from AAD, never the secret
            detail = body.get("error_description", body) if isinstance(body, dict) else body
            raise AuthError(AuthReason.MALFORMED_RESPONSE, f"no access_token in response: {detail}")

        logger.info("authenticated", tenant_id=self.config.tenant_id)
        return token

    def fetch_rows(self, token: str) -> list[list[Any]]:
        """Read all rows of the onboarding table.

        Only the first page is requested; Graph returns the whole table for
        the sizes a Forms export reaches.

        Raises:
            FetchError: Transport failure (NETWORK_FAILURE), error status or bad
                envelope (MALFORMED_RESPONSE), or zero rows (EMPTY_RESULT).
        """
        table = self.config.workbook_table
        url = (
            f"{GRAPH_BASE}/drives/{self.config.drive_id}/items/{self.config.file_id}"
            f"/workbook/tables/{table}/rows"
        )
        try:
            resp = self.session.get(
                url, headers=self._headers(token), timeout=self.timeout
            )
            raise_for_graph_status(resp)
            data = resp.json()
        except requests.RequestException as e:
            raise FetchError(FetchReason.NETWORK_FAILURE, str(e)) from e
        except GraphError as e:
            raise FetchError(
                FetchReason.MALFORMED_RESPONSE, f"HTTP {e}", status_code=e.status_code
            ) from e
        except ValueError as e:
            raise FetchError(FetchReason.MALFORMED_RESPONSE, "response is not JSON") from e

        if not isinstance(data, dict) or not isinstance(data.get("value"), list):
            raise FetchError(FetchReason.MALFORMED_RESPONSE, "missing 'value' collection")

        entries = data["value"]
        if not entries:
            raise FetchError(FetchReason.EMPTY_RESULT, "no rows found in table")

        rows = []
        for i, entry in enumerate(entries):
            try:
                row = entry["values"][0]
            except (KeyError, IndexError, TypeError) as e:
                raise FetchError(
                    FetchReason.MALFORMED_RESPONSE, f"row {i} has no values"
                ) from e
            if not isinstance(row, list):
                raise FetchError(FetchReason.MALFORMED_RESPONSE, f"row {i} is not a list")
            rows.append(row)

        logger.info("rows_fetched", table=table, count=len(rows))
        return rows

    def create_user(self, token: str, body: dict[str, Any]) -> requests.Response:
        """POST /users. Never retried: a replay could race the first attempt."""
        return self.session.post(
            f"{GRAPH_BASE}/users",
            headers=self._headers(token),
            json=body,
            timeout=self.timeout,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=2, min=2, max=30),
        retry=retry_if_exception_type(RateLimitError),
        reraise=True,
    )
    def send_mail(self, token: str, sender_upn: str, message: dict[str, Any]) -> None:
        """POST /users/{sender}/sendMail.

        Retries on 429 only, which Graph returns before accepting the message.

        Raises:
            GraphError: Non-2xx response.
            requests.RequestException: Transport failure.
        """
        resp = self.session.post(
            f"{GRAPH_BASE}/users/{sender_upn}/sendMail",
            headers=self._headers(token),
            json=message,
            timeout=self.timeout,
        )
        if resp.status_code == 429:
            logger.warning("send_mail_throttled", sender=sender_upn)
        raise_for_graph_status(resp)
