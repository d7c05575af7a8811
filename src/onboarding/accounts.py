"""Student account provisioning in Entra ID."""

import secrets

import requests

from src.onboarding.errors import NotifyError, ProvisionError
from src.onboarding.graph import GraphClient
from src.onboarding.ledger import Ledger
from src.onboarding.logging import get_logger
from src.onboarding.models import ProvisionResult, ProvisionStatus, StudentIdentity
from src.onboarding.notifier import ParentNotifier
from src.onboarding.schema import (
    ACCOUNT_TYPE,
    CLASS,
    FIRST_NAME,
    LAST_NAME,
    PREFERRED_NAME,
)

logger = get_logger(__name__)

PASSWORD_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*"
PASSWORD_LENGTH = 16


def generate_password(length=PASSWORD_LENGTH):
    """Generate a random temporary password.

    Independent draws with replacement from PASSWORD_ALPHABET.
    """
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def derive_identity(mapping: dict[str, str], domain: str) -> StudentIdentity:
    """Derive username, UPN and display name from a validated row.

    Format: firstname.lastname@domain (lowercase). Names are used as
    entered on the form.
    """
    first_name = mapping.get(FIRST_NAME, "")
    last_name = mapping.get(LAST_NAME, "")
    preferred_name = mapping.get(PREFERRED_NAME, "")

    username = f"{first_name}.{last_name}".lower()
    return StudentIdentity(
        given_name=first_name,
        surname=last_name,
        username=username,
        user_principal_name=f"{username}@{domain}",
        display_name=preferred_name or f"{first_name} {last_name}",
        password=generate_password(),
    )


def build_user_body(identity: StudentIdentity, mapping: dict[str, str]) -> dict:
    """Request body for POST /users."""
    return {
        "accountEnabled": True,
        "displayName": identity.display_name,
        "givenName": identity.given_name,
        "surname": identity.surname,
        "mailNickname": identity.username,
        "userPrincipalName": identity.user_principal_name,
        "jobTitle": mapping.get(ACCOUNT_TYPE, ""),
        "department": mapping.get(CLASS, ""),
        "passwordProfile": {
            "forceChangePasswordNextSignIn": True,
            "password": identity.password,
        },
    }


class AccountProvisioner:
    """Creates one account per row, at most once per userPrincipalName."""

    def __init__(
        self,
        graph: GraphClient,
        ledger: Ledger,
        notifier: ParentNotifier,
        domain: str,
        sender_email: str,
        dry_run: bool = False,
    ) -> None:
        self.graph = graph
        self.ledger = ledger
        self.notifier = notifier
        self.domain = domain
        self.sender_email = sender_email
        self.dry_run = dry_run

    def provision(self, token: str, mapping: dict[str, str]) -> ProvisionResult:
        """Create the student account and notify the parents.

        A upn already in the ledger short-circuits: no Graph call, no
        notification. The returned password is then a fresh one that was
        never set on the account.

        Raises:
            ProvisionError: Account creation failed; the row is not marked.
        """
        identity = derive_identity(mapping, self.domain)
        upn = identity.user_principal_name

        if self.ledger.is_processed(upn):
            logger.info("user_already_processed", upn=upn)
            return ProvisionResult(
                user_principal_name=upn,
                password=identity.password,
                status=ProvisionStatus.ALREADY_PROCESSED,
            )

        if self.dry_run:
            logger.info("user_would_be_created", upn=upn, display_name=identity.display_name)
            return ProvisionResult(
                user_principal_name=upn,
                password=identity.password,
                status=ProvisionStatus.WOULD_CREATE,
            )

        body = build_user_body(identity, mapping)
        try:
            resp = self.graph.create_user(token, body)
        except requests.RequestException as e:
            raise ProvisionError(upn, str(e)) from e

        logger.debug("graph_response", upn=upn, status_code=resp.status_code, body=resp.text[:500])
        if resp.status_code >= 300:
            raise ProvisionError(
                upn, f"{resp.status_code}: {resp.text[:300]}", status_code=resp.status_code
            )

        logger.info("user_created", upn=upn)
        self.ledger.mark_processed(upn)

        result = ProvisionResult(
            user_principal_name=upn,
            password=identity.password,
            status=ProvisionStatus.CREATED,
        )
        try:
            self.notifier.notify(token, mapping, upn, identity.password, self.sender_email)
        except NotifyError as e:
            logger.error(
                "parent_notification_failed",
                upn=upn,
                reason=e.reason.value,
                email=e.email,
                error=e.detail,
            )
            result.notify_error = str(e)
        return result
