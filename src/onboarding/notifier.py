"""Parent notification: mail contact plus credential email per parent slot."""

import requests

from src.onboarding.contacts import ContactProvisioner
from src.onboarding.email import build_message
from src.onboarding.errors import ContactError, GraphError, NotifyError, NotifyReason
from src.onboarding.graph import GraphClient
from src.onboarding.logging import get_logger
from src.onboarding.models import ParentRecord
from src.onboarding.schema import CLASS, PARENT_SLOTS

logger = get_logger(__name__)


def extract_parents(mapping: dict[str, str]) -> list[ParentRecord]:
    """Return both parent slots in order, present or not."""
    parents = []
    for slot, first, last, email, phone in PARENT_SLOTS:
        parents.append(
            ParentRecord(
                slot=slot,
                name=f"{mapping.get(first, '')} {mapping.get(last, '')}",
                email=mapping.get(email, ""),
                phone=mapping.get(phone, ""),
            )
        )
    return parents


class ParentNotifier:
    """Creates a contact and sends the credential email for each parent.

    Slots are handled strictly in order and the first failure stops the
    fan-out. Nothing done for an earlier slot is rolled back.
    """

    def __init__(
        self,
        graph: GraphClient,
        contacts: ContactProvisioner,
        service_account_upn: str,
        logo_url: str,
    ) -> None:
        self.graph = graph
        self.contacts = contacts
        self.service_account_upn = service_account_upn
        self.logo_url = logo_url

    def notify(
        self,
        token: str,
        mapping: dict[str, str],
        upn: str,
        password: str,
        sender_email: str,
    ) -> None:
        """Notify every present parent of the student's credentials.

        Raises:
            NotifyError: CONTACT_FAILED or EMAIL_FAILED for the failing parent.
        """
        class_name = mapping.get(CLASS, "")

        for parent in extract_parents(mapping):
            if not parent.is_present:
                continue

            try:
                self.contacts.create_contact(parent.name, parent.email, class_name)
            except ContactError as e:
                raise NotifyError(NotifyReason.CONTACT_FAILED, parent.email, str(e)) from e

            message = build_message(
                parent_email=parent.email,
                sender_email=sender_email,
                user_principal_name=upn,
                password=password,
                logo_url=self.logo_url,
            )
            try:
                self.graph.send_mail(token, self.service_account_upn, message)
            except (GraphError, requests.RequestException) as e:
                raise NotifyError(NotifyReason.EMAIL_FAILED, parent.email, str(e)) from e

            logger.info("parent_email_sent", upn=upn, parent_slot=parent.slot, email=parent.email)
