"""Student account onboarding.

Reads Microsoft Forms onboarding responses from a workbook table, creates
Entra ID student accounts and mails the credentials to the parents.
"""

from src.onboarding.accounts import AccountProvisioner, derive_identity, generate_password
from src.onboarding.ledger import FileLedger, Ledger, MemoryLedger
from src.onboarding.notifier import ParentNotifier
from src.onboarding.pipeline import OnboardingPipeline, build_pipeline

__all__ = [
    "AccountProvisioner",
    "FileLedger",
    "Ledger",
    "MemoryLedger",
    "OnboardingPipeline",
    "ParentNotifier",
    "build_pipeline",
    "derive_identity",
    "generate_password",
]
