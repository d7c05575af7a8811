"""Pipeline driver: one sequential pass over the onboarding table."""

import json
from datetime import datetime, timezone
from pathlib import Path

from src.onboarding.accounts import AccountProvisioner
from src.onboarding.config import OnboardingConfig
from src.onboarding.contacts import (
    ContactProvisioner,
    LoggingContactProvisioner,
    PowerShellContactProvisioner,
)
from src.onboarding.errors import MissingFieldError, ProvisionError
from src.onboarding.graph import GraphClient
from src.onboarding.ledger import FileLedger, Ledger
from src.onboarding.logging import get_logger
from src.onboarding.models import ProvisionStatus, RowAction, RunSummary
from src.onboarding.notifier import ParentNotifier
from src.onboarding.schema import decode_row, validate

logger = get_logger(__name__)


class OnboardingPipeline:
    """Authenticate once, fetch once, then provision row by row.

    Setup failures (AuthError, FetchError) propagate to the caller. Row
    failures are logged and recorded in the summary, never raised.
    """

    def __init__(self, graph: GraphClient, provisioner: AccountProvisioner) -> None:
        self.graph = graph
        self.provisioner = provisioner

    def run(self) -> RunSummary:
        token = self.graph.get_token()
        rows = self.graph.fetch_rows(token)

        summary = RunSummary(total_rows=len(rows))
        for index, row in enumerate(rows):
            summary.record(self.process_row(token, index, row, summary))

        logger.info(
            "run_finished",
            total=summary.total_rows,
            created=summary.created,
            would_create=summary.would_create,
            already_processed=summary.already_processed,
            skipped=summary.skipped,
            failed=summary.failed,
            notify_failed=summary.notify_failed,
        )
        return summary

    def process_row(self, token, index, row, summary) -> RowAction:
        decoded = decode_row(row)
        if decoded.surplus_cells:
            logger.debug("row_surplus_cells", row_index=index, count=decoded.surplus_cells)
        if decoded.missing_columns:
            logger.debug(
                "row_short",
                row_index=index,
                missing_count=len(decoded.missing_columns),
                first_missing=decoded.missing_columns[0],
            )

        try:
            validate(decoded.fields)
        except MissingFieldError as e:
            logger.warning("row_skipped", row_index=index, field=e.field)
            return RowAction(row_index=index, action="skipped", reason=str(e))

        try:
            result = self.provisioner.provision(token, decoded.fields)
        except ProvisionError as e:
            logger.error(
                "user_creation_failed",
                row_index=index,
                upn=e.upn,
                status_code=e.status_code,
                error=e.detail,
            )
            return RowAction(row_index=index, action="failed", upn=e.upn, error=str(e))
        except Exception as e:
            # The account may already exist and be in the ledger
            logger.exception("row_failed_unexpectedly", row_index=index, error=str(e))
            return RowAction(
                row_index=index, action="failed", error=f"{type(e).__name__}: {e}"
            )

        upn = result.user_principal_name
        if result.status is ProvisionStatus.CREATED:
            logger.info("user_processed", row_index=index, upn=upn)
            if result.notify_error:
                summary.notify_failed += 1
        return RowAction(
            row_index=index,
            action=result.status.value,
            upn=upn,
            error=result.notify_error,
        )


def write_report(summary: RunSummary, report_dir: str | Path, mode: str) -> Path:
    """Write the run report as JSON. Contains no passwords."""
    reports_dir = Path(report_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)
    now = datetime.now(timezone.utc)
    report_path = reports_dir / f"onboarding_{now.strftime('%Y-%m-%d_%H%M%S')}.json"

    report = {
        "timestamp": now.isoformat(),
        "mode": mode,
        "summary": summary.model_dump(exclude={"actions"}),
        "actions": [a.model_dump(exclude_none=True) for a in summary.actions],
    }
    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return report_path


def build_pipeline(
    config: OnboardingConfig,
    dry_run: bool = True,
    ledger: Ledger | None = None,
    contacts: ContactProvisioner | None = None,
) -> OnboardingPipeline:
    """Wire the production collaborators from configuration."""
    graph = GraphClient(config)
    if contacts is None and dry_run:
        contacts = LoggingContactProvisioner()
    elif contacts is None:
        contacts = PowerShellContactProvisioner(
            script_path=config.contact_script_path,
            service_account_upn=config.service_account_upn,
            executable=config.pwsh_executable,
            timeout=config.contact_timeout_seconds,
        )
    notifier = ParentNotifier(
        graph=graph,
        contacts=contacts,
        service_account_upn=config.service_account_upn,
        logo_url=config.school_logo_url,
    )
    provisioner = AccountProvisioner(
        graph=graph,
        ledger=ledger if ledger is not None else FileLedger(config.ledger_path),
        notifier=notifier,
        domain=config.azure_domain,
        sender_email=config.sender_email,
        dry_run=dry_run,
    )
    return OnboardingPipeline(graph, provisioner)
