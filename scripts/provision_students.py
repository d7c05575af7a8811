"""
Provision Microsoft 365 accounts for new students from the onboarding form.

Reads the Microsoft Forms responses table from the onboarding workbook,
creates one Entra ID account per student, registers each parent as an
Exchange contact and emails the parents the temporary credentials.

Usage:
    python scripts/provision_students.py                # dry-run (default)
    python scripts/provision_students.py --dry-run      # explicit dry-run
    python scripts/provision_students.py --execute      # create accounts for real

Pre-requisites:
    - App registration must have User.ReadWrite.All, Files.Read.All and
      Mail.Send (application) permissions, with admin consent
    - .env with TENANT_ID, CLIENT_ID, AZURE_CLIENT_SECRET, DRIVE_ID, FILE_ID,
      SERVICE_ACCOUNT_UPN, SENDER_EMAIL
    - pwsh and the contact script (CONTACT_SCRIPT_PATH) for --execute

Already provisioned students are listed in processed.log and skipped.
Only one run may execute at a time.

Exit codes:
  0 = run completed (individual rows may have failed, see the report)
  1 = setup failure (configuration, authentication, table fetch)
"""

import argparse
import io
import os
import sys

from dotenv import load_dotenv

# Fix Windows console encoding for accented characters
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.onboarding.config import get_config  # noqa: E402
from src.onboarding.errors import FatalSetupError  # noqa: E402
from src.onboarding.logging import get_logger, setup_logging  # noqa: E402
from src.onboarding.pipeline import build_pipeline, write_report  # noqa: E402

logger = get_logger("provision_students")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Provision Microsoft 365 accounts for students from onboarding forms"
    )
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=True,
        help="Preview what would happen without making changes (default)",
    )
    mode_group.add_argument(
        "--execute",
        action="store_true",
        help="Create accounts, contacts and send parent emails",
    )
    parser.add_argument(
        "--ledger",
        default=None,
        help="Path to the processed-rows ledger (default: LEDGER_PATH or processed.log)",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Directory for the JSON run report (default: REPORT_DIR or reports)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    config = get_config()
    if args.ledger:
        config.ledger_path = args.ledger
    if args.report_dir:
        config.report_dir = args.report_dir

    setup_logging(json_output=config.log_json, log_level=config.log_level)

    is_dry_run = not args.execute
    mode = "dry-run" if is_dry_run else "execute"
    logger.info("run_started", mode=mode, domain=config.azure_domain, ledger=config.ledger_path)

    try:
        config.require_live_settings()
        pipeline = build_pipeline(config, dry_run=is_dry_run)
        summary = pipeline.run()
    except FatalSetupError as e:
        logger.error("run_aborted", error_type=type(e).__name__, error=str(e))
        return 1

    report_path = write_report(summary, config.report_dir, mode)
    logger.info("report_written", path=str(report_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
