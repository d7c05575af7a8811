from __future__ import annotations

from pathlib import Path

from src.onboarding.ledger import FileLedger, MemoryLedger


def test_missing_file_means_nothing_processed(tmp_path: Path) -> None:
    ledger = FileLedger(tmp_path / "processed.log")

    assert ledger.is_processed("anna.bianchi@school.example") is False
    assert not (tmp_path / "processed.log").exists()


def test_mark_processed_creates_and_appends(tmp_path: Path) -> None:
    path = tmp_path / "processed.log"
    ledger = FileLedger(path)

    ledger.mark_processed("anna.bianchi@school.example")
    ledger.mark_processed("maria.rossi@school.example")

    assert path.read_text(encoding="utf-8") == (
        "anna.bianchi@school.example\nmaria.rossi@school.example\n"
    )
    assert ledger.is_processed("anna.bianchi@school.example")
    assert ledger.is_processed("maria.rossi@school.example")


def test_is_processed_matches_whole_lines_only(tmp_path: Path) -> None:
    path = tmp_path / "processed.log"
    path.write_text("joanna.bianchi@school.example\n", encoding="utf-8")
    ledger = FileLedger(path)

    assert ledger.is_processed("anna.bianchi@school.example") is False
    assert ledger.is_processed("joanna.bianchi@school.example") is True


def test_existing_entries_survive_new_ledger_instance(tmp_path: Path) -> None:
    path = tmp_path / "processed.log"
    FileLedger(path).mark_processed("anna.bianchi@school.example")

    assert FileLedger(path).is_processed("anna.bianchi@school.example")


def test_write_failure_is_swallowed(tmp_path: Path) -> None:
    # A directory cannot be opened for append
    ledger = FileLedger(tmp_path)

    ledger.mark_processed("anna.bianchi@school.example")

    assert ledger.is_processed("anna.bianchi@school.example") is False


def test_memory_ledger() -> None:
    ledger = MemoryLedger({"maria.rossi@school.example"})

    assert ledger.is_processed("maria.rossi@school.example")
    assert not ledger.is_processed("anna.bianchi@school.example")
    ledger.mark_processed("anna.bianchi@school.example")
    assert ledger.is_processed("anna.bianchi@school.example")


def test_non_utf8_lines_do_not_break_lookup(tmp_path: Path) -> None:
    path = tmp_path / "processed.log"
    # A line appended by hand in Latin-1
    path.write_bytes(b"j\xfcrgen.m\xfcller@school.example\nanna.bianchi@school.example\n")
    ledger = FileLedger(path)

    assert ledger.is_processed("anna.bianchi@school.example") is True
    assert ledger.is_processed("maria.rossi@school.example") is False

    ledger.mark_processed("maria.rossi@school.example")
    assert ledger.is_processed("maria.rossi@school.example") is True
