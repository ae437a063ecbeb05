"""Tests for logging configuration."""

import json
import logging

from tourops.logging_config import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="tourops.domain.proposal",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Confirmed proposal %s",
        args=("TOMS-2024-1000",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_fields():
    """Test JSON log lines carry the message and known extras."""
    data = json.loads(JSONFormatter().format(_record(proposal_id="p-1")))

    assert data["level"] == "INFO"
    assert data["logger"] == "tourops.domain.proposal"
    assert data["message"] == "Confirmed proposal TOMS-2024-1000"
    assert data["proposal_id"] == "p-1"
    assert "voucher_number" not in data


def test_setup_logging_writes_to_current_stderr(capsys):
    """Test records go to whatever sys.stderr is when they are emitted."""
    setup_logging("INFO")
    try:
        logging.getLogger("tourops.test").info("hello")
        assert "[tourops.test] INFO: hello" in capsys.readouterr().err
    finally:
        setup_logging("WARNING")


def test_setup_logging_quiets_sqlalchemy():
    """Test SQL statement logging stays off even at DEBUG."""
    setup_logging("DEBUG")
    try:
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        setup_logging("WARNING")
