"""Tests for structured logging."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from seacost.logging import (
    JSONFormatter,
    get_batch_id,
    get_calculator,
    get_logger,
    log_context,
    setup_logging,
)


class TestLogContext:
    """Tests for scoped context variables."""

    def test_sets_and_restores(self) -> None:
        """Context is visible inside the block and restored after."""
        assert get_batch_id() is None

        with log_context(batch_id="LOT-1", calculator="packaging"):
            assert get_batch_id() == "LOT-1"
            assert get_calculator() == "packaging"

            with log_context(calculator="yield"):
                assert get_batch_id() == "LOT-1"
                assert get_calculator() == "yield"

            assert get_calculator() == "packaging"

        assert get_batch_id() is None
        assert get_calculator() is None


class TestJSONFormatter:
    """Tests for JSON log lines."""

    def test_includes_context(self) -> None:
        """Batch ID and calculator are added to the record."""
        record = logging.LogRecord("seacost.test", logging.WARNING, __file__, 1, "hello", None, None)
        record.extra = {"final_weight": 891.16}

        with log_context(batch_id="LOT-9", calculator="yield"):
            line = json.loads(JSONFormatter().format(record))

        assert line["level"] == "WARNING"
        assert line["message"] == "hello"
        assert line["batch_id"] == "LOT-9"
        assert line["calculator"] == "yield"
        assert line["extra"] == {"final_weight": 891.16}


class TestSetupLogging:
    """Tests for logger configuration."""

    def test_file_handler(self, temp_dir: Path) -> None:
        """Log calls with keyword context land in the JSON file."""
        log_file = temp_dir / "logs" / "seacost.jsonl"
        setup_logging("DEBUG", log_file=log_file, console_output=False)
        try:
            get_logger("tests").info("Batch cost computed", total_cost=5610.71)
            for handler in logging.getLogger("seacost").handlers:
                handler.flush()

            line = json.loads(log_file.read_text().splitlines()[-1])
            assert line["logger"] == "seacost.tests"
            assert line["extra"]["total_cost"] == 5610.71
        finally:
            for handler in logging.getLogger("seacost").handlers:
                handler.close()
            setup_logging()


class _Collector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


class TestContextLogger:
    """Tests for keyword context on log calls."""

    def test_context_and_keywords_in_extra(self) -> None:
        """Scoped context and call keywords share one payload."""
        setup_logging("DEBUG", console_output=False)
        collector = _Collector()
        logging.getLogger("seacost").addHandler(collector)
        try:
            with log_context(batch_id="LOT-3", calculator="pricing"):
                get_logger("tests").warning("Priced", selling_price_per_kg=8.89)

            record = collector.records[-1]
            assert record.name == "seacost.tests"
            assert record.levelno == logging.WARNING
            assert record.extra == {
                "batch_id": "LOT-3",
                "calculator": "pricing",
                "selling_price_per_kg": 8.89,
            }
        finally:
            setup_logging()

    def test_name_is_namespaced(self) -> None:
        """Loggers outside the package are moved under seacost."""
        setup_logging("DEBUG", console_output=False)
        collector = _Collector()
        logging.getLogger("seacost").addHandler(collector)
        try:
            get_logger("scripts.import").debug("hello")
            assert collector.records[-1].name == "seacost.scripts.import"
        finally:
            setup_logging()
