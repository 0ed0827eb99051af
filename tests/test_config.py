"""
Tests for configuration loading and logging setup.
"""

import logging

import pytest

from config import ConfigurationManager, get_config
from invoice_ocr.utils.helpers import collect_files, get_file_extension
from invoice_ocr.utils.logger import ColoredFormatter, LOGGER_NAMESPACE, get_logger, setup_logger


class TestConfiguration:

    def test_defaults(self):
        assert get_config("ocr.engine") == "tesseract"
        assert get_config("extraction.prefill_threshold") == 80
        assert get_config("extraction.fallback_base_confidence") == 70
        assert get_config("input.pdf.renderer") == "pymupdf"

    def test_missing_keys_return_default(self):
        assert get_config("ocr.nonexistent", "fallback") == "fallback"
        assert get_config("ocr.engine.too.deep") is None

    def test_singleton(self):
        assert ConfigurationManager() is ConfigurationManager()

    def test_custom_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("extraction:\n  prefill_threshold: 90\npaths:\n  outputs: out\n", encoding="utf-8")

        config = ConfigurationManager(str(path))

        assert config.get("extraction.prefill_threshold") == 90
        assert config.get("paths.outputs").endswith("out")
        assert config.get("paths.outputs") != "out"

    def test_reload_picks_up_changes(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("ocr:\n  engine: tesseract\n", encoding="utf-8")
        config = ConfigurationManager(str(path))

        path.write_text("ocr:\n  engine: pytesseract\n", encoding="utf-8")
        config.reload()

        assert config.get("ocr.engine") == "pytesseract"
        assert config.get_all() == {"ocr": {"engine": "pytesseract"}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(str(tmp_path / "absent.yaml"))


class TestLogging:

    def test_loggers_share_the_package_namespace(self):
        assert get_logger("pipeline").name == f"{LOGGER_NAMESPACE}.pipeline"
        assert get_logger("invoice_ocr.extraction.parser").name == "invoice_ocr.extraction.parser"

    def test_setup_logger_writes_to_file(self, tmp_path):
        log_file = tmp_path / "logs" / "ocr.log"

        logger = setup_logger(level="DEBUG", log_file=str(log_file), colorize=False)
        get_logger("tests").warning("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert "written to file" in log_file.read_text(encoding="utf-8")

        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_colored_formatter(self):
        record = logging.LogRecord("invoice_ocr", logging.ERROR, __file__, 1, "boom", None, None)
        formatted = ColoredFormatter("%(message)s").format(record)

        assert "boom" in formatted
        assert formatted.endswith(ColoredFormatter.RESET)


def test_collect_files(tmp_path):
    for name in ("a.PDF", "b.png", "notes.md", "c.txt"):
        (tmp_path / name).write_text("x")

    files = collect_files(tmp_path, [".pdf", ".png", ".txt"])

    assert [path.name for path in files] == ["a.PDF", "b.png", "c.txt"]
    assert get_file_extension("scan.TIFF") == ".tiff"
