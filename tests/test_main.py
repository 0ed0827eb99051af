"""
Tests for the command-line interface.
"""

import json
import logging

import pytest

import main
from invoice_ocr.utils.logger import LOGGER_NAMESPACE


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def invoice_file(tmp_path, acme_invoice_text):
    path = tmp_path / "acme.txt"
    path.write_text(acme_invoice_text, encoding="utf-8")
    return path


def test_text_invoice_with_prefill(tmp_path, invoice_file):
    output = tmp_path / "out" / "results.json"

    exit_code = main.main(["--input", str(invoice_file), "--output", str(output), "--prefill", "-q"])

    assert exit_code == 0
    records = json.loads(output.read_text(encoding="utf-8"))
    assert len(records) == 1
    record = records[0]
    assert record['source_file'] == str(invoice_file)
    assert record['fields']['invoice_amount'] == {'value': '2340.00', 'confidence': 85}
    assert record['missing_fields'] == []
    # Fallback base 70 leaves the invoice number below the default threshold
    assert record['prefill']['invoice_number'] == ''
    assert record['prefill']['customer_name'] == 'Acme Supplies Pty Ltd'


def test_base_confidence_for_text_inputs(tmp_path, invoice_file):
    output = tmp_path / "results.json"

    exit_code = main.main([
        "-i", str(invoice_file), "-o", str(output),
        "--base-confidence", "90", "--threshold", "95", "--prefill", "-q",
    ])

    assert exit_code == 0
    prefill = json.loads(output.read_text(encoding="utf-8"))[0]['prefill']
    assert prefill['invoice_number'] == 'INV-20418'
    assert prefill['customer_abn'] == '57 184 923 115'
    assert prefill['invoice_amount'] == '2340.00'
    assert prefill['invoice_status'] == ''


def test_directory_input(tmp_path, acme_invoice_text):
    (tmp_path / "one.txt").write_text(acme_invoice_text, encoding="utf-8")
    (tmp_path / "two.txt").write_text("nothing useful", encoding="utf-8")
    (tmp_path / "readme.md").write_text("ignored", encoding="utf-8")
    output = tmp_path / "out.json"

    assert main.main(["-i", str(tmp_path), "-o", str(output), "-q"]) == 0

    records = json.loads(output.read_text(encoding="utf-8"))
    assert [record['source_file'].rsplit("/", 1)[-1] for record in records] == ["one.txt", "two.txt"]
    assert len(records[1]['missing_fields']) == 6
    assert records[1]['average_confidence'] == 0


def test_missing_input(tmp_path):
    assert main.main(["-i", str(tmp_path / "missing.pdf"), "-q"]) == 1


def test_unsupported_input(tmp_path):
    path = tmp_path / "invoice.docx"
    path.write_text("x")
    assert main.main(["-i", str(path), "-q"]) == 1


def test_empty_directory(tmp_path):
    assert main.main(["-i", str(tmp_path), "-o", str(tmp_path / "out.json"), "-q"]) == 1


def test_input_is_required():
    with pytest.raises(SystemExit):
        main.parse_arguments([])
