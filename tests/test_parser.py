"""
Tests for the full text parser and the prefill projection.
"""

import json

import pytest

from invoice_ocr import (
    InvoiceFormPrefillValues,
    InvoiceOcrResult,
    OcrField,
    parse_invoice_text,
    to_invoice_form_prefill_values,
    to_prefill_values,
)


class TestParseInvoiceText:

    def test_complete_invoice(self, acme_invoice_text):
        result = parse_invoice_text(acme_invoice_text, base_confidence=82)

        assert result.invoice_number == OcrField("INV-20418", 90)
        assert result.customer_name == OcrField("Acme Supplies Pty Ltd", 96)
        assert result.customer_abn == OcrField("57 184 923 115", 88)
        assert result.issue_date == OcrField("2026-02-18", 100)
        assert result.due_date == OcrField("2026-03-20", 100)
        assert result.invoice_amount == OcrField("2340.00", 97)
        assert result.invoice_status == OcrField()
        assert result.missing_fields == []

    def test_parsing_is_deterministic(self, acme_invoice_text):
        first = parse_invoice_text(acme_invoice_text, 82)
        second = parse_invoice_text(acme_invoice_text, 82)

        assert first == second
        assert first.to_json() == second.to_json()

    def test_default_base_confidence(self):
        result = parse_invoice_text("Invoice No: INV-1001")
        assert result.invoice_number == OcrField("INV-1001", 83)

    def test_net_terms_due_date(self):
        text = "INVOICE\nDate Issued: 2026-01-20\nPayment Terms: Net 30\nTotal: 100.00"
        result = parse_invoice_text(text, base_confidence=75)

        assert result.issue_date == OcrField("2026-01-20", 94)
        assert result.due_date == OcrField("2026-02-19", 86)

    def test_low_base_confidence_empties_weak_fields(self):
        result = parse_invoice_text("Period 01/02/2026", base_confidence=0)
        assert result.issue_date == OcrField()

        result = parse_invoice_text("Period 01/02/2026", base_confidence=75)
        assert result.issue_date == OcrField("2026-02-01", 70)

    @pytest.mark.parametrize("text", [None, "", "   \n\t", "%%%% ????", "0" * 500, "Total: 12.00\n" * 30])
    @pytest.mark.parametrize("base", [-50, 0, 40, 75, 100, 250])
    def test_confidence_bounds_and_empty_values(self, text, base):
        result = parse_invoice_text(text, base_confidence=base)

        for field in result.fields.values():
            assert 0 <= field.confidence <= 100
            assert (field.value is None) == (field.confidence == 0)
        assert result.invoice_status == OcrField()

    def test_empty_text_gives_empty_result(self):
        assert parse_invoice_text("") == InvoiceOcrResult.empty()
        assert parse_invoice_text(None) == InvoiceOcrResult.empty()

    def test_result_serialization(self, acme_invoice_text):
        result = parse_invoice_text(acme_invoice_text, 82)
        payload = json.loads(result.to_json())

        assert set(payload) == {
            'invoice_number', 'customer_name', 'customer_abn',
            'issue_date', 'due_date', 'invoice_amount', 'invoice_status',
        }
        assert payload['invoice_amount'] == {'value': '2340.00', 'confidence': 97}
        assert payload['invoice_status'] == {'value': None, 'confidence': 0}

    def test_summary_properties(self):
        result = parse_invoice_text("Invoice No: INV-1001\nABN: 57 184 923 115", 75)

        assert result.extracted_fields == {
            'invoice_number': 'INV-1001',
            'customer_abn': '57 184 923 115',
        }
        assert result.average_confidence == pytest.approx(82)
        assert 'customer_name' in result.missing_fields
        assert InvoiceOcrResult.empty().average_confidence == 0


class TestPrefill:

    def _result(self, confidence):
        return InvoiceOcrResult(
            invoice_number=OcrField("INV-1", confidence),
            invoice_amount=OcrField("10.00", 95),
        )

    def test_threshold_is_inclusive(self):
        assert to_prefill_values(self._result(79)).invoice_number == ''
        assert to_prefill_values(self._result(80)).invoice_number == 'INV-1'

    def test_missing_fields_are_empty_strings(self):
        values = to_prefill_values(self._result(90))

        assert values == InvoiceFormPrefillValues(invoice_number='INV-1', invoice_amount='10.00')
        assert values.invoice_status == ''

    def test_threshold_is_clamped(self):
        assert to_prefill_values(self._result(100), threshold=400).invoice_number == 'INV-1'
        assert to_prefill_values(self._result(1), threshold=-10).invoice_number == 'INV-1'

    def test_end_to_end(self, acme_invoice_text):
        result = parse_invoice_text(acme_invoice_text, base_confidence=82)
        values = to_invoice_form_prefill_values(result, threshold=80)

        assert values.to_dict() == {
            'invoice_number': 'INV-20418',
            'customer_name': 'Acme Supplies Pty Ltd',
            'customer_abn': '57 184 923 115',
            'issue_date': '2026-02-18',
            'due_date': '2026-03-20',
            'invoice_amount': '2340.00',
            'invoice_status': '',
        }
