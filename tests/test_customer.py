"""
Tests for customer name extraction and the name plausibility helpers.
"""

import pytest

from invoice_ocr.extraction.customer import (
    LabeledValue,
    extract_labeled_value,
    find_customer_name,
    is_address_or_meta_line,
    is_likely_customer_name,
    normalize_customer_name,
    score_customer_name_candidate,
)


def _found(text):
    found = find_customer_name(text)
    return found.value, found.confidence


class TestHelpers:

    def test_extract_labeled_value(self):
        assert extract_labeled_value("Bill To: Acme Pty Ltd") == LabeledValue("billto", "Acme Pty Ltd")
        assert extract_labeled_value("Customer - Globex") == LabeledValue("customer", "Globex")
        assert extract_labeled_value("No separator here") == LabeledValue()

    def test_normalize_strips_merged_label_and_abn_clause(self):
        assert normalize_customer_name("Customer ACME Pty Ltd ABN 11 111 111 111") == "ACME Pty Ltd"
        assert normalize_customer_name("Bill To: Globex Corporation;") == "Globex Corporation"
        assert normalize_customer_name("'Initech Pty Ltd'") == "Initech Pty Ltd"

    @pytest.mark.parametrize("line", [
        "12 King Street",
        "PO Box 44",
        "accounts@acme.com.au",
        "www.acme.com.au",
        "Phone 02 9999 0000",
        "123 456",
        "",
    ])
    def test_address_and_meta_lines(self, line):
        assert is_address_or_meta_line(line)

    @pytest.mark.parametrize("line", ["West Coast Trading Pty Ltd", "Stanley Street Bakery"])
    def test_names_are_not_meta_lines(self, line):
        assert not is_address_or_meta_line(line)

    @pytest.mark.parametrize("value", ["Customer", "Bill To", "PAYMENT ADVICE", "AB", "Acme 12345", "Account No"])
    def test_unlikely_names(self, value):
        assert not is_likely_customer_name(value)
        assert score_customer_name_candidate(value) == -1

    def test_score_prefers_company_names(self):
        assert score_customer_name_candidate("ACME PTY LTD") == 9
        assert score_customer_name_candidate("Acme Components Pty Ltd") == 8
        assert score_customer_name_candidate("pay.com.au") == 2


class TestFindCustomerName:

    def test_bill_to_block(self):
        text = """
          TAX INVOICE
          Bill To
          Northwind Trade Co Pty Ltd
          88 George Street
          Sydney NSW 2000

          Invoice Date: 01/02/2026
          Please pay by 15 Mar 2026
          Total: $1,000.00
        """
        assert _found(text) == ("Northwind Trade Co Pty Ltd", 89)

    def test_label_and_value_on_one_line(self):
        assert _found("INVOICE TO: Acme Supplies Pty Ltd\nABN: 57 184 923 115") == ("Acme Supplies Pty Ltd", 92)
        assert _found("Customer Name: Bright Line Retail\nTotal: $670.00") == ("Bright Line Retail", 92)

    def test_names_with_street_like_substrings(self):
        text = "Bill To\nWest Coast Trading Pty Ltd\n12 King Street\nPerth WA 6000"
        assert _found(text) == ("West Coast Trading Pty Ltd", 89)

    def test_customer_section_beats_supplier_section(self):
        text = """
          FROM: Payee Holdings Pty Ltd
          ABN: 11 111 111 111
          99 Collins Street Melbourne VIC 3000

          INVOICE
          Blll T0
          Customer One Manufacturing Pty Ltd
          22 River Road Brisbane QLD 4000
        """
        value, confidence = _found(text)
        assert value == "One Manufacturing Pty Ltd"
        assert confidence == 93

    def test_from_block_followed_by_bill_to(self):
        text = "FROM: Globex Supplies Pty Ltd\n\nBill To\nInitech Systems Pty Ltd"
        assert _found(text) == ("Initech Systems Pty Ltd", 89)

    def test_generic_label_is_never_the_name(self):
        text = "INVOICE\nBill To\nCustomer\nAcme Components Pty Ltd\nInvoice Date: 06/03/2026"
        assert _found(text) == ("Acme Components Pty Ltd", 89)

    def test_merged_customer_prefix_is_stripped(self):
        text = "INVOICE\nBill To\nCustomer Pay.com.au Limited\nInvoice Date: 10/03/2026"
        assert _found(text) == ("Pay.com.au Limited", 89)

    def test_payment_advice_line_is_not_a_name(self):
        text = """
          INVOICE
          Invoice Number: INV-8842
          PAYMENT ADVICE Account Number 10231

          Bill To
          Delta Manufacturing Pty Ltd
        """
        assert _found(text) == ("Delta Manufacturing Pty Ltd", 89)

    def test_customer_label_and_domain_value_on_one_line(self):
        text = "Swivel Group Pty Ltd\nCustomer pay.com.au\nInvoice Number INV-2982\nAmount Due 10,890.00"
        assert _found(text) == ("pay.com.au", 93)

    def test_value_below_stacked_labels(self):
        text = """
          Swivel Group Pty Ltd
          Customer
          Invoice Number
          Amount Due
          pay.com.au
          INV-2982
          10,890.00
        """
        assert _found(text) == ("pay.com.au", 89)

    def test_free_standing_name_without_anchor(self):
        text = "TAX INVOICE\nInvoice No: INV-1001\nDate: 01/02/2026\nHarbour Freight Logistics Pty Ltd\nTotal: $500.00"
        assert _found(text) == ("Harbour Freight Logistics Pty Ltd", 76)

    def test_free_standing_name_near_anchor(self):
        text = "Acme Holdings Pty Ltd\nPO Box 12\nClient\nInvoice Date: 01/02/2026\nTotal: 50.00"
        assert _found(text) == ("Acme Holdings Pty Ltd", 82)

    def test_last_resort_after_anchor(self):
        assert _found("Client\nBob 123 Dates") == ("Bob 123 Dates", 79)

    @pytest.mark.parametrize("text", ["", "Customer", "Bill To\n12 King Street", "\n\n\n"])
    def test_miss(self, text):
        assert _found(text) == (None, 0)
