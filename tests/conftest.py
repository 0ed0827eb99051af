"""
Pytest configuration and fixtures.
"""

import io

import pytest
from PIL import Image

from config import ConfigurationManager
from invoice_ocr.ocr_engine import OCRResult


@pytest.fixture(autouse=True)
def reset_configuration():
    """Give every test a freshly loaded default configuration."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


class FakeOCRBackend:
    """OCR backend returning canned results, one per call."""

    name = "fake"

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def extract(self, image):
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        if isinstance(result, Exception):
            raise result
        return result


class FakePDFProcessor:
    """PDF processor returning blank pages without rendering anything."""

    def __init__(self, page_count=1):
        self.page_count = page_count

    def process(self, data, name="document.pdf"):
        pages = [Image.new('RGB', (40, 40), 'white') for _ in range(self.page_count)]
        return pages, {'page_count': len(pages)}


@pytest.fixture
def blank_image():
    return Image.new('RGB', (60, 40), 'white')


@pytest.fixture
def png_bytes(blank_image):
    buffer = io.BytesIO()
    blank_image.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def make_backend():
    def _make(text="", confidence=0.0, *more):
        results = [OCRResult(text=text, confidence=confidence, engine="fake")]
        results.extend(more)
        return FakeOCRBackend(*results)
    return _make


@pytest.fixture
def acme_invoice_text():
    return (
        "TAX INVOICE\n"
        "Invoice No: INV-20418\n"
        "Bill To\n"
        "Acme Supplies Pty Ltd\n"
        "12 Smith Street\n"
        "ABN: 57 184 923 115\n"
        "Invoice Date: 18/02/2026\n"
        "Due Date: 20/03/2026\n"
        "Total Due: $2,340.00\n"
    )
