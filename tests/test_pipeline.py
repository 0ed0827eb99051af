"""
Tests for source routing and the asynchronous extraction entry point.
"""

import asyncio

import pytest

from invoice_ocr import InvoiceOcrPipeline, InvoiceOcrResult, OcrField, extract_from_source
from invoice_ocr.input_handler import InputHandler
from invoice_ocr.ocr_engine import OCREngine, OCRResult
from invoice_ocr.utils.exceptions import (
    CorruptedFileError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)

from conftest import FakeOCRBackend, FakePDFProcessor

INVOICE_LINE = "Invoice No: INV-1001"


def run(coroutine):
    return asyncio.run(coroutine)


class TestExtractFromSource:

    def test_text_source_uses_fallback_base(self):
        result = run(extract_from_source(INVOICE_LINE))
        assert result.invoice_number == OcrField("INV-1001", 78)

    def test_image_bytes_use_ocr_confidence(self, png_bytes, make_backend):
        backend = make_backend(INVOICE_LINE, 90)

        result = run(extract_from_source(png_bytes, "image/png", ocr_engine=backend))

        assert result.invoice_number == OcrField("INV-1001", 98)
        assert backend.calls == 1

    def test_pdf_pages_average_their_confidence(self):
        backend = FakeOCRBackend(
            OCRResult(text="TAX INVOICE", confidence=80),
            OCRResult(text=INVOICE_LINE, confidence=90),
        )
        handler = InputHandler(pdf_processor=FakePDFProcessor(page_count=2))

        result = run(extract_from_source(b"%PDF-1.7 ...", ocr_engine=backend, input_handler=handler))

        assert backend.calls == 2
        assert result.invoice_number == OcrField("INV-1001", 93)

    def test_zero_confidence_ocr_falls_back(self, png_bytes, make_backend):
        result = run(extract_from_source(png_bytes, ocr_engine=make_backend(INVOICE_LINE, 0)))
        assert result.invoice_number == OcrField("INV-1001", 78)

    def test_text_file_path(self, tmp_path):
        path = tmp_path / "invoice.txt"
        path.write_text(INVOICE_LINE + "\nTotal Due: $45.00\n", encoding="utf-8")

        result = run(extract_from_source(path))

        assert result.invoice_number == OcrField("INV-1001", 78)
        assert result.invoice_amount == OcrField("45.00", 85)

    def test_pdf_without_pages_is_empty(self, make_backend):
        handler = InputHandler(pdf_processor=FakePDFProcessor(page_count=0))

        result = run(extract_from_source(b"%PDF-1.7", ocr_engine=make_backend(INVOICE_LINE, 90), input_handler=handler))

        assert result == InvoiceOcrResult.empty()

    def test_failing_backend_is_empty(self, png_bytes):
        backend = FakeOCRBackend(RuntimeError("engine crashed"))
        assert run(extract_from_source(png_bytes, ocr_engine=backend)) == InvoiceOcrResult.empty()

    @pytest.mark.parametrize("source, mime_hint", [
        (b"PK\x03\x04 docx", "application/msword"),
        (b"\x80\x81\x82", None),
        (b"", None),
        (b"not really an image", "image/png"),
    ])
    def test_bad_sources_are_empty(self, source, mime_hint, make_backend):
        result = run(extract_from_source(source, mime_hint, ocr_engine=make_backend(INVOICE_LINE, 90)))
        assert result == InvoiceOcrResult.empty()

    def test_missing_file_is_empty(self, tmp_path):
        assert run(extract_from_source(tmp_path / "missing.pdf")) == InvoiceOcrResult.empty()

    def test_pipeline_accepts_an_engine(self, png_bytes):
        engine = OCREngine(backend=FakeOCRBackend(OCRResult(text=INVOICE_LINE, confidence=85)))
        pipeline = InvoiceOcrPipeline(ocr_engine=engine)

        assert pipeline.ocr_engine is engine
        assert pipeline.extract(png_bytes).invoice_number == OcrField("INV-1001", 93)


class TestInputHandler:

    def test_sniffing(self, png_bytes):
        handler = InputHandler()

        assert handler.detect_kind(b"%PDF-1.4\n") == "pdf"
        assert handler.detect_kind(png_bytes) == "image"
        assert handler.detect_kind(b"hello") == "text"
        with pytest.raises(UnsupportedFileTypeError):
            handler.detect_kind(b"\x80\x81\x82")

    def test_mime_hint_wins(self, png_bytes):
        handler = InputHandler()

        assert handler.detect_kind(png_bytes, "text/plain; charset=utf-8") == "text"
        assert handler.detect_kind(b"hello", "application/pdf") == "pdf"
        assert handler.detect_kind(b"hello", "IMAGE/JPEG") == "image"
        with pytest.raises(UnsupportedFileTypeError):
            handler.detect_kind(b"hello", "application/zip")

    def test_extension_before_sniffing(self):
        assert InputHandler().detect_kind(b"hello", filename="scan.PDF") == "pdf"

    def test_load_text_and_bytes(self):
        handler = InputHandler()

        document = handler.load("Bill To\nAcme")
        assert document.kind == "text"
        assert not document.needs_ocr
        assert document.text == "Bill To\nAcme"

        document = handler.load("\ufeffInvoice".encode("utf-8"))
        assert document.text == "Invoice"

    def test_load_image_bytes(self, png_bytes):
        document = InputHandler().load(png_bytes)

        assert document.kind == "image"
        assert document.needs_ocr
        assert document.page_count == 1

    def test_load_rejects_bad_sources(self, tmp_path):
        handler = InputHandler()

        with pytest.raises(CorruptedFileError):
            handler.load(b"")
        with pytest.raises(UnsupportedFileTypeError):
            handler.load(12345)
        with pytest.raises(InputFileNotFoundError):
            handler.load(tmp_path / "missing.png")

        unsupported = tmp_path / "invoice.docx"
        unsupported.write_bytes(b"data")
        with pytest.raises(UnsupportedFileTypeError):
            handler.load(unsupported)

        empty = tmp_path / "invoice.png"
        empty.write_bytes(b"")
        with pytest.raises(CorruptedFileError):
            handler.load(empty)
