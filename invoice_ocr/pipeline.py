"""
Invoice OCR Pipeline Module.

This module connects acquisition (file loading, PDF rendering, OCR) to the
text parser and provides the asynchronous extract_from_source entry point.

Pipeline phases:
    1. Input handling: route the source to PDF pages, image frames or text
    2. OCR: recognize pages sequentially, average their confidences
    3. Parsing: extract and calibrate fields from the recognized text

Any failure in phases 1-2 yields InvoiceOcrResult.empty(); the error is
logged, never raised to the caller.

Author: ML Engineering Team
"""

import asyncio
from typing import Any, Optional, Tuple

from config import get_config
from invoice_ocr.utils.logger import get_logger
from invoice_ocr.utils.exceptions import InvoiceOcrError
from invoice_ocr.extraction.confidence import clamp_confidence
from invoice_ocr.extraction.parser import InvoiceTextParser
from invoice_ocr.extraction.result import InvoiceOcrResult
from invoice_ocr.input_handler.handler import InputHandler, Source
from invoice_ocr.ocr_engine.engine import OCREngine

# Initialize module logger
logger = get_logger(__name__)

FALLBACK_BASE_CONFIDENCE = 70


class InvoiceOcrPipeline:
    """
    End-to-end extraction from an invoice source.

    The OCR engine is created on first use, so text sources never need
    Tesseract installed.

    Attributes:
        input_handler: Source loader
        parser: Field extractor for recognized text
        fallback_base_confidence: Base confidence for text sources and
            for OCR passes that report no confidence

    Example:
        >>> pipeline = InvoiceOcrPipeline()
        >>> result = pipeline.extract(Path("invoice.pdf"))
        >>> print(result.invoice_amount.value)
    """

    def __init__(
        self,
        ocr_engine: Optional[Any] = None,
        input_handler: Optional[InputHandler] = None,
        parser: Optional[InvoiceTextParser] = None
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            ocr_engine: OCREngine, or any backend object with an
                       extract(image) method. Defaults to the configured engine.
            input_handler: Source loader. Defaults to InputHandler().
            parser: Text parser. Defaults to InvoiceTextParser().
        """
        if ocr_engine is not None and not isinstance(ocr_engine, OCREngine):
            ocr_engine = OCREngine(backend=ocr_engine)
        self._ocr_engine = ocr_engine
        self.input_handler = input_handler or InputHandler()
        self.parser = parser or InvoiceTextParser()
        self.fallback_base_confidence = get_config(
            "extraction.fallback_base_confidence",
            FALLBACK_BASE_CONFIDENCE
        )

    @property
    def ocr_engine(self) -> OCREngine:
        if self._ocr_engine is None:
            self._ocr_engine = OCREngine()
        return self._ocr_engine

    def acquire_text(self, source: Source, mime_hint: Optional[str] = None) -> Tuple[str, float]:
        """
        Turn a source into text and a base confidence.

        Returns:
            Tuple of (text, confidence). Text sources report the fallback
            base confidence.

        Raises:
            InvoiceOcrError: If the source cannot be loaded or recognized.
        """
        document = self.input_handler.load(source, mime_hint)

        if not document.needs_ocr:
            return document.text, self.fallback_base_confidence

        ocr_result = self.ocr_engine.recognize_pages(document.images)
        return ocr_result.text, ocr_result.confidence

    def extract(self, source: Source, mime_hint: Optional[str] = None) -> InvoiceOcrResult:
        """
        Extract invoice fields from a source, blocking.

        Args:
            source: Invoice text (str), raw file bytes, or a path.
            mime_hint: MIME type of the source, if known.

        Returns:
            InvoiceOcrResult; all fields empty if acquisition failed.
        """
        try:
            text, confidence = self.acquire_text(source, mime_hint)
            base_confidence = clamp_confidence(confidence) or self.fallback_base_confidence
            return self.parser.parse(text, base_confidence)

        except InvoiceOcrError as e:
            logger.error(f"Invoice extraction failed: {e}")
            return InvoiceOcrResult.empty()

        except Exception as e:
            logger.exception(f"Unexpected error during invoice extraction: {e}")
            return InvoiceOcrResult.empty()

    async def extract_async(
        self,
        source: Source,
        mime_hint: Optional[str] = None
    ) -> InvoiceOcrResult:
        """Run extract() in a worker thread."""
        return await asyncio.to_thread(self.extract, source, mime_hint)


async def extract_from_source(
    source: Source,
    mime_hint: Optional[str] = None,
    *,
    ocr_engine: Optional[Any] = None,
    input_handler: Optional[InputHandler] = None
) -> InvoiceOcrResult:
    """
    Extract invoice fields from text, bytes or a file.

    Never raises for bad input: unsupported, corrupt or unreadable sources
    produce InvoiceOcrResult.empty().

    Example:
        >>> result = asyncio.run(extract_from_source(Path("invoice.png")))
        >>> result = await extract_from_source(upload, "application/pdf")
    """
    pipeline = InvoiceOcrPipeline(ocr_engine=ocr_engine, input_handler=input_handler)
    return await pipeline.extract_async(source, mime_hint)
