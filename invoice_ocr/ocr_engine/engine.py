"""
Main OCR Engine Module.

This module provides the OCREngine class, the single interface the
pipeline uses to turn page images into text plus an overall recognition
confidence. The recognition itself is delegated to a backend object.

Usage:
    from invoice_ocr.ocr_engine import OCREngine

    engine = OCREngine()
    result = engine.recognize_pages(images)

    print(result.text)
    print(result.confidence)

Author: ML Engineering Team
"""

from typing import Any, Optional, Sequence, Union
from PIL import Image

from config import get_config
from invoice_ocr.utils.logger import get_logger
from invoice_ocr.utils.exceptions import OCRProcessingError
from .ocr_result import OCRResult
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    OCR engine over a pluggable backend.

    A backend is any object with an ``extract(image) -> OCRResult`` method.
    Passing a backend name selects a built-in one; passing an object uses
    it as-is, which is how tests and callers supply their own recognizer.

    Attributes:
        backend_name: Name of the active OCR backend
        backend: The active OCR backend instance

    Example:
        >>> engine = OCREngine()
        >>> result = engine.recognize(image)
        >>> print(f"{result.confidence:.1f}%")
    """

    SUPPORTED_BACKENDS = ['tesseract']

    def __init__(self, backend: Union[str, Any, None] = None) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: Backend name, backend instance, or None to use the
                    ``ocr.engine`` configuration value.
        """
        if backend is None or isinstance(backend, str):
            self.backend_name = backend or get_config("ocr.engine", "tesseract")
            if self.backend_name == "pytesseract":
                self.backend_name = "tesseract"
            self.backend = self._initialize_backend()
        else:
            self.backend = backend
            self.backend_name = getattr(backend, 'name', type(backend).__name__)

        logger.info(f"OCR Engine initialized with backend: {self.backend_name}")

    def _initialize_backend(self):
        """
        Initialize the selected built-in backend.

        Raises:
            OCREngineNotAvailableError: If the backend cannot be initialized.
        """
        if self.backend_name not in self.SUPPORTED_BACKENDS:
            logger.warning(
                f"Unknown backend '{self.backend_name}', falling back to tesseract"
            )
            self.backend_name = "tesseract"
        return TesseractBackend()

    def recognize(self, image: Image.Image) -> OCRResult:
        """
        Recognize a single image.

        Raises:
            OCRProcessingError: If the input is not an image or recognition fails.
        """
        if not isinstance(image, Image.Image):
            raise OCRProcessingError("unknown", "Invalid image input")

        logger.debug(f"Extracting text using {self.backend_name} backend")
        return self.backend.extract(image)

    def recognize_pages(self, images: Sequence[Image.Image]) -> OCRResult:
        """
        Recognize document pages one after another.

        Args:
            images: One image per page, in page order.

        Returns:
            Combined OCRResult; confidence is the mean page confidence.

        Raises:
            OCRProcessingError: If there are no pages or any page fails.
        """
        if not images:
            raise OCRProcessingError("document", "No pages to recognize")

        pages = []
        for page_number, image in enumerate(images, 1):
            logger.debug(f"Recognizing page {page_number}/{len(images)}")
            pages.append(self.recognize(image))

        combined = OCRResult.combine(pages)
        logger.info(
            f"Recognized {combined.page_count} page(s), "
            f"avg confidence: {combined.confidence:.1f}%"
        )
        return combined

    def __repr__(self) -> str:
        return f"OCREngine(backend={self.backend_name})"
