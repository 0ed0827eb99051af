"""
Tesseract OCR Backend.

This module provides OCR functionality using Tesseract (pytesseract).

Features:
    - Word-level confidence scores, averaged into one page confidence
    - Line grouping by Tesseract block, paragraph and line numbers
    - Configurable Tesseract parameters

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package

Author: ML Engineering Team
"""

import time
from typing import Any, Dict, List, Tuple
from PIL import Image

from config import get_config
from invoice_ocr.utils.logger import get_logger
from invoice_ocr.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError
from .ocr_result import OCRResult, OCRWord, OCRLine

# Initialize module logger
logger = get_logger(__name__)

LineKey = Tuple[int, int, int]


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Tesseract must be installed on the system for this to work.

    Attributes:
        language: Tesseract language code (e.g., "eng")
        psm: Page Segmentation Mode (0-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract command-line options

    Example:
        >>> backend = TesseractBackend()
        >>> result = backend.extract(image)
        >>> print(f"{result.confidence:.1f}%: {result.text[:40]}")
    """

    name = "tesseract"

    def __init__(self) -> None:
        """Initialize the Tesseract backend with configuration."""
        self.language = get_config("ocr.tesseract.lang", "eng")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check if Tesseract is available.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            import pytesseract
            self._pytesseract = pytesseract
            self.version = str(pytesseract.get_tesseract_version())
            logger.info(f"Tesseract version: {self.version}")

        except ImportError:
            raise OCREngineNotAvailableError(
                "pytesseract (install with: pip install pytesseract)"
            )
        except Exception as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            )

    def _build_config(self) -> str:
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]
        if self.extra_config:
            config_parts.append(self.extra_config)
        return ' '.join(config_parts)

    def extract(self, image: Image.Image) -> OCRResult:
        """
        Recognize text in an image.

        Args:
            image: PIL Image to process.

        Returns:
            OCRResult with line text and the average word confidence.

        Raises:
            OCRProcessingError: If OCR processing fails.
        """
        start_time = time.time()

        try:
            if image.mode != 'RGB':
                image = image.convert('RGB')

            config = self._build_config()
            logger.debug(f"Running Tesseract OCR (config: {config})")

            data = self._pytesseract.image_to_data(
                image,
                lang=self.language,
                config=config,
                output_type=self._pytesseract.Output.DICT
            )
        except Exception as e:
            logger.error(f"OCR processing failed: {e}")
            raise OCRProcessingError("image", str(e))

        lines = self._group_into_lines(data)
        processing_time = time.time() - start_time

        result = OCRResult.from_lines(
            lines,
            engine=self.name,
            processing_time=processing_time,
            metadata={
                'psm': self.psm,
                'oem': self.oem,
                'tesseract_version': self.version,
                'image_size': list(image.size),
            }
        )

        logger.info(
            f"OCR completed: {result.word_count} words, "
            f"{len(lines)} lines, "
            f"avg confidence: {result.confidence:.1f}% "
            f"({processing_time:.2f}s)"
        )
        return result

    def _group_into_lines(self, data: Dict[str, List[Any]]) -> List[OCRLine]:
        """
        Turn image_to_data output into lines of words.

        Tesseract reports conf -1 for non-word elements; those words are kept
        in the text but carry no confidence.
        """
        groups: Dict[LineKey, List[OCRWord]] = {}

        for i, raw_text in enumerate(data['text']):
            text = (raw_text or '').strip()
            if not text:
                continue

            x, y = data['left'][i], data['top'][i]
            w, h = data['width'][i], data['height'][i]

            conf = float(data['conf'][i])
            word = OCRWord(
                text=text,
                bbox=(x, y, x + w, y + h),
                confidence=conf if conf >= 0 else None,
            )

            key = (data['block_num'][i], data['par_num'][i], data['line_num'][i])
            groups.setdefault(key, []).append(word)

        # Dicts keep Tesseract's reading order
        return [OCRLine(words=words) for words in groups.values()]
