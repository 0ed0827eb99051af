"""
OCR Engine Module for Invoice OCR.

This module turns page images into text for the field extractors:
    - Text recognition per page through a pluggable backend
    - One overall confidence per document (mean of page confidences)

Supported backends:
    - Tesseract (default)
    - Any object exposing extract(image) -> OCRResult

Author: ML Engineering Team
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend
from .ocr_result import OCRResult, OCRWord, OCRLine

__all__ = ['OCREngine', 'TesseractBackend', 'OCRResult', 'OCRWord', 'OCRLine']
