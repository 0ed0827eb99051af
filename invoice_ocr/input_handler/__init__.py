"""
Input Handler Module for Invoice OCR.

This module provides functionality for:
    - Routing sources to PDF, image or text handling
    - Loading and validating input files
    - Rendering PDF pages to images
    - Normalizing images for OCR

Supported formats:
    - PDF
    - Images: JPG, JPEG, PNG, TIFF, BMP
    - Plain text (already recognised)

Author: ML Engineering Team
"""

from .handler import InputHandler, InputDocument
from .pdf_processor import PDFProcessor
from .image_processor import ImageProcessor

__all__ = ['InputHandler', 'InputDocument', 'PDFProcessor', 'ImageProcessor']
