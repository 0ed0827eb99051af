"""
PDF Processor Module.

This module rasterises PDF documents into one image per page for OCR.

Renderers:
    - PyMuPDF (default, no system dependencies)
    - pdf2image (Poppler-based)

Author: ML Engineering Team
"""

import io
from typing import Any, Dict, List, Tuple
from PIL import Image
import fitz  # PyMuPDF
import pdf2image

from config import get_config
from invoice_ocr.utils.logger import get_logger
from invoice_ocr.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)

# PDF user space is 72 points per inch
PDF_BASE_DPI = 72.0


class PDFProcessor:
    """
    Processor for PDF documents.

    Attributes:
        renderer: "pymupdf" or "pdf2image"
        dpi: Resolution for page rendering
        max_pages: Maximum number of pages to render

    Example:
        >>> processor = PDFProcessor()
        >>> images, metadata = processor.process(pdf_bytes, "invoice.pdf")
        >>> print(f"Rendered {len(images)} pages")
    """

    RENDERERS = ('pymupdf', 'pdf2image')

    def __init__(self) -> None:
        """Initialize the PDF processor with configuration."""
        self.renderer = get_config("input.pdf.renderer", "pymupdf")
        self.dpi = get_config("input.pdf.dpi", 144)
        self.max_pages = get_config("input.pdf.max_pages", 50)

        if self.renderer not in self.RENDERERS:
            logger.warning(f"Unknown PDF renderer '{self.renderer}', using pymupdf")
            self.renderer = "pymupdf"

        logger.debug(
            f"PDFProcessor initialized (renderer={self.renderer}, "
            f"DPI={self.dpi}, max_pages={self.max_pages})"
        )

    def process(
        self,
        data: bytes,
        name: str = "document.pdf"
    ) -> Tuple[List[Image.Image], Dict[str, Any]]:
        """
        Render a PDF to page images.

        Args:
            data: Raw PDF bytes.
            name: Display name for logs and errors.

        Returns:
            Tuple of (list of RGB PIL Images, metadata dictionary).

        Raises:
            CorruptedFileError: If the PDF cannot be read or has no pages.
        """
        logger.info(f"Processing PDF: {name}")

        if self.renderer == "pdf2image":
            images, metadata = self._convert_with_pdf2image(data, name)
        else:
            images, metadata = self._convert_with_pymupdf(data, name)

        if not images:
            raise CorruptedFileError(name, "PDF has no pages")

        metadata.update({
            'original_filename': name,
            'file_size_bytes': len(data),
            'file_type': 'pdf',
            'source_dpi': self.dpi,
            'page_count': len(images),
        })
        logger.info(f"Converted PDF to {len(images)} image(s)")

        return images, metadata

    def _convert_with_pymupdf(
        self,
        data: bytes,
        name: str
    ) -> Tuple[List[Image.Image], Dict[str, Any]]:
        logger.debug("Using PyMuPDF for PDF conversion")
        images = []
        metadata: Dict[str, Any] = {}

        zoom = self.dpi / PDF_BASE_DPI
        matrix = fitz.Matrix(zoom, zoom)

        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                metadata['total_pages'] = doc.page_count
                if doc.metadata:
                    metadata['pdf_title'] = doc.metadata.get('title', '')
                    metadata['pdf_creator'] = doc.metadata.get('creator', '')

                if doc.page_count > self.max_pages:
                    logger.warning(
                        f"PDF has {doc.page_count} pages, limiting to {self.max_pages}"
                    )

                for page_num in range(min(doc.page_count, self.max_pages)):
                    pix = doc.load_page(page_num).get_pixmap(matrix=matrix)
                    image = Image.open(io.BytesIO(pix.tobytes("png")))
                    images.append(image.convert('RGB'))

        except Exception as e:
            logger.error(f"PyMuPDF conversion failed: {e}")
            raise CorruptedFileError(name, str(e))

        return images, metadata

    def _convert_with_pdf2image(
        self,
        data: bytes,
        name: str
    ) -> Tuple[List[Image.Image], Dict[str, Any]]:
        logger.debug("Using pdf2image for PDF conversion")

        try:
            images = pdf2image.convert_from_bytes(
                data,
                dpi=self.dpi,
                first_page=1,
                last_page=self.max_pages,
                fmt='png'
            )
        except Exception as e:
            logger.error(f"pdf2image conversion failed: {e}")
            raise CorruptedFileError(name, str(e))

        images = [
            img.convert('RGB') if img.mode != 'RGB' else img
            for img in images
        ]
        return images, {}
