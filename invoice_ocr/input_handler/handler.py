"""
Main Input Handler Module.

This module provides the InputHandler class that turns an invoice source
(a file path, raw bytes, or already-recognised text) into an
InputDocument: page images ready for OCR, or plain text.

Usage:
    from invoice_ocr.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load(Path("invoice.pdf"))
    document = handler.load(upload_bytes, mime_hint="image/png")

Source routing:
    - application/pdf or a .pdf name     -> PDF pages
    - image/* or an image extension      -> image frames
    - text/* or .txt                     -> text
    - bytes without a hint are sniffed: %PDF header, decodable image, UTF-8 text
"""

import io
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field
from PIL import Image

from config import get_config
from invoice_ocr.utils.logger import get_logger
from invoice_ocr.utils.helpers import get_file_extension
from invoice_ocr.utils.exceptions import (
    InputError,
    UnsupportedFileTypeError,
    InputFileNotFoundError,
    CorruptedFileError
)

from .pdf_processor import PDFProcessor
from .image_processor import ImageProcessor


# Initialize module logger
logger = get_logger(__name__)

Source = Union[str, bytes, bytearray, os.PathLike]

KIND_PDF = 'pdf'
KIND_IMAGE = 'image'
KIND_TEXT = 'text'

PDF_MAGIC = b'%PDF'


@dataclass
class InputDocument:
    """
    A loaded invoice source.

    Attributes:
        kind: 'pdf', 'image' or 'text'
        name: File name or a placeholder for in-memory sources
        images: Page images for 'pdf' and 'image' kinds
        text: Decoded text for the 'text' kind
        metadata: Additional source metadata
    """
    kind: str
    name: str
    images: List[Image.Image] = field(default_factory=list)
    text: str = ''
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.images)

    @property
    def needs_ocr(self) -> bool:
        return self.kind != KIND_TEXT

    def __repr__(self) -> str:
        return (
            f"InputDocument(name='{self.name}', "
            f"kind='{self.kind}', "
            f"pages={self.page_count})"
        )


class InputHandler:
    """
    Input handler for invoice sources.

    Processors are created on first use so text-only callers never touch
    the PDF or image stack.

    Attributes:
        supported_extensions: Set of supported file extensions

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load(Path("invoice.pdf"))
        >>> print(f"Loaded {document.page_count} pages")
    """

    PDF_EXTENSIONS = {'.pdf'}
    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp'}
    TEXT_EXTENSIONS = {'.txt'}

    def __init__(
        self,
        pdf_processor: Optional[PDFProcessor] = None,
        image_processor: Optional[ImageProcessor] = None
    ) -> None:
        """
        Initialize the InputHandler.

        Args:
            pdf_processor: PDF rasteriser to use instead of the default.
            image_processor: Image loader to use instead of the default.
        """
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                sorted(self.PDF_EXTENSIONS | self.IMAGE_EXTENSIONS | self.TEXT_EXTENSIONS)
            )
        }
        self._pdf_processor = pdf_processor
        self._image_processor = image_processor

        logger.debug(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    @property
    def pdf_processor(self) -> PDFProcessor:
        if self._pdf_processor is None:
            self._pdf_processor = PDFProcessor()
        return self._pdf_processor

    @property
    def image_processor(self) -> ImageProcessor:
        if self._image_processor is None:
            self._image_processor = ImageProcessor()
        return self._image_processor

    def load(self, source: Source, mime_hint: Optional[str] = None) -> InputDocument:
        """
        Load an invoice source.

        Args:
            source: Invoice text (str), raw file bytes, or a path (os.PathLike).
            mime_hint: MIME type of the source, if known.

        Returns:
            InputDocument with page images or text.

        Raises:
            InputFileNotFoundError: If a path does not exist.
            UnsupportedFileTypeError: If the source cannot be routed.
            CorruptedFileError: If the file is empty or cannot be decoded.
        """
        if isinstance(source, str):
            return InputDocument(kind=KIND_TEXT, name="<text>", text=source)

        if isinstance(source, os.PathLike):
            path = self.validate_file(source)
            data = path.read_bytes()
            name = path.name
            kind = self.detect_kind(data, mime_hint, name)
        elif isinstance(source, (bytes, bytearray)):
            data = bytes(source)
            name = "<bytes>"
            if not data:
                raise CorruptedFileError(name, "Source is empty")
            kind = self.detect_kind(data, mime_hint)
        else:
            raise UnsupportedFileTypeError(
                type(source).__name__,
                ['str', 'bytes', 'os.PathLike']
            )

        logger.info(f"Loading {name} as {kind}")

        if kind == KIND_PDF:
            images, metadata = self.pdf_processor.process(data, name)
            return InputDocument(kind=kind, name=name, images=images, metadata=metadata)

        if kind == KIND_IMAGE:
            images, metadata = self.image_processor.process(data, name)
            return InputDocument(kind=kind, name=name, images=images, metadata=metadata)

        return InputDocument(
            kind=KIND_TEXT,
            name=name,
            text=data.decode('utf-8-sig', errors='replace'),
            metadata={'file_size_bytes': len(data)}
        )

    def validate_file(self, filepath: Union[str, os.PathLike]) -> Path:
        """
        Validate that a file exists, is supported and is not empty.

        Raises:
            InputFileNotFoundError: If the file doesn't exist.
            InputError: If the path is not a regular file.
            UnsupportedFileTypeError: If the extension is not supported.
            CorruptedFileError: If the file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise InputFileNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(extension, sorted(self.supported_extensions))

        if path.stat().st_size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")

        logger.debug(f"File validated: {filepath}")
        return path

    def detect_kind(
        self,
        data: bytes,
        mime_hint: Optional[str] = None,
        filename: Optional[str] = None
    ) -> str:
        """
        Decide whether a source is a PDF, an image or text.

        An explicit MIME type wins, then the file extension, then sniffing.

        Raises:
            UnsupportedFileTypeError: If no kind fits.
        """
        if mime_hint:
            kind = self._kind_from_mime(mime_hint)
            if kind is None:
                raise UnsupportedFileTypeError(
                    mime_hint,
                    ['application/pdf', 'image/*', 'text/*']
                )
            return kind

        if filename:
            extension = get_file_extension(filename)
            if extension in self.PDF_EXTENSIONS:
                return KIND_PDF
            if extension in self.IMAGE_EXTENSIONS:
                return KIND_IMAGE
            if extension in self.TEXT_EXTENSIONS:
                return KIND_TEXT

        return self._sniff_kind(data)

    @staticmethod
    def _kind_from_mime(mime_type: str) -> Optional[str]:
        mime_type = mime_type.split(';', 1)[0].strip().lower()
        if mime_type == 'application/pdf':
            return KIND_PDF
        if mime_type.startswith('image/'):
            return KIND_IMAGE
        if mime_type.startswith('text/'):
            return KIND_TEXT
        return None

    @staticmethod
    def _sniff_kind(data: bytes) -> str:
        if data.lstrip()[:4] == PDF_MAGIC:
            return KIND_PDF

        try:
            with Image.open(io.BytesIO(data)):
                return KIND_IMAGE
        except OSError:
            pass

        try:
            data.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise UnsupportedFileTypeError(
                'application/octet-stream',
                ['application/pdf', 'image/*', 'text/*']
            )
        return KIND_TEXT
