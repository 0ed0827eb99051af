"""
Image Processor Module.

This module prepares scanned invoice images for OCR:
    - Image loading and validation
    - EXIF orientation correction
    - RGB conversion (alpha flattened onto white)
    - Downscaling of oversized scans
    - Optional contrast enhancement

Multi-frame TIFFs yield one image per frame.

Author: ML Engineering Team
"""

import io
from typing import Any, Dict, List, Tuple
from PIL import Image, ImageEnhance, ImageOps, ImageSequence

from config import get_config
from invoice_ocr.utils.logger import get_logger
from invoice_ocr.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Processor for image files (JPG, PNG, TIFF, BMP).

    Attributes:
        max_width: Maximum image width in pixels
        max_height: Maximum image height in pixels
        auto_orient: Whether to apply EXIF orientation
        enhance_contrast: Whether to apply contrast enhancement

    Example:
        >>> processor = ImageProcessor()
        >>> images, metadata = processor.process(image_bytes, "invoice.jpg")
        >>> image = images[0]
    """

    def __init__(self) -> None:
        """Initialize the image processor with configuration."""
        self.max_width = get_config("input.image.max_width", 2480)
        self.max_height = get_config("input.image.max_height", 3508)
        self.auto_orient = get_config("input.image.auto_orient", True)
        self.enhance_contrast = get_config("input.image.enhance_contrast", False)

        logger.debug(
            f"ImageProcessor initialized "
            f"(max_size={self.max_width}x{self.max_height})"
        )

    def process(
        self,
        data: bytes,
        name: str = "image"
    ) -> Tuple[List[Image.Image], Dict[str, Any]]:
        """
        Decode and normalize an image.

        Args:
            data: Raw image bytes.
            name: Display name for logs and errors.

        Returns:
            Tuple of (list of processed PIL Images, metadata dictionary).

        Raises:
            CorruptedFileError: If the image cannot be decoded.
        """
        logger.info(f"Processing image: {name}")

        try:
            image = Image.open(io.BytesIO(data))
            metadata = {
                'original_filename': name,
                'file_size_bytes': len(data),
                'file_type': 'image',
                'original_width': image.width,
                'original_height': image.height,
                'original_mode': image.mode,
                'format': image.format,
            }
            images = [
                self._process_image(frame.copy())
                for frame in ImageSequence.Iterator(image)
            ]
        except Exception as e:
            logger.error(f"Failed to process image {name}: {e}")
            raise CorruptedFileError(name, str(e))

        metadata['page_count'] = len(images)
        logger.info(
            f"Processed image: {images[0].width}x{images[0].height} "
            f"(original: {metadata['original_width']}x{metadata['original_height']}, "
            f"{len(images)} frame(s))"
        )
        return images, metadata

    def _process_image(self, image: Image.Image) -> Image.Image:
        if self.auto_orient:
            image = ImageOps.exif_transpose(image)

        image = self._convert_to_rgb(image)
        image = self._resize_if_needed(image)

        if self.enhance_contrast:
            image = ImageEnhance.Contrast(image).enhance(1.2)
            image = ImageEnhance.Sharpness(image).enhance(1.1)
            logger.debug("Applied image enhancements")

        return image

    def _convert_to_rgb(self, image: Image.Image) -> Image.Image:
        """
        Convert image to RGB mode.

        RGBA and LA images are flattened onto a white background so
        transparent regions do not turn black.
        """
        if image.mode == 'RGB':
            return image

        original_mode = image.mode
        if image.mode in ('RGBA', 'LA'):
            rgba = image.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            image = background
        else:
            image = image.convert('RGB')

        logger.debug(f"Converted image from {original_mode} to RGB")
        return image

    def _resize_if_needed(self, image: Image.Image) -> Image.Image:
        """Downscale to fit max_width x max_height, keeping aspect ratio."""
        width, height = image.size
        if width <= self.max_width and height <= self.max_height:
            return image

        ratio = min(self.max_width / width, self.max_height / height)
        new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))
        image = image.resize(new_size, Image.Resampling.LANCZOS)

        logger.debug(f"Resized image from {width}x{height} to {new_size[0]}x{new_size[1]}")
        return image
