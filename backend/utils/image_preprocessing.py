"""
Image Preprocessing Utility
===========================
Prepares scanned clinical images for Tesseract.

Features:
    - EXIF auto-orientation
    - Resize large images (bounds OCR time)
    - Grayscale conversion
    - Contrast normalization
"""

from PIL import Image, ImageOps
from typing import Union
import io
import logging

from config import settings

logger = logging.getLogger(__name__)


class ImagePreprocessor:
    """
    Image preprocessing for OCR.

    Usage:
        preprocessor = ImagePreprocessor()
        optimized = preprocessor.optimize_for_ocr(image_bytes)
    """

    def __init__(self, max_dimension: int = None):
        self.max_dimension = max_dimension or settings.OCR_MAX_IMAGE_DIMENSION

    # =========================================================================
    # IMAGE LOADING
    # =========================================================================

    def load_image_bytes(self, image_bytes: bytes) -> Image.Image:
        """Load image from bytes"""
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
        # Convert to RGB if necessary (handles RGBA, P mode, CMYK, etc.)
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')
        return image

    # =========================================================================
    # SIZE OPTIMIZATION
    # =========================================================================

    def resize_if_needed(
        self,
        image: Image.Image,
        max_dimension: int = None
    ) -> Image.Image:
        """
        Resize image if larger than max dimension.
        Preserves aspect ratio.
        """
        max_dim = max_dimension or self.max_dimension
        width, height = image.size

        if max(width, height) <= max_dim:
            return image

        if width > height:
            new_width = max_dim
            new_height = int(height * (max_dim / width))
        else:
            new_height = max_dim
            new_width = int(width * (max_dim / height))

        logger.info(f"Resizing image from {width}x{height} to {new_width}x{new_height}")

        # Use LANCZOS for high quality downscaling
        return image.resize((new_width, new_height), Image.Resampling.LANCZOS)

    # =========================================================================
    # IMAGE ENHANCEMENT
    # =========================================================================

    def auto_orient(self, image: Image.Image) -> Image.Image:
        """Apply EXIF orientation if present"""
        return ImageOps.exif_transpose(image)

    def convert_to_grayscale(self, image: Image.Image) -> Image.Image:
        return image.convert('L')

    def normalize(self, image: Image.Image, cutoff: float = 1.0) -> Image.Image:
        """
        Stretch the histogram to the full 0-255 range.

        `cutoff` percent of the darkest and lightest pixels are clipped
        so a few specks of noise do not pin the range.
        """
        return ImageOps.autocontrast(image, cutoff=cutoff)

    # =========================================================================
    # FULL OPTIMIZATION PIPELINE
    # =========================================================================

    def optimize_for_ocr(self, image: Union[Image.Image, bytes]) -> Image.Image:
        """
        Full preprocessing pipeline for OCR.

        Args:
            image: Image object or raw bytes

        Returns:
            Grayscale, normalized PIL Image
        """
        img = self.load_image_bytes(image) if isinstance(image, bytes) else image

        img = self.auto_orient(img)
        img = self.resize_if_needed(img)
        img = self.convert_to_grayscale(img)
        img = self.normalize(img)

        return img


# Singleton instance
image_preprocessor = ImagePreprocessor()
