"""
Utils Package
=============
Image preprocessing for OCR and request identity resolution.

Usage:
    from utils import image_preprocessor, require_principal

    # Image optimization
    optimized = image_preprocessor.optimize_for_ocr(image_bytes)
"""

from utils.image_preprocessing import ImagePreprocessor, image_preprocessor
from utils.auth import Principal, resolve_principal, require_principal


__all__ = [
    "ImagePreprocessor",
    "image_preprocessor",
    "Principal",
    "resolve_principal",
    "require_principal",
]
