"""
OCR Service - Tesseract
=======================
Runs a single-language Tesseract pass over a preprocessed image.

pytesseract shells out to the tesseract binary, so every call is blocking.
Calls go through a single-worker executor to keep the event loop free and
bound memory on small hosts.

Usage:
    from services.ocr_service import ocr_service
    result = await ocr_service.process_image(image_bytes)
    if result.success:
        print(result.text)
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass
from concurrent.futures import ThreadPoolExecutor
import asyncio
import logging
import threading
import time

from PIL import UnidentifiedImageError

from config import settings
from exceptions import UnsupportedMediaType
from utils.image_preprocessing import image_preprocessor

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class OCROutput:
    """Result from OCR processing."""
    text: str = ""
    processing_time_ms: int = 0
    success: bool = True
    error: Optional[str] = None
    image_width: int = 0
    image_height: int = 0


# =============================================================================
# OCR SERVICE
# =============================================================================

class OCRService:
    """
    Tesseract OCR service.

    Bytes that Pillow cannot identify as an image raise UnsupportedMediaType.
    `success=False` means the engine could not run (binary missing, crash).
    A successful run may still return empty text.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if getattr(self, '_initialized', False):
            return

        self._language = settings.OCR_LANGUAGE
        self._page_seg_mode = settings.OCR_PAGE_SEG_MODE
        self._tesseract_cmd = settings.TESSERACT_CMD
        self._available: Optional[bool] = None

        self._executor = ThreadPoolExecutor(max_workers=1)

        self._initialized = True
        logger.info(f"OCR Service initialized (lang={self._language}, psm={self._page_seg_mode})")

    @property
    def tesseract_config(self) -> str:
        return f"--psm {self._page_seg_mode}"

    def _configure(self):
        import pytesseract

        if self._tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._tesseract_cmd
        return pytesseract

    def is_available(self) -> bool:
        """Check if the tesseract binary can be executed."""
        if self._available is not None:
            return self._available

        try:
            pytesseract = self._configure()
            version = pytesseract.get_tesseract_version()
            self._available = True
            logger.info(f"Tesseract available: {version}")
        except Exception as e:
            logger.warning(f"Tesseract not available: {e}")
            self._available = False

        return self._available

    # =========================================================================
    # PROCESSING
    # =========================================================================

    def process_image_sync(self, image_bytes: bytes) -> OCROutput:
        """Preprocess and recognize one image."""
        start_time = time.time()
        try:
            image = image_preprocessor.optimize_for_ocr(image_bytes)
        except UnidentifiedImageError as e:
            raise UnsupportedMediaType("Unable to read image file") from e

        try:
            pytesseract = self._configure()

            width, height = image.size
            logger.info(f"Running OCR on {width}x{height} image")

            text = pytesseract.image_to_string(
                image,
                lang=self._language,
                config=self.tesseract_config,
            )

            return OCROutput(
                text=(text or "").strip(),
                processing_time_ms=int((time.time() - start_time) * 1000),
                success=True,
                image_width=width,
                image_height=height
            )
        except Exception as e:
            logger.error(f"OCR failed: {e}")
            return OCROutput(
                success=False,
                error=str(e),
                processing_time_ms=int((time.time() - start_time) * 1000)
            )

    async def process_image(self, image_bytes: bytes) -> OCROutput:
        """Async wrapper running the OCR pass on the worker thread."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.process_image_sync, image_bytes)

    def get_status(self) -> Dict[str, Any]:
        return {
            "engine": "tesseract",
            "available": self.is_available(),
            "language": self._language,
            "page_seg_mode": self._page_seg_mode
        }


# =============================================================================
# SINGLETON & EXPORTS
# =============================================================================

ocr_service = OCRService()


def get_ocr_service() -> OCRService:
    """FastAPI dependency returning the shared OCR service."""
    return ocr_service
