"""
PDF Text-Layer Service
======================
Reads the embedded text layer of a PDF page by page with pypdf.

The parser is an injected service instance (see services.extractors), not
module state: each call builds its own reader from the given bytes.

Usage:
    from services.pdf_service import pdf_text_layer
    pages = pdf_text_layer.page_fragments(pdf_bytes)
    # [["Vitals", "normal."], ["Page two ..."]]
"""

from typing import List
import io
import logging

from pypdf import PdfReader

logger = logging.getLogger(__name__)


class PdfTextLayer:
    """
    Text-layer extraction over pypdf.

    pypdf reports text through a visitor callback, one call per text
    operator, which yields the fragments of a page in content-stream order.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def page_fragments(self, data: bytes) -> List[List[str]]:
        """
        Return the non-blank text fragments of every page.

        Raises whatever pypdf raises for a damaged or encrypted file.
        """
        reader = PdfReader(io.BytesIO(data), strict=self.strict)
        pages: List[List[str]] = []

        for page in reader.pages:
            fragments: List[str] = []

            def visit(text, cm, tm, font_dict, font_size):
                fragment = text.strip()
                if fragment:
                    fragments.append(fragment)

            page.extract_text(visitor_text=visit)
            pages.append(fragments)

        logger.debug(f"Parsed PDF text layer: {len(pages)} page(s)")
        return pages


# Default instance
pdf_text_layer = PdfTextLayer()


def get_pdf_text_layer() -> PdfTextLayer:
    """FastAPI dependency returning the PDF text-layer parser."""
    return pdf_text_layer
