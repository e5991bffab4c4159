"""
Primary extractor - page-structured text via pdfplumber.

Each page's positioned word fragments are grouped into visual lines by
their vertical position; fragments on a line are joined with single
spaces. Table rows and labelled fields therefore stay on one line, which
is what the row patterns rely on.
"""

import logging
from pathlib import Path
from typing import List

import pdfplumber

from ..base_extractor import BaseExtractor, DocumentText
from ..models import ExtractedReport

logger = logging.getLogger(__name__)


class StructuredExtractor(BaseExtractor):
    """Full extraction: label fields, energy table and recommended actions."""

    name = "structured"
    extraction_method = "pdfplumber_pages"

    # Words whose tops differ by less than this (points) share a line
    line_tolerance: float = 3.0

    def read(self, pdf_path: Path) -> DocumentText:
        pages = []
        with pdfplumber.open(pdf_path) as pdf:
            for page in pdf.pages:
                pages.append(self.page_text(page.extract_words()))
        logger.debug(f"Read {len(pages)} pages from {pdf_path.name}")
        return DocumentText(pages=pages)

    def page_text(self, words: List[dict]) -> str:
        """Join word fragments ({"text", "x0", "top"}) into newline-separated lines."""
        lines = []
        current = []
        current_top = None
        for word in sorted(words, key=lambda w: (round(w["top"]), w["x0"])):
            if current_top is not None and abs(word["top"] - current_top) > self.line_tolerance:
                lines.append(" ".join(w["text"] for w in sorted(current, key=lambda w: w["x0"])))
                current = []
            if not current:
                current_top = word["top"]
            current.append(word)
        if current:
            lines.append(" ".join(w["text"] for w in sorted(current, key=lambda w: w["x0"])))
        return "\n".join(lines)

    def parse(self, document: DocumentText) -> ExtractedReport:
        return self.patterns.extract_from_pages(document.pages)
