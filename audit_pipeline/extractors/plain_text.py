"""
Fallback extractor - flat document text via pypdf.

No page boundaries are kept, so only the label and keyword fields are
read; the energy table and action rows are left to the primary extractor.
"""

import logging
from pathlib import Path

from pypdf import PdfReader

from ..base_extractor import BaseExtractor, DocumentText
from ..models import ExtractedReport

logger = logging.getLogger(__name__)


class PlainTextExtractor(BaseExtractor):
    name = "plain_text"
    extraction_method = "pypdf_text"

    def read(self, pdf_path: Path) -> DocumentText:
        reader = PdfReader(pdf_path)
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
        return DocumentText(flat=text)

    def parse(self, document: DocumentText) -> ExtractedReport:
        return self.patterns.extract_from_text(document.full_text)
