"""
Base extractor: one way of turning a PDF into text and then into a report.
Acquisition strategies inherit from this and are tried in order by the orchestrator.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .models import ExtractedReport
from .patterns import PatternExtractor

logger = logging.getLogger(__name__)


@dataclass
class DocumentText:
    """Text read from a PDF. `pages` is empty when the source has no page structure."""
    pages: List[str] = field(default_factory=list)
    flat: str = ""

    @property
    def full_text(self) -> str:
        if self.pages:
            return "\n".join(self.pages)
        return self.flat

    def is_blank(self) -> bool:
        return not self.full_text.strip()


class BaseExtractor(ABC):
    """Abstract acquisition strategy.

    `read` may raise on unreadable or non-PDF input; callers are expected
    to catch. `extract` returns None when the file was read but held no
    usable text.
    """

    # Subclasses should set these
    name: str = ""
    extraction_method: str = ""

    def __init__(self, patterns: Optional[PatternExtractor] = None):
        self.patterns = patterns or PatternExtractor()

    @abstractmethod
    def read(self, pdf_path: Path) -> DocumentText:
        """Read text from a PDF. Must be implemented by subclasses."""

    @abstractmethod
    def parse(self, document: DocumentText) -> ExtractedReport:
        """Turn read text into a report. Must be implemented by subclasses."""

    def extract(self, pdf_path: Path) -> Optional[ExtractedReport]:
        document = self.read(Path(pdf_path))
        if document.is_blank():
            logger.info(f"{self.name}: no text in {Path(pdf_path).name}")
            return None
        report = self.parse(document)
        report.extraction_method = self.extraction_method
        return report
