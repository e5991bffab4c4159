"""Text acquisition strategies, in the order the orchestrator tries them."""

from .structured import StructuredExtractor
from .plain_text import PlainTextExtractor

__all__ = ["StructuredExtractor", "PlainTextExtractor"]
