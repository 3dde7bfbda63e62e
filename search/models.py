"""
Value objects used by the search orchestrator.
"""
from dataclasses import dataclass
from typing import Optional

from db.core.exceptions import InvalidInputError


@dataclass(frozen=True)
class SearchQuery:
    """A trimmed, non-empty fuzzy search string."""
    text: str

    @classmethod
    def parse(cls, raw: Optional[str]) -> "SearchQuery":
        text = (raw or "").strip()
        if not text:
            raise InvalidInputError("search query must not be empty")
        return cls(text)


def normalize_filter(raw: Optional[str]) -> Optional[str]:
    """Trimmed find filter, or None when it selects everything."""
    if raw is None:
        return None
    text = raw.strip()
    return text or None
