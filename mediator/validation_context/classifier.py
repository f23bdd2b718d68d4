"""
Focus Keyword Classifier

Classifies validation finding text into categories and fine-grained focus
tags using the externalized keyword table ``mediator/data/focus_keywords.yaml``.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Set, Tuple

import yaml

from mediator.schemas.validation import CATEGORIES


logger = logging.getLogger(__name__)

DEFAULT_KEYWORD_TABLE = Path(__file__).parent.parent / "data" / "focus_keywords.yaml"


def _compile_term(term: str) -> Tuple[str, Optional[Pattern]]:
    """ASCII terms match at a word start; other scripts match as substrings."""
    term = term.strip().lower()
    if term.isascii():
        return term, re.compile(r"\b" + re.escape(term), re.IGNORECASE)
    return term, None


def _matches(text: str, compiled: Sequence[Tuple[str, Optional[Pattern]]]) -> bool:
    lowered = text.lower()
    for term, pattern in compiled:
        if pattern is not None:
            if pattern.search(text):
                return True
        elif term in lowered:
            return True
    return False


@dataclass
class KeywordClassifier:
    """Keyword-based classifier for validation findings.

    Attributes:
        categories: Category -> synonym list
        insights: Phrase -> focus tag
        version: Table version
    """
    categories: Dict[str, List[str]]
    insights: Dict[str, str]
    version: int = 1

    def __post_init__(self):
        unknown = sorted(set(self.categories) - set(CATEGORIES))
        if unknown:
            raise ValueError(f"Keyword table has unknown categories: {', '.join(unknown)}")

        self._category_terms = {
            category: [_compile_term(t) for t in terms if str(t).strip()]
            for category, terms in self.categories.items()
        }
        self._insight_terms = [
            (_compile_term(phrase), tag)
            for phrase, tag in self.insights.items()
            if str(phrase).strip()
        ]

    @classmethod
    def from_dict(cls, data: Mapping) -> "KeywordClassifier":
        categories = data.get("categories") or {}
        insights = data.get("insights") or {}
        if not isinstance(categories, dict) or not isinstance(insights, dict):
            raise ValueError("Keyword table needs 'categories' and 'insights' mappings")
        return cls(
            categories={str(k): [str(t) for t in v or []] for k, v in categories.items()},
            insights={str(k): str(v) for k, v in insights.items()},
            version=int(data.get("version", 1)),
        )

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "KeywordClassifier":
        """Load a keyword table; defaults to the bundled table."""
        path = Path(path) if path else DEFAULT_KEYWORD_TABLE
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        classifier = cls.from_dict(data)
        logger.debug(
            f"Loaded keyword table v{classifier.version} from {path}: "
            f"{len(classifier.categories)} categories, {len(classifier.insights)} insight terms"
        )
        return classifier

    def categories_for(self, text: str) -> Set[str]:
        """Categories whose synonyms appear in the text."""
        if not text:
            return set()
        return {
            category
            for category, terms in self._category_terms.items()
            if _matches(text, terms)
        }

    def insight_tags(self, text: str) -> Set[str]:
        """Focus tags mined from a free-text semantic insight."""
        if not text:
            return set()
        return {
            tag
            for compiled, tag in self._insight_terms
            if _matches(text, [compiled])
        }
