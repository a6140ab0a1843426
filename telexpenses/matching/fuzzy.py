"""
Fuzzy Category Matcher

Resolves free text typed by the user (e.g. "ψιλικα", "kafedes") to a
catalog category.

Both sides are lower-cased and slugified, which transliterates Greek to
Latin and drops accents and punctuation, so spellings that look alike
compare equal. The first catalog entry (in catalog order) within the
edit-distance threshold wins, even if a later entry is closer.
"""

from typing import Optional, Sequence

from rapidfuzz.distance import Levenshtein
from slugify import slugify

from telexpenses.catalog import CATEGORIES

# A candidate matches when its distance is strictly below this
MAX_DISTANCE = 3


def normalize(text: str) -> str:
    return slugify(text.lower())


class CategoryMatcher:
    """Matches free text against a fixed list of category names."""

    def __init__(
        self,
        categories: Sequence[str] = CATEGORIES,
        max_distance: int = MAX_DISTANCE,
    ):
        self._max_distance = max_distance
        # Normalize the targets once
        self._targets = [(category, normalize(category)) for category in categories]

    def resolve(self, text: str) -> Optional[str]:
        """Return the first category within the threshold, or None."""
        candidate = normalize(text)
        for category, target in self._targets:
            if Levenshtein.distance(candidate, target) < self._max_distance:
                return category
        return None


_default_matcher = CategoryMatcher()


def resolve_category(text: str) -> Optional[str]:
    """Resolve text against the default catalog."""
    return _default_matcher.resolve(text)
