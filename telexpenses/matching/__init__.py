"""Category matching package."""

from telexpenses.matching.fuzzy import CategoryMatcher, normalize, resolve_category

__all__ = ["CategoryMatcher", "normalize", "resolve_category"]
