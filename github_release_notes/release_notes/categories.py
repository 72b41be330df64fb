"""Detection of change categories from commit message markers."""

from collections.abc import Mapping

import structlog

from .models import Category

logger = structlog.get_logger(__name__)

DEFAULT_CATEGORY_MARKERS: dict[Category, tuple[str, ...]] = {
    Category.BUG_FIXES: ("-bug fixed", "-bf"),
    Category.FEATURES: ("-feature", "-ft"),
    Category.IMPROVEMENTS: ("-improvement", "-imp"),
    Category.OTHER_CHANGES: ("-other", "-oc"),
}
"""Marker table: a commit message containing one of the markers belongs to that category."""

CATCH_ALL_CATEGORY = Category.OTHER_CHANGES
"""Category receiving every commit whose message matches no marker."""


def parse_category_markers(raw: Mapping[str, list[str]]) -> dict[Category, tuple[str, ...]]:
    """Build a marker table from a mapping keyed by category name or value.

    Keys may be enum names ("BUG_FIXES") or display values ("Bug Fixes").

    Raises:
        ValueError: If a key names no known category.
    """
    table: dict[Category, tuple[str, ...]] = {}
    for key, markers in raw.items():
        try:
            category = Category[key]
        except KeyError:
            try:
                category = Category(key)
            except ValueError:
                raise ValueError(f"Unknown release notes category: {key}") from None
        table[category] = tuple(markers)
    return table


class CategoryDetector:
    """Routes commit messages to categories using a marker table.

    Matching is a case-insensitive substring test. Categories are tried in
    table order and the first match wins, so a message never lands in two
    categories. Messages matching no marker go to the catch-all category.
    """

    def __init__(
        self,
        markers: Mapping[Category, tuple[str, ...]] | None = None,
        catch_all: Category = CATCH_ALL_CATEGORY,
    ) -> None:
        """Initialize with a marker table (defaults to DEFAULT_CATEGORY_MARKERS)."""
        table = markers if markers is not None else DEFAULT_CATEGORY_MARKERS
        self.markers: dict[Category, tuple[str, ...]] = {category: tuple(m.lower() for m in values if m) for category, values in table.items()}
        self.catch_all = catch_all

    def detect(self, message: str) -> Category:
        """Return the category of a raw commit message."""
        lowered = (message or "").lower()
        for category, markers in self.markers.items():
            if any(marker in lowered for marker in markers):
                return category
        return self.catch_all

    def ordered_categories(self) -> list[Category]:
        """Categories in display order: table order, then the catch-all if it is not in the table."""
        ordered = list(self.markers)
        if self.catch_all not in ordered:
            ordered.append(self.catch_all)
        return ordered
