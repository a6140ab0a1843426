"""
Category Catalog

The fixed, ordered set of spending categories.

DESIGN DECISION: One immutable definition feeds both the reply keyboard
shown to the user and the fuzzy matcher's universe of targets, so the
choices offered and the names that can be matched never diverge.
"""

PSILIKA = "Ψιλικά"
FOOD = "Φαγητό"
LESSONS = "Ψ/Γ/Πιλάτες"
PURCHASES = "Αγορές"
COFFEE = "Καφέδες"
ENTERTAINMENT = "Διασκέδαση"
GAS = "Βενζίνες"
BILLS = "Λογαριασμοί"
SUPERMARKET = "Σούπερ-Λαική"
OTHER = "Άλλο"

CATEGORIES: tuple[str, ...] = (
    PSILIKA,
    FOOD,
    LESSONS,
    PURCHASES,
    COFFEE,
    ENTERTAINMENT,
    GAS,
    BILLS,
    SUPERMARKET,
    OTHER,
)

# Buttons per keyboard row
KEYBOARD_ROW_SIZE = 5


def list_categories() -> tuple[str, ...]:
    """Return the catalog in display order."""
    return CATEGORIES


def is_catalog_category(name: str) -> bool:
    return name in CATEGORIES


def keyboard_rows() -> list[list[str]]:
    """Split the catalog into keyboard rows, preserving order."""
    return [
        list(CATEGORIES[i:i + KEYBOARD_ROW_SIZE])
        for i in range(0, len(CATEGORIES), KEYBOARD_ROW_SIZE)
    ]


def display_order_key(name: str) -> tuple[int, str]:
    """
    Sort key placing catalog categories first, in catalog order,
    followed by any free-text categories alphabetically.
    """
    try:
        return (CATEGORIES.index(name), "")
    except ValueError:
        return (len(CATEGORIES), name)
