"""
Category normalization and color assignment.

Every consumer that needs a connection's categories goes through
``connection_categories`` so the legacy single-``category`` fallback is
applied the same way everywhere.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Connection

UNCATEGORIZED = "Uncategorized"

CATEGORY_PRESETS: Tuple[Tuple[str, str], ...] = (
    ("Freshman Group", "#E76127"),
    ("Val/Santa's group", "#006880"),
    ("Naomie/Juliette's group", "#D41A69"),
    ("Cliff/Ayo's group", "#48C1E1"),
    ("Caleb/Milaura's group", "#95C93D"),
    ("LaFe", "#FFC60B"),
    ("Large Group", "#0B3C61"),
    ("Prayer", "#333333"),
)

DYNAMIC_COLORS: Tuple[str, ...] = (
    "#48C1E1",
    "#95C93D",
    "#FFC60B",
    "#006880",
    "#0B3C61",
    "#E76127",
    "#D41A69",
)


def normalize_category(category: Optional[str]) -> str:
    """Trim a category label; blank labels become ``Uncategorized``."""
    if category is None:
        return UNCATEGORIZED
    trimmed = category.strip()
    return trimmed if trimmed else UNCATEGORIZED


def connection_categories(connection: Connection) -> List[str]:
    """Normalized categories of a connection, primary first.

    Falls back to the legacy ``category`` field when ``categories`` is empty.
    Duplicate labels after normalization are dropped, keeping first position.
    """
    raw = connection.categories if connection.categories else [connection.category]

    categories: List[str] = []
    for value in raw:
        category = normalize_category(value)
        if category not in categories:
            categories.append(category)
    return categories


def primary_category(connection: Connection) -> str:
    return connection_categories(connection)[0]


def assign_category_colors(
    categories: Iterable[str],
    presets: Sequence[Tuple[str, str]] = CATEGORY_PRESETS,
    palette: Sequence[str] = DYNAMIC_COLORS,
) -> Dict[str, str]:
    """
    Map category labels to display colors.

    Preset labels always get their fixed color. Any other label gets the
    palette color at its position among the unmapped labels, wrapping
    around when the palette runs out.
    """
    colors: Dict[str, str] = {label: color for label, color in presets}

    dynamic: List[str] = []
    for category in categories:
        if category not in colors and category not in dynamic:
            dynamic.append(category)

    for index, category in enumerate(dynamic):
        colors[category] = palette[index % len(palette)]

    return colors


def category_options(
    connections: Iterable[Connection],
    extra: Iterable[str] = (),
    presets: Sequence[Tuple[str, str]] = CATEGORY_PRESETS,
) -> List[str]:
    """Labels offered when tagging a connection.

    Presets come first in their fixed order, followed by every other label
    in use, sorted case-insensitively.
    """
    preset_labels = [label for label, _ in presets]
    preset_keys = {normalize_category(label) for label in preset_labels}

    dynamic: List[str] = []

    def register(category: str) -> None:
        normalized = normalize_category(category)
        if normalized not in preset_keys and normalized not in dynamic:
            dynamic.append(normalized)

    for connection in connections:
        for category in connection_categories(connection):
            register(category)
    for category in extra:
        register(category)

    return preset_labels + sorted(dynamic, key=lambda c: (c.casefold(), c))
