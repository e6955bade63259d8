"""Multi-panel prompt composition."""

from enum import Enum
from typing import Sequence, Union

from .errors import ValidationError

MAX_FRAGMENTS = 4
PANEL_UNITS = ("panel", "scene")


class Layout(str, Enum):
    """Arrangement of panels in the composed frame."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    GRID = "grid"


def ordinal(n: int) -> str:
    """Return the ordinal word for a 1-based position (1st, 2nd, 3rd, 4th...)."""
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n, "th")
    return f"{n}{suffix}"


def compose_panels(
    fragments: Sequence[str],
    layout: Union[Layout, str] = Layout.HORIZONTAL,
    unit: str = "panel",
    article: bool = False,
) -> str:
    """Combine independently edited fragments into one generation prompt.

    Args:
        fragments: One to four fragments, in panel order.
        layout: Panel arrangement.
        unit: Literal token naming each part ("panel" or "scene").
        article: Prefix the composition with "A ".

    Returns:
        The single fragment unchanged when only one is given, otherwise
        ``"<N>-<unit> <layout> layout .1st <unit>: ...". 2nd <unit>: ..."``.

    Raises:
        ValidationError: If the count is out of range, any fragment is blank,
            or the unit or layout is unknown.
    """
    if unit not in PANEL_UNITS:
        raise ValidationError(f"Unknown unit: {unit}. Available: {list(PANEL_UNITS)}")
    if not fragments:
        raise ValidationError("At least one fragment is required")
    if len(fragments) > MAX_FRAGMENTS:
        raise ValidationError(
            f"At most {MAX_FRAGMENTS} fragments are supported, got {len(fragments)}"
        )

    blank = [i + 1 for i, fragment in enumerate(fragments) if not fragment or not fragment.strip()]
    if blank:
        raise ValidationError(
            f"All {len(fragments)} {unit}s must be filled in (empty: {blank})"
        )

    try:
        layout = Layout(layout)
    except ValueError:
        raise ValidationError(
            f"Unknown layout: {layout}. Available: {[l.value for l in Layout]}"
        )

    if len(fragments) == 1:
        return fragments[0]

    parts = ". ".join(
        f"{ordinal(i + 1)} {unit}: {fragment}" for i, fragment in enumerate(fragments)
    )
    composed = f"{len(fragments)}-{unit} {layout.value} layout .{parts}"
    return f"A {composed}" if article else composed


def compose_scenes(
    fragments: Sequence[str],
    layout: Union[Layout, str] = Layout.HORIZONTAL,
) -> str:
    """Scene-style composition: same rules, "scene" instead of "panel"."""
    return compose_panels(fragments, layout, unit="scene")
