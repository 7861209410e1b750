"""Styling themes and the deterministic theme selector.

Each analysis is scoped to one :class:`Variant`.  The theme's vocabulary is
the only source the model may draw on for the themed ``wardrobeIdeas``
section, which keeps successive analyses of the same photo from repeating
themselves.  Clients cycle through themes by sending an increasing
``variantIndex``; the same index always selects the same theme.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Variant:
    """One entry of the theme catalog.

    Attributes:
        name: Display name of the theme.
        vocabulary: Items the themed section may suggest, in priority order.
        focus: One-sentence description of what the theme emphasises.
    """

    name: str
    vocabulary: tuple[str, ...]
    focus: str


VARIANT_CATALOG: tuple[Variant, ...] = (
    Variant(
        name="Classic Tailoring",
        vocabulary=(
            "navy blazer",
            "crisp white shirt",
            "charcoal trousers",
            "silk tie",
            "leather belt",
            "pocket square",
            "oxford shoes",
        ),
        focus="Structured, timeless pieces that sharpen silhouette and posture.",
    ),
    Variant(
        name="Relaxed Weekend",
        vocabulary=(
            "denim jacket",
            "linen shirt",
            "crew-neck sweater",
            "chinos",
            "canvas sneakers",
            "baseball cap",
            "tote bag",
        ),
        focus="Soft, casual layers that read approachable and unforced.",
    ),
    Variant(
        name="Earth Tones",
        vocabulary=(
            "camel coat",
            "olive overshirt",
            "rust knit",
            "tan suede boots",
            "cream turtleneck",
            "wooden bead bracelet",
            "brown leather watch",
        ),
        focus="Warm natural colours that flatter skin under golden light.",
    ),
    Variant(
        name="Monochrome Minimal",
        vocabulary=(
            "black turtleneck",
            "grey wool coat",
            "white tee",
            "slim black jeans",
            "silver ring",
            "minimal stud earrings",
            "white leather sneakers",
        ),
        focus="Single-palette outfits with clean lines and no visual clutter.",
    ),
    Variant(
        name="Vintage Film",
        vocabulary=(
            "corduroy jacket",
            "patterned knit vest",
            "high-waisted trousers",
            "round tortoiseshell glasses",
            "silk scarf",
            "loafers",
            "retro wristwatch",
        ),
        focus="Nostalgic textures and patterns that suit grainy, warm-toned shots.",
    ),
)


def select_variant(index: int = 0, catalog: tuple[Variant, ...] = VARIANT_CATALOG) -> Variant:
    """Return ``catalog[index mod N]``.

    Python's ``%`` is non-negative for a positive modulus, so any integer,
    including negative ones and values past the end, maps to a valid entry.

    Raises:
        ValueError: The catalog is empty.
    """
    if not catalog:
        raise ValueError("Variant catalog is empty")
    return catalog[index % len(catalog)]
