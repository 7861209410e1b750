"""Instruction and schema assembly for the portrait analysis request.

The instruction text is composed from fixed sections plus sections generated
from the field table and the selected theme.  Sections are joined by double
newlines, in this order::

    [Fixed: analyst role]

    [Fixed: output contract - one JSON object, no prose or fences]

    Fields:
    - summary (string, required): ... Keep it short: max 2 sentences.
    - glowLevel (enum, required): ... Allowed values: "muted", "balanced", "radiant".
    - details.subjectClarity (string, required): ...
    ...

    [Fixed: content-safety rules, verbatim]

    [Theme: name, focus, vocabulary, no-overlap rule]

    [Optional caller guidance]

Caller guidance is appended after the contract and safety sections, so an
override can add emphasis but cannot remove them.

The schema declaration is :func:`~photolens.core.schema.to_response_schema`
of the same field table, so the enumeration above and the machine-checked
schema cannot drift apart.

Usage
-----
::

    bundle = build_prompt(select_variant(2))
    bundle.instruction_text
    bundle.schema_declaration
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from photolens.core.schema import ANALYSIS_FIELDS, FieldSpec, iter_fields, to_response_schema
from photolens.core.variants import Variant

# ---------------------------------------------------------------------------
# Fixed sections.
# ---------------------------------------------------------------------------

_ROLE_PREAMBLE = (
    "You are an expert portrait photographer and fashion stylist. "
    "Analyze the attached photo of a person and report on it."
)

_OUTPUT_CONTRACT = (
    "Output format: respond with exactly one JSON object that matches the provided "
    "schema. Do not write any prose, explanation or preamble. Do not wrap the JSON "
    "in markdown code fences. Every string must be short and information-dense; "
    "never pad with filler words."
)

# Must reach the model word for word.
SAFETY_RULES = (
    "Safety rules: Comment only on photographic and styling qualities. "
    "Do not diagnose anything. Do not name any medical, skin or health condition. "
    "Do not recommend medications, treatments, supplements or dosages. "
    "Do not comment on body weight or body shape."
)

_NO_OVERLAP_RULE = (
    "Never repeat an item across editSuggestions lists, recaptureSuggestions and "
    "wardrobeIdeas; every suggestion must be distinct."
)


@dataclass(frozen=True)
class PromptBundle:
    """Assembled request for the generation client.

    Attributes:
        instruction_text: Natural-language instructions sent with the image.
        schema_declaration: ``response_schema`` dict for constrained output.
    """

    instruction_text: str
    schema_declaration: dict[str, Any]


def _describe_field(path: str, spec: FieldSpec) -> str:
    requirement = "required" if spec.required else "optional"
    line = f"- {path} ({spec.kind}, {requirement}): {spec.description}."
    if spec.kind == "enum":
        allowed = ", ".join(f'"{choice}"' for choice in spec.choices)
        line += f" Allowed values: {allowed}. Use one of these exactly."
    if spec.length_hint:
        line += f" Keep it short: {spec.length_hint}."
    return line


def build_field_section(fields: tuple[FieldSpec, ...] = ANALYSIS_FIELDS) -> str:
    """Enumerate every field, nested ones by dotted path."""
    lines = ["Fields:"]
    lines.extend(_describe_field(path, spec) for path, spec in iter_fields(fields))
    return "\n".join(lines)


def build_theme_section(variant: Variant) -> str:
    vocabulary = ", ".join(variant.vocabulary)
    return (
        f"Theme: {variant.name}. {variant.focus}\n"
        f"For wardrobeIdeas use ONLY items from this list: {vocabulary}. "
        "Pick the items that best suit this person; do not invent other items.\n"
        f"{_NO_OVERLAP_RULE}"
    )


def build_prompt(
    variant: Variant,
    fields: tuple[FieldSpec, ...] = ANALYSIS_FIELDS,
    *,
    extra_guidance: str | None = None,
) -> PromptBundle:
    """Assemble the instructions and schema for one analysis.

    Args:
        variant: Theme that scopes the ``wardrobeIdeas`` section.
        fields: Field table describing the report.
        extra_guidance: Optional caller text, appended as the last section.
            Blank values are ignored.

    Returns:
        A :class:`PromptBundle` with the instruction text and the schema
        declaration built from the same field table.
    """
    parts: list[str] = [
        _ROLE_PREAMBLE,
        _OUTPUT_CONTRACT,
        build_field_section(fields),
        SAFETY_RULES,
        build_theme_section(variant),
    ]

    stripped_guidance = (extra_guidance or "").strip()
    if stripped_guidance:
        parts.append(f"Additional guidance from the user:\n{stripped_guidance}")

    return PromptBundle(
        instruction_text="\n\n".join(parts),
        schema_declaration=to_response_schema(fields),
    )
