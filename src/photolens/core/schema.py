"""Field-description table for the analysis report.

:data:`ANALYSIS_FIELDS` is the single source of truth for the report shape.
Three artefacts are derived from it and never written by hand:

- the field enumeration in the model instructions
  (:func:`iter_fields`, used by :mod:`photolens.core.prompt_builder`),
- the ``response_schema`` handed to Gemini (:func:`to_response_schema`),
- the pydantic model used to validate replies (:func:`validation_model`).

Field kinds
-----------
``string``       free text
``enum``         one of ``choices``
``string_list``  array of strings
``object``       nested object described by ``children``
``object_list``  array of objects described by ``children``
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, create_model

FieldKind = Literal["string", "enum", "string_list", "object", "object_list"]

_SCHEMA_TYPES: dict[str, str] = {
    "string": "STRING",
    "enum": "STRING",
    "string_list": "ARRAY",
    "object": "OBJECT",
    "object_list": "ARRAY",
}


@dataclass(frozen=True)
class FieldSpec:
    """One node of the report description.

    Attributes:
        name: JSON key.
        kind: One of the field kinds listed in the module docstring.
        description: One-line statement of the intended content.
        required: Whether the key must be present.
        choices: Allowed literals for ``enum`` fields.
        children: Nested fields for ``object`` and ``object_list``.
        length_hint: Brevity constraint repeated in the instructions.
    """

    name: str
    kind: FieldKind
    description: str
    required: bool = True
    choices: tuple[str, ...] = ()
    children: tuple["FieldSpec", ...] = ()
    length_hint: str = ""

    def __post_init__(self) -> None:
        if self.kind == "enum" and not self.choices:
            raise ValueError(f"enum field {self.name!r} needs choices")
        if self.kind in ("object", "object_list") and not self.children:
            raise ValueError(f"{self.kind} field {self.name!r} needs children")


def _detail(name: str, description: str) -> FieldSpec:
    return FieldSpec(name, "string", description, length_hint="max 15 words")


def _edit_list(name: str, description: str) -> FieldSpec:
    return FieldSpec(
        name,
        "string_list",
        f"Exactly 3 one-click edits: {description}",
        length_hint="max 5 words each",
    )


GLOW_LEVELS: tuple[str, ...] = ("muted", "balanced", "radiant")

DETAIL_FIELDS: tuple[FieldSpec, ...] = (
    _detail("subjectClarity", "How clearly the subject stands out"),
    _detail("lightingQuality", "Direction, softness and evenness of light"),
    _detail("skinTones", "Accuracy and warmth of rendered skin tones"),
    _detail("facialShadowsAndTexture", "Shadow placement and visible texture on the face"),
    _detail("eyes", "Sharpness, catchlights and engagement of the eyes"),
    _detail("expressionAndPosture", "What the expression and posture communicate"),
    _detail("composition", "Framing, balance and subject placement"),
    _detail("backgroundQuality", "Distraction level and separation of the background"),
    _detail("colorHarmony", "How well the colours work together"),
    _detail("contrastAndTonalBalance", "Highlight and shadow balance"),
    _detail("sharpness", "Focus accuracy and motion blur"),
    _detail("croppingAndAspectRatio", "Crop points and aspect ratio fit"),
    _detail("clothingAndStyling", "Fit, colour and suitability of clothing"),
    _detail("moodConsistency", "Whether all elements support one mood"),
    _detail("noiseAndGrain", "Visible noise or grain and its effect"),
    _detail("detailHierarchy", "What the eye reads first, second and third"),
    _detail("lensDistortion", "Perspective or lens distortion on features"),
    _detail("intent", "The apparent purpose of the photo"),
    _detail("hairstyle", "Shape and neatness of the hair in frame"),
    _detail("makeup", "Grooming or makeup as it reads on camera"),
)

EDIT_FIELDS: tuple[FieldSpec, ...] = (
    _edit_list("general", "overall enhancements"),
    _edit_list("clothing", "fashion adjustments"),
    _edit_list("pose", "body language adjustments"),
    _edit_list("background", "setting improvements"),
    _edit_list("hair", "hairstyle changes"),
    _edit_list("skin", "texture and tone fixes"),
    _edit_list("makeup", "grooming or cosmetic touches"),
    _edit_list("lighting", "atmosphere and light changes"),
    _edit_list("accessories", "additions"),
    _edit_list("expression", "facial adjustments"),
)

ANALYSIS_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        "summary",
        "string",
        "Overall read of the photo and its single biggest improvement",
        length_hint="max 2 sentences",
    ),
    FieldSpec(
        "glowLevel",
        "enum",
        "Overall vibrancy of skin and light",
        choices=GLOW_LEVELS,
    ),
    FieldSpec(
        "details",
        "object",
        "Assessment of each photographic aspect",
        children=DETAIL_FIELDS,
    ),
    FieldSpec(
        "recaptureSuggestions",
        "string_list",
        "5-7 tips for retaking the photo naturally: expression, pose, gestures, "
        "clothing adjustments, background and camera angle",
        length_hint="max 8 words each",
    ),
    FieldSpec(
        "editSuggestions",
        "object",
        "Actionable edits shown to the user as buttons, grouped by category",
        children=EDIT_FIELDS,
    ),
    FieldSpec(
        "wardrobeIdeas",
        "object_list",
        "3 outfit ideas for this person drawn only from the theme vocabulary",
        children=(
            FieldSpec("item", "string", "One item from the theme vocabulary"),
            FieldSpec(
                "reason",
                "string",
                "Why it suits this person and photo",
                length_hint="max 12 words",
            ),
        ),
    ),
)


def iter_fields(
    fields: tuple[FieldSpec, ...], prefix: str = ""
) -> Iterator[tuple[str, FieldSpec]]:
    """Yield ``(dotted_name, spec)`` for every field, depth first."""
    for spec in fields:
        path = f"{prefix}{spec.name}"
        yield path, spec
        if spec.children:
            child_prefix = f"{path}[]." if spec.kind == "object_list" else f"{path}."
            yield from iter_fields(spec.children, child_prefix)


def required_names(fields: tuple[FieldSpec, ...]) -> list[str]:
    return [spec.name for spec in fields if spec.required]


def _field_schema(spec: FieldSpec) -> dict[str, Any]:
    node: dict[str, Any] = {"type": _SCHEMA_TYPES[spec.kind], "description": spec.description}
    if spec.kind == "enum":
        node["enum"] = list(spec.choices)
    elif spec.kind == "string_list":
        node["items"] = {"type": "STRING"}
    elif spec.kind == "object":
        node.update(_object_schema(spec.children))
    elif spec.kind == "object_list":
        node["items"] = {"type": "OBJECT", **_object_schema(spec.children)}
    return node


def _object_schema(fields: tuple[FieldSpec, ...]) -> dict[str, Any]:
    return {
        "properties": {spec.name: _field_schema(spec) for spec in fields},
        "required": required_names(fields),
        "propertyOrdering": [spec.name for spec in fields],
    }


def to_response_schema(fields: tuple[FieldSpec, ...] = ANALYSIS_FIELDS) -> dict[str, Any]:
    """Transcribe the table into a Gemini ``response_schema`` dict."""
    return {"type": "OBJECT", **_object_schema(fields)}


def _annotation(spec: FieldSpec, model_name: str) -> Any:
    if spec.kind == "string":
        return str
    if spec.kind == "enum":
        return Literal[spec.choices]  # type: ignore[valid-type]
    if spec.kind == "string_list":
        return list[str]
    nested = _build_model(spec.children, model_name + spec.name[:1].upper() + spec.name[1:])
    if spec.kind == "object":
        return nested
    return list[nested]  # type: ignore[valid-type]


def _build_model(fields: tuple[FieldSpec, ...], model_name: str) -> type[BaseModel]:
    definitions: dict[str, Any] = {}
    for spec in fields:
        annotation = _annotation(spec, model_name)
        if spec.required:
            definitions[spec.name] = (annotation, ...)
        else:
            definitions[spec.name] = (Optional[annotation], None)
    return create_model(  # type: ignore[call-overload]
        model_name,
        __config__=ConfigDict(extra="allow"),
        **definitions,
    )


@lru_cache(maxsize=8)
def _cached_model(fields: tuple[FieldSpec, ...]) -> type[BaseModel]:
    return _build_model(fields, "AnalysisReport")


def validation_model(fields: tuple[FieldSpec, ...] = ANALYSIS_FIELDS) -> type[BaseModel]:
    """Return (and cache) a pydantic model that validates a report."""
    return _cached_model(fields)
