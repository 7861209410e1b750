"""Parsing and validation of raw model replies.

:func:`normalize` turns the reply text into the report returned to the
caller:

1. Parse the text as JSON.  Anything that is not a JSON object is
   :class:`~photolens.core.errors.MalformedOutput`; a partially parsed
   object is never returned.
2. Check the object against the field table.  In strict mode (the default)
   a missing required field, a wrong type or an enum value outside its
   literals is rejected as ``MalformedOutput``.  In lenient mode the object
   is passed through unchanged.
3. Attach ``tokenUsage`` when usage counters are available.

The returned dict is the parsed object itself; nothing is renamed or
reshaped.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from photolens.core.errors import MalformedOutput
from photolens.core.generation import TokenUsage
from photolens.core.schema import ANALYSIS_FIELDS, FieldSpec, validation_model

logger = logging.getLogger(__name__)

_MAX_REPORTED_ERRORS = 5


def _summarize_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors()[:_MAX_REPORTED_ERRORS]:
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    remaining = exc.error_count() - len(problems)
    if remaining > 0:
        problems.append(f"... and {remaining} more")
    return "; ".join(problems)


def parse_report(raw_text: str) -> dict[str, Any]:
    """Parse reply text into a JSON object.

    Raises:
        MalformedOutput: The text is empty, not JSON, or not an object.
    """
    if not raw_text or not raw_text.strip():
        raise MalformedOutput("Model returned an empty response")
    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise MalformedOutput(f"Model output is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedOutput(f"Model output is a JSON {type(parsed).__name__}, not an object")
    return parsed


def validate_report(report: dict[str, Any], fields: tuple[FieldSpec, ...]) -> None:
    """Raise :class:`MalformedOutput` if the report breaks the field table."""
    try:
        validation_model(fields).model_validate(report)
    except ValidationError as exc:
        summary = _summarize_validation_error(exc)
        logger.warning(f"Model output failed schema validation: {summary}")
        raise MalformedOutput(f"Model output does not match the analysis schema: {summary}") from exc


def normalize(
    raw_text: str,
    fields: tuple[FieldSpec, ...] = ANALYSIS_FIELDS,
    usage: TokenUsage | None = None,
    *,
    strict: bool = True,
) -> dict[str, Any]:
    """Turn a raw model reply into the report returned to the client.

    Args:
        raw_text: Reply text from the generation client.
        fields: Field table the reply must satisfy.
        usage: Token counters, attached as ``tokenUsage`` when present.
        strict: Reject schema violations (``True``) or pass them through.

    Returns:
        The parsed report, plus ``tokenUsage`` when usage is known.

    Raises:
        MalformedOutput: Unparseable output, or a schema violation in strict
            mode.
    """
    report = parse_report(raw_text)
    if strict:
        validate_report(report, fields)
    if usage is not None:
        report["tokenUsage"] = usage.to_dict()
    return report
