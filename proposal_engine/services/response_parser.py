"""AI response parser.

Turns raw model output into a ``GeneratedDocument``. Parsing is lenient:
each section is validated independently, list items missing their
identifying field are dropped, and enum-like fields are normalized to a
known value instead of being rejected. Only the ROI projections, which
feed client-facing financial claims, are filtered strictly.
"""

import json
import logging
import math
import re
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from pydantic import ValidationError

from ..models.error_codes import AIErrorCode
from ..models.proposal import (
    LIST_SECTIONS,
    STRING_SECTIONS,
    CurrentIssue,
    GeneratedDocument,
    NextStep,
    PerformanceStandard,
    ProposalSection,
    ProposedPage,
    ROIAnalysis,
    ROIProjection,
    TimelinePhase,
)
from .ai_errors import AIServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Raw text attached to RESPONSE_INVALID_JSON errors is truncated to this length
RAW_EXCERPT_LENGTH = 500

_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Enum normalization
# ---------------------------------------------------------------------------

# (keywords, category) rows; the first row with a keyword contained in the
# lower-cased value wins.
IMPACT_KEYWORDS = (
    (("high", "critical"), "high"),
    (("medium", "moderate"), "medium"),
    (("low", "minor"), "low"),
)
SOURCE_KEYWORDS = (
    (("pagespeed", "audit", "performance"), "pagespeed"),
    (("consultation", "client", "meeting"), "consultation"),
)
PRIORITY_KEYWORDS = (
    (("essential", "required", "must"), "essential"),
    (("optional", "nice"), "optional"),
)
OWNER_KEYWORDS = (
    (("both", "shared"), "both"),
    (("client", "customer"), "client"),
)


def _normalize(value: Any, table: Sequence[tuple[tuple[str, ...], str]], default: str) -> str:
    if not isinstance(value, str):
        return default
    lower = value.lower()
    for keywords, category in table:
        if any(keyword in lower for keyword in keywords):
            return category
    return default


def normalize_impact(value: Any) -> str:
    """Map a free-form severity to high/medium/low (default medium)."""
    return _normalize(value, IMPACT_KEYWORDS, "medium")


def normalize_source(value: Any) -> str:
    """Map a free-form origin to pagespeed/consultation/inferred (default inferred)."""
    return _normalize(value, SOURCE_KEYWORDS, "inferred")


def normalize_priority(value: Any) -> str:
    """Map a free-form priority to essential/recommended/optional (default recommended)."""
    return _normalize(value, PRIORITY_KEYWORDS, "recommended")


def normalize_owner(value: Any) -> str:
    """Map a free-form assignee to client/agency/both (default agency)."""
    return _normalize(value, OWNER_KEYWORDS, "agency")


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def _first(obj: dict[str, Any], *keys: str) -> Any:
    """First truthy value among ``keys``, or None."""
    for key in keys:
        value = obj.get(key)
        if value:
            return value
    return None


def _first_text(obj: dict[str, Any], *keys: str) -> str | None:
    """First truthy value among ``keys``, only if it is a non-blank string."""
    value = _first(obj, *keys)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ", ".join(_to_text(v) for v in value if v is not None)
    return str(value)


def _as_text(value: Any, default: str = "") -> str:
    """Coerce a loosely typed value to text; falsy values take ``default``."""
    if not value:
        return default
    return _to_text(value)


def _as_text_list(value: Any) -> list[str]:
    """Coerce a list or a comma-delimited string to a list of strings."""
    if isinstance(value, list):
        return [_to_text(v) for v in value if v is not None and v != ""]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def _coerce_order(value: Any) -> int:
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 1
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match:
            try:
                return int(match.group(1)) or 1
            except ValueError:
                # Beyond the interpreter's int-conversion digit limit
                return 1
    return 1


def _optional_text(obj: dict[str, Any], key: str) -> str | None:
    value = obj.get(key)
    return value if isinstance(value, str) else None


# ---------------------------------------------------------------------------
# Per-item validators: return a normalized item, or None to drop it
# ---------------------------------------------------------------------------

def _current_issue(item: Any) -> CurrentIssue | None:
    if not isinstance(item, dict):
        return None
    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        return None
    return CurrentIssue(
        title=title,
        description=_as_text(_first(item, "description", "details")),
        impact=normalize_impact(item.get("impact")),
        source=normalize_source(item.get("source")),
        metric=_optional_text(item, "metric"),
    )


def _performance_standard(item: Any) -> PerformanceStandard | None:
    if not isinstance(item, dict):
        return None
    metric = _first_text(item, "metric", "name", "label")
    if metric is None:
        return None
    return PerformanceStandard(
        metric=metric,
        current=_as_text(_first(item, "current", "currentValue"), "N/A"),
        target=_as_text(_first(item, "target", "targetValue", "goal"), "Improved"),
        improvement=_as_text(_first(item, "improvement", "change", "delta")),
        business_impact=_optional_text(item, "businessImpact"),
    )


def _proposed_page(item: Any) -> ProposedPage | None:
    if not isinstance(item, dict):
        return None
    name = _first_text(item, "name", "title", "pageName")
    if name is None:
        return None
    return ProposedPage(
        name=name,
        purpose=_as_text(_first(item, "purpose", "description", "details")),
        priority=normalize_priority(item.get("priority")),
        features=_as_text_list(item["features"]) if "features" in item else None,
    )


def _timeline_phase(item: Any) -> TimelinePhase | None:
    if not isinstance(item, dict):
        return None
    phase = _first_text(item, "phase", "name", "title", "phaseName")
    if phase is None:
        return None
    client_tasks = _first(item, "clientTasks", "clientResponsibilities")
    return TimelinePhase(
        phase=phase,
        duration=_as_text(_first(item, "duration", "weeks", "time")),
        timing=_as_text(_first(item, "timing", "weekRange", "schedule")),
        deliverables=_as_text_list(_first(item, "deliverables", "tasks", "items")),
        client_tasks=_as_text_list(client_tasks) if client_tasks is not None else None,
    )


def _next_step(item: Any) -> NextStep | None:
    if not isinstance(item, dict):
        return None
    action = _first_text(item, "action", "step", "title", "name")
    if action is None:
        return None
    return NextStep(
        order=_coerce_order(item.get("order")),
        action=action,
        description=_as_text(_first(item, "description", "details", "info")),
        owner=normalize_owner(_first(item, "owner", "responsibility", "assignee")),
    )


_ROI_PROJECTION_TEXT_FIELDS = ("metric", "currentEstimate", "projectedEstimate", "improvement")


def _roi_projection(item: Any) -> ROIProjection | None:
    """Strict: every field present and correctly typed, nothing guessed."""
    if not isinstance(item, dict):
        return None
    if not all(isinstance(item.get(key), str) for key in _ROI_PROJECTION_TEXT_FIELDS):
        return None
    if item.get("confidence") not in ("low", "medium", "high"):
        return None
    return ROIProjection.model_validate(
        {key: item[key] for key in (*_ROI_PROJECTION_TEXT_FIELDS, "confidence")}
    )


def _filter_items(items: Iterable[Any], validator: Callable[[Any], T | None]) -> list[T]:
    kept: list[T] = []
    dropped = 0
    for raw in items:
        try:
            item = validator(raw)
        except (ValidationError, ValueError, TypeError):
            item = None
        if item is None:
            dropped += 1
        else:
            kept.append(item)
    if dropped:
        logger.debug("Dropped %d invalid item(s) via %s", dropped, validator.__name__)
    return kept


def _roi_analysis(value: Any) -> ROIAnalysis | None:
    """Accepted only as a whole; a missing or mistyped field drops the section."""
    if not isinstance(value, dict):
        return None
    disclaimer = value.get("disclaimer")
    time_period = value.get("timePeriod")
    assumptions = value.get("assumptions")
    projections = value.get("projections")
    if not (
        isinstance(disclaimer, str)
        and isinstance(time_period, str)
        and isinstance(assumptions, list)
        and isinstance(projections, list)
    ):
        return None
    return ROIAnalysis(
        disclaimer=disclaimer,
        time_period=time_period,
        assumptions=[a for a in assumptions if isinstance(a, str)],
        projections=_filter_items(projections, _roi_projection),
    )


_LIST_VALIDATORS: dict[ProposalSection, Callable[[Any], Any]] = {
    ProposalSection.current_issues: _current_issue,
    ProposalSection.performance_standards: _performance_standard,
    ProposalSection.proposed_pages: _proposed_page,
    ProposalSection.timeline: _timeline_phase,
    ProposalSection.next_steps: _next_step,
}


def validate_sections(data: dict[str, Any]) -> GeneratedDocument:
    """Validate each known section of a parsed response independently.

    Unknown keys are ignored. A section whose value has the wrong shape is
    omitted; it never affects its siblings.
    """
    values: dict[str, Any] = {}

    for section in STRING_SECTIONS:
        if isinstance(data.get(section.value), str):
            values[section.name] = data[section.value]

    for section in LIST_SECTIONS:
        raw_items = data.get(section.value)
        if isinstance(raw_items, list):
            values[section.name] = _filter_items(raw_items, _LIST_VALIDATORS[section])

    roi = _roi_analysis(data.get(ProposalSection.roi_analysis.value))
    if roi is not None:
        values[ProposalSection.roi_analysis.name] = roi

    return GeneratedDocument(**values)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def extract_json_text(raw_text: str) -> str:
    """Locate the JSON object inside raw model output.

    A fenced code block wins; otherwise, text that does not start with ``{``
    is cut down to the span from the first ``{`` to the last ``}``.
    """
    stripped = raw_text.strip()

    match = _FENCED_BLOCK_RE.search(raw_text)
    if match and match.group(1).strip():
        return match.group(1).strip()

    if not stripped.startswith("{"):
        start = raw_text.find("{")
        end = raw_text.rfind("}")
        if start != -1 and end > start:
            return raw_text[start:end + 1]

    return stripped


def parse_ai_response(
    raw_text: str,
    allow_partial: bool = False,
    required_sections: Sequence[ProposalSection | str] | None = None,
) -> GeneratedDocument:
    """Parse raw model output into a validated document.

    Args:
        raw_text: Text returned by the model.
        allow_partial: Accept documents missing required sections (or
            containing no sections at all).
        required_sections: Sections that must be present when
            ``allow_partial`` is False.

    Returns:
        The best-effort validated document.

    Raises:
        AIServiceError: RESPONSE_EMPTY, RESPONSE_INVALID_JSON,
            RESPONSE_SCHEMA_MISMATCH or RESPONSE_MISSING_FIELDS (all retryable).
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise AIServiceError(
            "Empty response from AI",
            AIErrorCode.RESPONSE_EMPTY,
            retryable=True,
        )

    json_text = extract_json_text(raw_text)

    try:
        parsed = json.loads(json_text)
    except (ValueError, RecursionError) as e:
        raise AIServiceError(
            "Invalid JSON in AI response",
            AIErrorCode.RESPONSE_INVALID_JSON,
            retryable=True,
            details={"raw": raw_text[:RAW_EXCERPT_LENGTH]},
        ) from e

    if not isinstance(parsed, dict):
        raise AIServiceError(
            "AI response is not a valid object",
            AIErrorCode.RESPONSE_SCHEMA_MISMATCH,
            retryable=True,
        )

    document = validate_sections(parsed)

    if required_sections and not allow_partial:
        missing = [
            ProposalSection(s).value
            for s in dict.fromkeys(required_sections)
            if not document.has_section(s)
        ]
        if missing:
            raise AIServiceError(
                f"Missing required sections: {', '.join(missing)}",
                AIErrorCode.RESPONSE_MISSING_FIELDS,
                retryable=True,
                details={"missing": missing},
            )

    if document.is_empty and not allow_partial:
        raise AIServiceError(
            "AI response contained no valid sections",
            AIErrorCode.RESPONSE_SCHEMA_MISMATCH,
            retryable=True,
        )

    return document


_PARTIAL_STRING_SECTIONS = (
    ProposalSection.executive_summary,
    ProposalSection.closing_content,
)


def extract_partial_content(raw_text: str) -> GeneratedDocument:
    """Best-effort recovery from a failed response. Never raises.

    Tries a full lenient parse first, then falls back to pulling the
    executive summary and closing content out with regular expressions.
    """
    try:
        return parse_ai_response(raw_text, allow_partial=True)
    except Exception as e:
        logger.debug("Full parse failed during partial extraction: %s", e)

    if not isinstance(raw_text, str):
        return GeneratedDocument()

    values: dict[str, str] = {}
    for section in _PARTIAL_STRING_SECTIONS:
        match = re.search(rf'"{section.value}"\s*:\s*"([^"]+)"', raw_text)
        if match:
            values[section.name] = match.group(1)
    return GeneratedDocument(**values)
