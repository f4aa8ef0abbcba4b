"""Normalisation of backend payloads into call results.

The backend does not use one response shape: ``data`` may be a bare object,
an object wrapped under ``post``, a bare list, or a list wrapped under
``posts``. Test-mode responses are often partial. Every field lookup goes
through one ordered fallback chain: backend value first, then the value the
caller supplied.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from .models import CallResult, Outcome, RawOutcome, ResultShape, TimeoutClass, ToolDescriptor

logger = logging.getLogger(__name__)


GENERATION_HINT = "Image and content generation can take a while."
RETRY_HINT = "Try again in a moment."

_ITEM_KEYS = ("post", "page", "item")
_COLLECTION_KEYS = ("posts", "pages", "items", "results")

# Result field -> caller parameter that carries the same value.
_PARAM_ALIASES = {"id": "post_id"}

_STATUS_DEFAULTS = {"status": "healthy"}


def first_present(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def unwrap_envelope(payload: Any) -> Any:
    if isinstance(payload, Mapping) and ("success" in payload or "data" in payload):
        return payload.get("data")
    return payload


def extract_item(data: Any) -> Dict[str, Any]:
    if isinstance(data, Mapping):
        for key in _ITEM_KEYS:
            if isinstance(data.get(key), Mapping):
                return dict(data[key])
        return dict(data)
    return {}


def extract_collection(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping):
        for key in _COLLECTION_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    return []


def caller_value(params: Mapping[str, Any], field: str) -> Any:
    return first_present(params.get(field), params.get(_PARAM_ALIASES.get(field, field)))


def echo_params(descriptor: ToolDescriptor, params: Mapping[str, Any]) -> Dict[str, Any]:
    echo: Dict[str, Any] = {}
    for field in descriptor.echo_fields:
        value = caller_value(params, field)
        if value is not None:
            echo[field] = value
    return echo


def normalize(
    descriptor: ToolDescriptor, outcome: RawOutcome, params: Mapping[str, Any]
) -> CallResult:
    echo = echo_params(descriptor, params)

    if outcome.kind is Outcome.SUCCEEDED:
        data = _project(descriptor, unwrap_envelope(outcome.payload), params)
        return CallResult(outcome=outcome.kind, tool=descriptor.name, data=data, echo=echo)

    return CallResult(
        outcome=outcome.kind,
        tool=descriptor.name,
        error=_failure_message(descriptor, outcome),
        echo=echo,
    )


def validation_failure(descriptor: ToolDescriptor, message: str) -> CallResult:
    return CallResult(
        outcome=Outcome.VALIDATION_FAILED,
        tool=descriptor.name,
        error=f"Invalid arguments: {message}",
    )


def _project(descriptor: ToolDescriptor, data: Any, params: Mapping[str, Any]) -> Any:
    shape = descriptor.result_shape

    if shape is ResultShape.COLLECTION:
        items = extract_collection(data)
        result: Dict[str, Any] = {"items": items, "count": len(items)}
        requested: Optional[List[Any]] = params.get("post_ids")
        if requested is not None:
            result["requested"] = len(requested)
            result["missing"] = max(len(requested) - len(items), 0)
        return result

    if shape is ResultShape.DELETION:
        result = extract_item(data)
        result["post_id"] = first_present(result.get("post_id"), result.get("id"), params.get("post_id"))
        result["deleted"] = first_present(result.get("deleted"), True)
        return result

    if shape is ResultShape.ITEM:
        item = extract_item(data)
        for field in descriptor.echo_fields:
            value = first_present(item.get(field), caller_value(params, field))
            if value is not None:
                item[field] = value
        return item

    if shape is ResultShape.STATUS:
        status = dict(data) if isinstance(data, Mapping) else {}
        for field, default in _STATUS_DEFAULTS.items():
            status[field] = first_present(status.get(field), default)
        return status

    # INFO and SUMMARY payloads are passed through as objects.
    if isinstance(data, Mapping):
        return dict(data)
    logger.warning("Unexpected %s response shape for tool=%s: %s", shape.value, descriptor.name, type(data))
    return {}


def retry_hint(descriptor: ToolDescriptor) -> str:
    """Suggest a retry, naming only parameters the tool itself accepts."""
    if descriptor.timeout_class is not TimeoutClass.SLOW:
        return RETRY_HINT
    options = [f"{name}={_render(value)}" for name, value in descriptor.fast_path]
    if not options:
        return f"{GENERATION_HINT} {RETRY_HINT}"
    *head, last = options
    choices = f"{', '.join(head)} or {last}" if head else last
    return f"{GENERATION_HINT} Try again, or use a faster path: {choices}."


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _failure_message(descriptor: ToolDescriptor, outcome: RawOutcome) -> str:
    message = outcome.error or "Unknown API error"
    if descriptor.timeout_class is TimeoutClass.SLOW or outcome.kind is Outcome.TIMED_OUT:
        message = f"{message}\n\n{retry_hint(descriptor)}"
    return message
