"""Layered style merge.

Folds an ordered list of fragment payloads, lowest precedence first, into
one ResolvedStyleConfiguration:

- nested maps are merged key by key, at any depth
- on a leaf collision the later layer wins outright
- lists are replaced wholesale, never merged element-wise
- a malformed payload is skipped and logged; the rest still merge
"""

import copy
import json
from collections.abc import Iterable, Mapping
from typing import Any

from stylecast.observability.logging import get_logger
from stylecast.observability.metrics import MALFORMED_FRAGMENTS
from stylecast.styles.exceptions import InvalidMutationError, MalformedFragmentError
from stylecast.styles.models.fragment import ConfigurationFragment
from stylecast.styles.models.resolved import ResolvedStyleConfiguration

logger = get_logger(__name__)

# (source id, raw payload); source id is None for built-in layers
MergeLayer = tuple[str | None, Any]


def parse_payload(raw: Any, fragment_id: str | None = None) -> dict[str, Any]:
    """Interpret a stored payload as a property-group map.

    Accepts a mapping or its JSON serialization. Every top-level value must
    itself be a mapping (a property group).

    Raises:
        MalformedFragmentError: If the payload is unusable
    """
    if raw is None:
        return {}

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedFragmentError(f"Payload is not valid JSON: {e}", fragment_id) from e

    if not isinstance(raw, Mapping):
        raise MalformedFragmentError(
            f"Payload must be a mapping, got {type(raw).__name__}", fragment_id
        )

    for group, properties in raw.items():
        if not isinstance(group, str):
            raise MalformedFragmentError(f"Group name must be a string: {group!r}", fragment_id)
        if not isinstance(properties, Mapping):
            raise MalformedFragmentError(
                f"Group '{group}' must be a mapping, got {type(properties).__name__}",
                fragment_id,
            )

    return dict(raw)


def check_payload(raw: Any) -> dict[str, Any]:
    """parse_payload() for the write path.

    Raises:
        InvalidMutationError: If the payload would be skipped on every read
    """
    try:
        return parse_payload(raw)
    except MalformedFragmentError as e:
        raise InvalidMutationError(e.message, field="payload") from e


def _copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _copy_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_copy_value(item) for item in value]
    return copy.copy(value)


def deep_merge_styles(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge override onto base, returning a new dict.

    Neither input is modified and the result shares no mutable state with
    them.
    """
    result: dict[str, Any] = {key: _copy_value(value) for key, value in base.items()}

    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge_styles(current, value)
        else:
            result[key] = _copy_value(value)

    return result


def safe_parse(raw: Any, source_id: str | None = None) -> dict[str, Any] | None:
    """parse_payload() that logs and returns None for a malformed payload."""
    try:
        return parse_payload(raw, source_id)
    except MalformedFragmentError as e:
        MALFORMED_FRAGMENTS.inc()
        logger.warning(
            "malformed_fragment_skipped",
            fragment_id=source_id,
            error=e.message,
        )
        return None


def merge_payloads(layers: Iterable[MergeLayer]) -> dict[str, Any]:
    """Merge layers into a plain dict. See module docstring for the rules."""
    merged: dict[str, Any] = {}

    for source_id, raw in layers:
        payload = safe_parse(raw, source_id)
        if payload is None:
            continue
        merged = deep_merge_styles(merged, payload)

    return merged


def merge_layers(layers: Iterable[MergeLayer]) -> ResolvedStyleConfiguration:
    """Merge layers into a read-only resolved configuration."""
    return ResolvedStyleConfiguration(merge_payloads(layers))


def fragment_layers(fragments: Iterable[ConfigurationFragment]) -> list[MergeLayer]:
    """Turn fragments into merge layers, ordered by sort order.

    The sort is stable, so fragments with equal sort order keep the order
    the store returned them in.
    """
    ordered = sorted(fragments, key=lambda fragment: fragment.sort_order)
    return [(fragment.id, fragment.payload) for fragment in ordered]


def merge_fragments(fragments: Iterable[ConfigurationFragment]) -> ResolvedStyleConfiguration:
    """Merge fragments in sort order."""
    return merge_layers(fragment_layers(fragments))
