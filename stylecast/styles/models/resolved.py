"""Resolved style configuration.

The result of merging fragments: a mapping from property-group name to a
property map. Instances are deeply read-only, so a cached configuration can
be handed to any number of consumers without copying.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from stylecast.styles.models.enums import Breakpoint, InteractionState

BASE_GROUP = "base"
VARIANTS_GROUP = "variants"
RESPONSIVE_GROUP = "responsive"
STATE_GROUPS: tuple[str, ...] = tuple(state.value for state in InteractionState)
BREAKPOINTS: tuple[str, ...] = tuple(breakpoint.value for breakpoint in Breakpoint)
WELL_KNOWN_GROUPS: frozenset[str] = frozenset(
    (BASE_GROUP, VARIANTS_GROUP, RESPONSIVE_GROUP, *STATE_GROUPS)
)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


class ResolvedStyleConfiguration(Mapping[str, Any]):
    """Immutable view over a merged property-group map.

    Well-known groups (base, the interaction states, variants, responsive)
    have typed accessors; anything else (page groups such as "layout" or
    "header") is reachable through `extensions` or plain indexing.
    """

    __slots__ = ("_groups",)

    def __init__(self, groups: Mapping[str, Any] | None = None) -> None:
        self._groups: Mapping[str, Any] = _freeze(groups or {})

    def __getitem__(self, key: str) -> Any:
        return self._groups[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"ResolvedStyleConfiguration({self.to_dict()!r})"

    def _mapping_group(self, name: str) -> Mapping[str, Any] | None:
        value = self._groups.get(name)
        return value if isinstance(value, Mapping) else None

    @property
    def base(self) -> Mapping[str, Any] | None:
        return self._mapping_group(BASE_GROUP)

    @property
    def hover(self) -> Mapping[str, Any] | None:
        return self._mapping_group(InteractionState.HOVER.value)

    @property
    def active(self) -> Mapping[str, Any] | None:
        return self._mapping_group(InteractionState.ACTIVE.value)

    @property
    def focus(self) -> Mapping[str, Any] | None:
        return self._mapping_group(InteractionState.FOCUS.value)

    @property
    def disabled(self) -> Mapping[str, Any] | None:
        return self._mapping_group(InteractionState.DISABLED.value)

    @property
    def loading(self) -> Mapping[str, Any] | None:
        return self._mapping_group(InteractionState.LOADING.value)

    @property
    def variants(self) -> Mapping[str, Mapping[str, Any]]:
        return self._mapping_group(VARIANTS_GROUP) or MappingProxyType({})

    @property
    def responsive(self) -> Mapping[str, Mapping[str, Any]]:
        return self._mapping_group(RESPONSIVE_GROUP) or MappingProxyType({})

    @property
    def extensions(self) -> Mapping[str, Any]:
        """Groups outside the well-known set."""
        return MappingProxyType(
            {k: v for k, v in self._groups.items() if k not in WELL_KNOWN_GROUPS}
        )

    def state(self, state: InteractionState | str) -> Mapping[str, Any] | None:
        return self._mapping_group(InteractionState(state).value)

    def group(self, path: str) -> Mapping[str, Any] | None:
        """Look up a group by dotted path, e.g. "responsive.mobile"."""
        node: Any = self._groups
        for part in path.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, Mapping) else None

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy."""
        return _thaw(self._groups)
