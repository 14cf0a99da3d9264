"""Tests for ResolvedStyleConfiguration."""

from types import MappingProxyType

import pytest

from stylecast.styles.models import InteractionState, ResolvedStyleConfiguration


@pytest.fixture
def config() -> ResolvedStyleConfiguration:
    return ResolvedStyleConfiguration(
        {
            "base": {"color": "red", "fontFamily": ["Inter", "sans-serif"]},
            "hover": {"color": "pink"},
            "variants": {"primary": {"base": {"color": "blue"}}},
            "responsive": {"mobile": {"padding": "4px"}},
            "header": {"height": "64px"},
        }
    )


class TestResolvedStyleConfiguration:
    """Typed access over a read-only group map."""

    def test_typed_groups(self, config: ResolvedStyleConfiguration) -> None:
        assert config.base["color"] == "red"
        assert config.hover == {"color": "pink"}
        assert config.focus is None
        assert config.variants["primary"]["base"]["color"] == "blue"

    def test_state_lookup(self, config: ResolvedStyleConfiguration) -> None:
        assert config.state(InteractionState.HOVER) == {"color": "pink"}
        assert config.state("disabled") is None

    def test_dotted_group_lookup(self, config: ResolvedStyleConfiguration) -> None:
        assert config.group("responsive.mobile") == {"padding": "4px"}
        assert config.group("responsive.tablet") is None
        assert config.group("base.color") is None

    def test_extensions_hold_unknown_groups(self, config: ResolvedStyleConfiguration) -> None:
        assert dict(config.extensions) == {"header": {"height": "64px"}}

    def test_empty_defaults(self) -> None:
        empty = ResolvedStyleConfiguration()
        assert empty.base is None
        assert dict(empty.variants) == {}
        assert dict(empty.responsive) == {}

    def test_deeply_read_only(self, config: ResolvedStyleConfiguration) -> None:
        assert isinstance(config.base, MappingProxyType)
        with pytest.raises(TypeError):
            config.base["color"] = "green"  # type: ignore[index]
        assert config.base["fontFamily"] == ("Inter", "sans-serif")

    def test_source_mutation_does_not_leak(self) -> None:
        source = {"base": {"color": "red"}}
        config = ResolvedStyleConfiguration(source)
        source["base"]["color"] = "green"
        assert config.base["color"] == "red"

    def test_to_dict_is_mutable_copy(self, config: ResolvedStyleConfiguration) -> None:
        data = config.to_dict()
        data["base"]["color"] = "green"
        assert data["base"]["fontFamily"] == ["Inter", "sans-serif"]
        assert config.base["color"] == "red"
