"""
Tests for kube_config resolution and the run-wide kubeconfig default.

Covers:
- Source exclusivity (path vs capi_provider)
- Provider tag and attribute validation
- Default registration and propagation through the context
- Override precedence and the fallback for malformed overrides
"""

import pytest

from flare.errors import (
    AmbiguousSource,
    AttributeNotFound,
    InvalidArguments,
    InvalidAttributeType,
    InvalidDefaultConfiguration,
    MissingSource,
    NoConfigurationAvailable,
    UnsupportedProvider,
)
from flare.modules.builtins import (
    KUBE_CONFIG,
    Struct,
    add_default_kube_config,
    get_effective_config,
    resolve_config,
)
from flare.modules.builtins.kube_config import kube_config_fn
from flare.modules.builtins.providers import capv_provider_fn, struct_fn


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def capv():
    """A recognized provider pointing at /tmp/a.yaml."""
    return Struct("capv_provider", {"kubeconfig": "/tmp/a.yaml"})


class TaglessProvider:
    """Provider adapter without a type tag."""

    def __init__(self, path):
        self.path = path

    def type_tag(self):
        return None

    def kubeconfig_path(self):
        return self.path


# =============================================================================
# Source exclusivity
# =============================================================================


class TestSourceExclusivity:

    def test_both_sources_rejected(self, context, capv):
        with pytest.raises(AmbiguousSource):
            kube_config_fn(context, (), [("path", "/tmp/b.yaml"), ("capi_provider", capv)])
        assert context.get(KUBE_CONFIG) is None

    def test_no_source_rejected(self, context):
        with pytest.raises(MissingSource):
            kube_config_fn(context, (), ())
        assert context.get(KUBE_CONFIG) is None

    def test_empty_path_counts_as_absent(self, context):
        with pytest.raises(MissingSource):
            kube_config_fn(context, (), [("path", "")])

    def test_empty_path_with_provider_uses_provider(self, context, capv):
        result = kube_config_fn(context, (), [("path", ""), ("capi_provider", capv)])
        assert result.attr("path") == "/tmp/a.yaml"

    def test_keyword_only(self, context):
        with pytest.raises(InvalidArguments):
            kube_config_fn(context, ("/tmp/a.yaml",), ())

    def test_path_must_be_string(self, context):
        with pytest.raises(InvalidArguments) as exc:
            kube_config_fn(context, (), [("path", 5)])
        assert exc.value.param == "path"

    def test_provider_must_implement_capability(self, context):
        with pytest.raises(InvalidArguments) as exc:
            kube_config_fn(context, (), [("capi_provider", "capv_provider")])
        assert exc.value.param == "capi_provider"


# =============================================================================
# Resolution
# =============================================================================


class TestResolveConfig:

    def test_explicit_path_used_verbatim(self, context):
        result = kube_config_fn(context, (), [("path", "~/does/not/exist")])

        assert result.constructor == "kube_config"
        assert result.attr("path") == "~/does/not/exist"
        assert context.get(KUBE_CONFIG) == result

    def test_provider_happy_path(self, context, capv):
        result = resolve_config(None, capv, context)

        assert result.attr("path") == "/tmp/a.yaml"
        assert context.get(KUBE_CONFIG) is result

    def test_provider_from_builtin(self, context):
        provider = capv_provider_fn(context, (), [("kubeconfig", "/tmp/wc.yaml"), ("workload_cluster", "wc")])
        result = kube_config_fn(context, (), [("capi_provider", provider)])
        assert result.attr("path") == "/tmp/wc.yaml"

    def test_unrecognized_provider(self, context):
        other = Struct("other", {"kubeconfig": "/tmp/a.yaml"})
        with pytest.raises(UnsupportedProvider) as exc:
            resolve_config(None, other, context)
        assert "other" in str(exc.value)
        assert context.get(KUBE_CONFIG) is None

    def test_generic_struct_is_not_a_provider(self, context):
        generic = struct_fn(context, (), [("kubeconfig", "/tmp/a.yaml")])
        with pytest.raises(UnsupportedProvider):
            resolve_config(None, generic, context)

    def test_untagged_provider_is_trusted(self, context):
        result = resolve_config(None, TaglessProvider("/tmp/c.yaml"), context)
        assert result.attr("path") == "/tmp/c.yaml"

    def test_provider_missing_kubeconfig(self, context):
        with pytest.raises(AttributeNotFound) as exc:
            resolve_config(None, Struct("capv_provider", {"workload_cluster": "wc"}), context)
        assert exc.value.name == "kubeconfig"

    def test_provider_kubeconfig_wrong_type(self, context):
        with pytest.raises(InvalidAttributeType):
            resolve_config(None, Struct("capv_provider", {"kubeconfig": 7}), context)

    def test_later_resolution_supersedes(self, context):
        resolve_config("/tmp/first", None, context)
        resolve_config("/tmp/second", None, context)
        assert context.get(KUBE_CONFIG).attr("path") == "/tmp/second"

    def test_add_default_kube_config(self, context):
        add_default_kube_config(context, "/home/me/.kube/config")
        assert get_effective_config(None, context) == "/home/me/.kube/config"


# =============================================================================
# Effective config lookup
# =============================================================================


class TestGetEffectiveConfig:

    def test_default_propagation(self, context):
        resolve_config("/tmp/a.yaml", None, context)
        before = context.snapshot()

        assert get_effective_config(None, context) == "/tmp/a.yaml"
        assert context.snapshot() == before

    def test_override_takes_precedence(self, context):
        resolve_config("/tmp/default.yaml", None, context)
        inline = Struct("kube_config", {"path": "/tmp/inline.yaml"})

        assert get_effective_config(inline, context) == "/tmp/inline.yaml"
        # Override is call-local, the run default is untouched
        assert context.get(KUBE_CONFIG).attr("path") == "/tmp/default.yaml"

    def test_override_without_default(self, context):
        inline = Struct("kube_config", {"path": "/tmp/inline.yaml"})
        assert get_effective_config(inline, context) == "/tmp/inline.yaml"

    @pytest.mark.parametrize(
        "override",
        [
            "/tmp/not-a-struct",
            Struct("kube_config", {}),
            Struct("kube_config", {"path": 3}),
        ],
    )
    def test_malformed_override_falls_back_to_default(self, context, override):
        resolve_config("/tmp/default.yaml", None, context)
        assert get_effective_config(override, context) == "/tmp/default.yaml"

    def test_malformed_override_without_default(self, context):
        with pytest.raises(NoConfigurationAvailable):
            get_effective_config(Struct("kube_config", {}), context)

    def test_no_configuration_available(self, context):
        with pytest.raises(NoConfigurationAvailable):
            get_effective_config(None, context)

    def test_malformed_default(self, context):
        context.set(KUBE_CONFIG, {"path": "/tmp/a.yaml"})
        with pytest.raises(InvalidDefaultConfiguration):
            get_effective_config(None, context)

    def test_default_with_non_string_path(self, context):
        context.set(KUBE_CONFIG, Struct("kube_config", {"path": None}))
        with pytest.raises(InvalidDefaultConfiguration):
            get_effective_config(None, context)
