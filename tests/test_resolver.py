import pytest

from layerlint.core.errors import UnknownLayer
from layerlint.core.layers import build_default_registry
from layerlint.core.layers.resolver import DependencyResolver


@pytest.fixture
def resolver():
    return DependencyResolver(build_default_registry())


class TestResolve:
    def test_adds_missing_dependencies(self, resolver):
        r = resolver.resolve([3])
        assert r.corrected_layers == (1, 2, 3)
        assert r.auto_added == (1, 2)
        assert r.requested == (3,)
        assert r.warnings == (
            "Layer 3 (Components) requires 1 (Configuration), 2 (Entity Cleanup). "
            "Auto-added missing dependencies.",
        )

    def test_complete_request_has_no_warnings(self, resolver):
        r = resolver.resolve([1, 2])
        assert r.corrected_layers == (1, 2)
        assert r.auto_added == ()
        assert r.warnings == ()

    def test_dedupes_and_sorts(self, resolver):
        r = resolver.resolve([2, 1, 2])
        assert r.corrected_layers == (1, 2)

    def test_transitive_closure(self, resolver):
        r = resolver.resolve([6])
        assert r.corrected_layers == (1, 2, 3, 4, 5, 6)
        assert r.auto_added == (1, 2, 3, 4, 5)

    def test_one_warning_per_requesting_layer(self, resolver):
        r = resolver.resolve([3, 5])
        assert r.corrected_layers == (1, 2, 3, 4, 5)
        assert len(r.warnings) == 2
        assert r.warnings[1].startswith("Layer 5 (Next.js App Router) requires 1 (Configuration), 2 (Entity Cleanup), 4 (Hydration).")

    def test_empty_request(self, resolver):
        assert resolver.resolve([]).corrected_layers == ()

    def test_unknown_layer(self, resolver):
        with pytest.raises(UnknownLayer) as exc:
            resolver.resolve([2, 9])
        assert exc.value.layer_id == 9

    def test_closure_covers_every_dependency(self, resolver):
        registry = build_default_registry()
        for requested in ([4], [2, 6], [5, 1]):
            corrected = set(resolver.resolve(requested).corrected_layers)
            for lid in corrected:
                assert registry.get(lid).descriptor.dependencies <= corrected
