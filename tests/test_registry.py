import pytest

from layerlint.core.errors import CyclicDependency, LayerRegistrationError, UnknownLayer
from layerlint.core.layers import LayerRegistry, build_default_registry


def identity(text):
    return text


class TestDefaultRegistry:
    def test_six_layers_in_order(self):
        registry = build_default_registry()
        assert registry.ids() == [1, 2, 3, 4, 5, 6]
        names = [d.name for d in registry.descriptors()]
        assert names[0] == "Configuration"
        assert names[2] == "Components"

    def test_each_layer_depends_on_all_lower(self):
        for d in build_default_registry().descriptors():
            assert d.dependencies == frozenset(range(1, d.id))

    def test_only_layer_one_is_critical(self):
        critical = [d.id for d in build_default_registry().descriptors() if d.critical]
        assert critical == [1]

    def test_get_unknown(self):
        with pytest.raises(UnknownLayer) as exc:
            build_default_registry().get(42)
        assert "Available: 1, 2, 3, 4, 5, 6" in str(exc.value)


class TestRegistration:
    def test_cycle_rejected(self, make_unit):
        registry = LayerRegistry()
        with pytest.raises(CyclicDependency) as exc:
            registry.register_all([
                make_unit(1, identity, deps=[2]),
                make_unit(2, identity, deps=[1]),
            ])
        assert exc.value.cycle == [1, 2, 1]
        assert "1 -> 2 -> 1" in str(exc.value)

    def test_self_dependency_is_a_cycle(self, make_unit):
        with pytest.raises(CyclicDependency):
            LayerRegistry([make_unit(1, identity, deps=[1])])

    def test_dangling_dependency(self, make_unit):
        with pytest.raises(LayerRegistrationError, match="unregistered layer 7"):
            LayerRegistry([make_unit(1, identity, deps=[7])])

    def test_dependency_on_higher_id(self, make_unit):
        with pytest.raises(LayerRegistrationError, match="lower ids"):
            LayerRegistry([make_unit(1, identity, deps=[2]), make_unit(2, identity)])

    def test_duplicate_id(self, make_unit):
        registry = LayerRegistry([make_unit(1, identity)])
        with pytest.raises(LayerRegistrationError, match="already registered"):
            registry.register(make_unit(1, identity))

    def test_bad_id(self, make_unit):
        with pytest.raises(LayerRegistrationError):
            LayerRegistry([make_unit(0, identity)])

    def test_failed_batch_leaves_registry_untouched(self, make_unit):
        registry = LayerRegistry([make_unit(1, identity)])
        with pytest.raises(CyclicDependency):
            registry.register_all([
                make_unit(2, identity, deps=[3]),
                make_unit(3, identity, deps=[2]),
            ])
        assert registry.ids() == [1]

    def test_incremental_registration(self, make_unit):
        registry = LayerRegistry([make_unit(1, identity)])
        registry.register(make_unit(2, identity, deps=[1]))
        assert 2 in registry
        assert len(registry) == 2
