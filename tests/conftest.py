"""
Shared fixtures.
"""

import pytest

from layerlint.core.engine import Engine
from layerlint.core.layers import Capabilities, LayerDescriptor, LayerRegistry, LayerUnit, Rewrite


def textual_unit(layer_id, fn, deps=(), critical=False, file_types=(), name=None):
    """A textual-only unit whose transform is `fn(text) -> str`."""
    descriptor = LayerDescriptor(
        id=layer_id,
        name=name or f"Layer {layer_id}",
        dependencies=frozenset(deps),
        critical=critical,
        capabilities=Capabilities(structural=False, textual=True),
        file_types=frozenset(file_types),
    )
    return LayerUnit(descriptor, textual=lambda text, ctx: Rewrite(fn(text)))


@pytest.fixture
def make_unit():
    return textual_unit


@pytest.fixture
def make_registry():
    def _make(*units):
        return LayerRegistry(list(units))
    return _make


@pytest.fixture
def engine():
    return Engine()


class FakeRedis:
    """Just enough of redis.Redis for RunStore."""

    def __init__(self):
        self.data = {}
        self.lists = {}

    def set(self, key, value):
        self.data[key] = value.encode() if isinstance(value, str) else value

    def get(self, key):
        return self.data.get(key)

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    def rpush(self, key, value):
        self.lists.setdefault(key, []).append(value.encode())

    def lrange(self, key, start, end):
        items = self.lists.get(key, [])
        return items[start:] if end == -1 else items[start:end + 1]

    def lrem(self, key, count, value):
        items = self.lists.get(key, [])
        self.lists[key] = [i for i in items if i != value.encode()]


@pytest.fixture
def fake_redis():
    return FakeRedis()
