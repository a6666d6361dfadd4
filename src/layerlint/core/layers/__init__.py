# src/layerlint/core/layers/__init__.py
"""
Layer-based transformation architecture.

Each layer:
  - Has a unique integer ID (execution order is ascending ID)
  - Declares dependencies on lower-numbered layers
  - Declares which strategies it supports (structural, textual)
  - Registers the transform callables that back those strategies

There is no global registry. Build one with build_default_registry() or
assemble a LayerRegistry by hand.
"""

from dataclasses import dataclass, field
from typing import Callable

from layerlint.core.errors import CyclicDependency, LayerRegistrationError, UnknownLayer
from layerlint.core.syntax import SourceTree, extension_of


@dataclass(frozen=True)
class Capabilities:
    structural: bool = False
    textual: bool = True


@dataclass(frozen=True)
class LayerDescriptor:
    id: int
    name: str
    description: str = ""
    dependencies: frozenset[int] = frozenset()
    critical: bool = False
    capabilities: Capabilities = Capabilities()
    file_types: frozenset[str] = frozenset()  # empty = every file

    def applies_to(self, filename: str | None) -> bool:
        if not self.file_types or not filename:
            return True
        return extension_of(filename) in self.file_types

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "dependencies": sorted(self.dependencies),
            "critical": self.critical,
            "capabilities": {
                "structural": self.capabilities.structural,
                "textual": self.capabilities.textual,
            },
            "file_types": sorted(self.file_types),
        }


@dataclass(frozen=True)
class TransformContext:
    filename: str | None
    language: str | None


@dataclass
class Rewrite:
    """What a transform callable returns."""
    text: str
    fixes: list[str] = field(default_factory=list)


StructuralFn = Callable[[SourceTree, TransformContext], Rewrite]
TextualFn = Callable[[str, TransformContext], Rewrite]


@dataclass(frozen=True)
class LayerUnit:
    descriptor: LayerDescriptor
    structural: StructuralFn | None = None
    textual: TextualFn | None = None

    @property
    def id(self) -> int:
        return self.descriptor.id


def _find_cycle(units: dict[int, LayerUnit]) -> list[int] | None:
    """DFS over dependency edges. Returns the cycle path if one exists."""
    WHITE, GREY, BLACK = 0, 1, 2
    color = {lid: WHITE for lid in units}
    stack: list[int] = []

    def visit(lid: int) -> list[int] | None:
        color[lid] = GREY
        stack.append(lid)
        for dep in sorted(units[lid].descriptor.dependencies):
            if dep not in units:
                continue
            if color[dep] == GREY:
                return stack[stack.index(dep):] + [dep]
            if color[dep] == WHITE:
                found = visit(dep)
                if found:
                    return found
        stack.pop()
        color[lid] = BLACK
        return None

    for lid in sorted(units):
        if color[lid] == WHITE:
            found = visit(lid)
            if found:
                return found
    return None


class LayerRegistry:
    """Validated set of layer units keyed by id."""

    def __init__(self, units: list[LayerUnit] | None = None):
        self._units: dict[int, LayerUnit] = {}
        if units:
            self.register_all(units)

    def register(self, unit: LayerUnit) -> LayerUnit:
        self.register_all([unit])
        return unit

    def register_all(self, units: list[LayerUnit]):
        """
        Add units atomically. Either all are registered or none are.

        Raises LayerRegistrationError on bad ids, duplicates, dangling
        dependencies or dependencies on a higher id, and CyclicDependency
        when the dependency graph loops.
        """
        staged = dict(self._units)
        for unit in units:
            lid = unit.id
            if not isinstance(lid, int) or isinstance(lid, bool) or lid < 1:
                raise LayerRegistrationError(f"Layer id must be a positive integer, got {lid!r}")
            if lid in staged:
                raise LayerRegistrationError(f"Layer {lid} is already registered")
            caps = unit.descriptor.capabilities
            if not (caps.structural or caps.textual):
                raise LayerRegistrationError(f"Layer {lid} declares no strategy")
            if caps.structural and unit.structural is None and unit.textual is None:
                raise LayerRegistrationError(f"Layer {lid} registers no transform")
            if not caps.structural and unit.textual is None:
                raise LayerRegistrationError(f"Layer {lid} is textual but registers no textual transform")
            staged[lid] = unit

        for unit in units:
            for dep in unit.descriptor.dependencies:
                if dep not in staged:
                    raise LayerRegistrationError(f"Layer {unit.id} depends on unregistered layer {dep}")

        cycle = _find_cycle(staged)
        if cycle:
            raise CyclicDependency(cycle)

        for unit in units:
            for dep in unit.descriptor.dependencies:
                if dep >= unit.id:
                    raise LayerRegistrationError(
                        f"Layer {unit.id} depends on layer {dep}; dependencies must have lower ids"
                    )

        self._units = staged

    def get(self, layer_id: int) -> LayerUnit:
        if layer_id not in self._units:
            raise UnknownLayer(layer_id, list(self._units))
        return self._units[layer_id]

    def ids(self) -> list[int]:
        return sorted(self._units)

    def descriptors(self) -> list[LayerDescriptor]:
        return [self._units[lid].descriptor for lid in self.ids()]

    def __contains__(self, layer_id) -> bool:
        return layer_id in self._units

    def __iter__(self):
        return iter(self._units[lid] for lid in self.ids())

    def __len__(self) -> int:
        return len(self._units)


def build_default_registry() -> LayerRegistry:
    """Registry holding the six built-in layers."""
    from layerlint.core.layers import config, patterns, components, hydration, nextjs, testing

    return LayerRegistry([
        config.layer,
        patterns.layer,
        components.layer,
        hydration.layer,
        nextjs.layer,
        testing.layer,
    ])
