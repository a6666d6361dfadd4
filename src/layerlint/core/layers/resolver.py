"""
Dependency resolution: turn a requested set of layer ids into the corrected,
ordered set that actually runs.
"""

import logging
from dataclasses import dataclass, field

from layerlint.core.errors import UnknownLayer
from layerlint.core.layers import LayerRegistry


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    corrected_layers: tuple[int, ...]
    auto_added: tuple[int, ...] = ()
    warnings: tuple[str, ...] = ()
    requested: tuple[int, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "requested": list(self.requested),
            "corrected_layers": list(self.corrected_layers),
            "auto_added": list(self.auto_added),
            "warnings": list(self.warnings),
        }


class DependencyResolver:
    def __init__(self, registry: LayerRegistry):
        self.registry = registry

    def _closure(self, layer_id: int) -> set[int]:
        seen: set[int] = set()
        todo = list(self.registry.get(layer_id).descriptor.dependencies)
        while todo:
            dep = todo.pop()
            if dep in seen:
                continue
            seen.add(dep)
            todo.extend(self.registry.get(dep).descriptor.dependencies)
        return seen

    def resolve(self, requested) -> Resolution:
        """
        Add every missing prerequisite (transitively), dedupe and sort.

        Raises UnknownLayer for any id the registry does not hold; no partial
        result is produced in that case.
        """
        requested = tuple(requested)
        available = self.registry.ids()
        for lid in requested:
            if lid not in self.registry:
                raise UnknownLayer(lid, available)

        asked = set(requested)
        auto_added: set[int] = set()
        warnings = []
        for lid in sorted(asked):
            missing = sorted(self._closure(lid) - asked)
            if not missing:
                continue
            auto_added.update(missing)
            name = self.registry.get(lid).descriptor.name
            deps = ", ".join(
                f"{d} ({self.registry.get(d).descriptor.name})" for d in missing
            )
            warnings.append(
                f"Layer {lid} ({name}) requires {deps}. Auto-added missing dependencies."
            )

        corrected = tuple(sorted(asked | auto_added))
        if auto_added:
            logger.debug("resolved %s -> %s", list(requested), list(corrected))
        return Resolution(
            corrected_layers=corrected,
            auto_added=tuple(sorted(auto_added)),
            warnings=tuple(warnings),
            requested=requested,
        )
