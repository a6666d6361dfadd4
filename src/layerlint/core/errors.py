"""
Error taxonomy for the layer engine.

Only UnknownLayer (at resolution time) and CriticalLayerFailure (via
PipelineResult.raise_for_abort) are meant to reach callers. Everything else is
caught at the pipeline boundary and turned into a LayerOutcome.
"""


class LayerlintError(Exception):
    """Base class for all engine errors."""


# === Registration / resolution ===

class LayerRegistrationError(LayerlintError):
    """A layer could not be added to the registry."""


class UnknownLayer(LayerlintError):
    def __init__(self, layer_id, available: list[int] | None = None):
        self.layer_id = layer_id
        self.available = sorted(available or [])
        listing = ", ".join(str(a) for a in self.available) or "(none)"
        super().__init__(f"Unknown layer: {layer_id}. Available: {listing}")


class CyclicDependency(LayerRegistrationError):
    def __init__(self, cycle: list[int]):
        self.cycle = cycle
        path = " -> ".join(str(c) for c in cycle)
        super().__init__(f"Cyclic layer dependency: {path}")


# === Transform time ===

class StructuralError(LayerlintError):
    """Parse or tree-mutation failure. Recoverable via textual fallback."""


class StructuralParseError(StructuralError):
    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class StructuralTransformError(StructuralError):
    pass


class NoFallbackAvailable(LayerlintError):
    def __init__(self, layer_id: int, cause: Exception):
        self.layer_id = layer_id
        self.cause = cause
        super().__init__(f"Layer {layer_id} structural transform failed with no textual fallback: {cause}")


class LayerTimeout(LayerlintError):
    def __init__(self, layer_id: int, timeout: float):
        self.layer_id = layer_id
        self.timeout = timeout
        super().__init__(f"Layer {layer_id} exceeded the {timeout:.2f}s time budget")


# === Pipeline level ===

class CriticalLayerFailure(LayerlintError):
    def __init__(self, layer_id: int, reason: str):
        self.layer_id = layer_id
        self.reason = reason
        super().__init__(f"Critical layer {layer_id} failed: {reason}")
