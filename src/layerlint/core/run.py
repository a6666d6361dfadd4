"""
Run models - what goes into a pipeline run and what comes out.
"""

import threading
from dataclasses import dataclass, field

from layerlint.core.diagnostics import Diagnostic
from layerlint.core.errors import CriticalLayerFailure
from layerlint.core.layers.resolver import Resolution


ACCEPTED = "accepted"
REVERTED = "reverted"
FAILED = "failed"


@dataclass(frozen=True)
class RunOptions:
    dry_run: bool = False
    verbose: bool = False
    timeout: float | None = None   # seconds per file; None = engine default
    use_cache: bool = True


@dataclass(frozen=True)
class ExecutionRequest:
    text: str
    layers: tuple[int, ...]
    options: RunOptions = RunOptions()
    filename: str | None = None


class CancellationToken:
    """Cooperative cancel flag, checked by the pipeline between layers."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class LayerOutcome:
    layer_id: int
    status: str
    code: str
    elapsed: float = 0.0
    change_count: int = 0
    improvements: tuple[str, ...] = ()
    error: str | None = None
    revert_reason: str | None = None
    warning: str | None = None
    diagnostic: Diagnostic | None = None
    strategy: str | None = None
    fallback_reason: str | None = None
    skipped: bool = False

    @property
    def success(self) -> bool:
        return self.status == ACCEPTED

    def to_dict(self) -> dict:
        return {
            "layer_id": self.layer_id,
            "status": self.status,
            "success": self.success,
            "code": self.code,
            "elapsed": self.elapsed,
            "change_count": self.change_count,
            "improvements": list(self.improvements),
            "error": self.error,
            "revert_reason": self.revert_reason,
            "warning": self.warning,
            "diagnostic": self.diagnostic.to_dict() if self.diagnostic else None,
            "strategy": self.strategy,
            "fallback_reason": self.fallback_reason,
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class Snapshot:
    layer_id: int | None  # None for the initial state
    status: str           # "initial", ACCEPTED or REVERTED
    text: str


@dataclass(frozen=True)
class PipelineResult:
    original_text: str
    final_text: str
    outcomes: tuple[LayerOutcome, ...]
    snapshots: tuple[Snapshot, ...]
    total_elapsed: float
    resolution: Resolution
    aborted: bool = False
    abort_reason: str | None = None
    abort_layer: int | None = None
    cancelled: bool = False
    dry_run: bool = False
    from_cache: bool = False
    filename: str | None = None

    @property
    def successful_layers(self) -> int:
        return sum(1 for o in self.outcomes if o.success and not o.skipped)

    @property
    def changed(self) -> bool:
        return self.final_text != self.original_text

    @property
    def has_critical_failure(self) -> bool:
        return self.aborted

    @property
    def has_timeout(self) -> bool:
        return any(o.diagnostic is not None and o.diagnostic.category == "timeout" for o in self.outcomes)

    def outcome(self, layer_id: int) -> LayerOutcome | None:
        for o in self.outcomes:
            if o.layer_id == layer_id:
                return o
        return None

    def text_after(self, layer_id: int | None) -> str:
        """
        Text as it stood once `layer_id` finished (None = before any layer).

        Layers that never got a snapshot (failed, skipped, not reached) leave
        the text as the previous snapshot had it.
        """
        text = self.original_text
        for snap in self.snapshots:
            if layer_id is not None and snap.layer_id is not None and snap.layer_id > layer_id:
                break
            text = snap.text
            if snap.layer_id == layer_id:
                break
        return text

    def raise_for_abort(self):
        if self.aborted:
            raise CriticalLayerFailure(self.abort_layer, self.abort_reason or "aborted")

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "original_text": self.original_text,
            "final_text": self.final_text,
            "changed": self.changed,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "snapshots": [
                {"layer_id": s.layer_id, "status": s.status, "text": s.text} for s in self.snapshots
            ],
            "total_elapsed": self.total_elapsed,
            "successful_layers": self.successful_layers,
            "resolution": self.resolution.to_dict(),
            "aborted": self.aborted,
            "abort_reason": self.abort_reason,
            "cancelled": self.cancelled,
            "dry_run": self.dry_run,
            "from_cache": self.from_cache,
        }
