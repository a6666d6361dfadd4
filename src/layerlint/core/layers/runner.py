# src/layerlint/core/layers/runner.py
"""
Layer execution pipeline.

Runs the corrected layer list over one file, strictly in ascending id order.
Each step is transformed, validated, then accepted or reverted. A layer that
raises fails on its own (the text is unchanged for the next layer) unless it
is critical, in which case the run stops and returns what it has.
"""

import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeout

from layerlint.core.changes import count_changed_lines, detect_improvements
from layerlint.core.diagnostics import DiagnosticClassifier
from layerlint.core.errors import LayerTimeout
from layerlint.core.layers import LayerRegistry, TransformContext
from layerlint.core.layers.resolver import DependencyResolver, Resolution
from layerlint.core.layers.strategy import StrategySelector
from layerlint.core.run import (
    ACCEPTED, FAILED, REVERTED,
    CancellationToken, ExecutionRequest, LayerOutcome, PipelineResult, Snapshot,
)
from layerlint.core.syntax import language_for
from layerlint.core.validator import SafetyValidator


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ExecutionPipeline:

    def __init__(
        self,
        registry: LayerRegistry,
        selector: StrategySelector | None = None,
        validator: SafetyValidator | None = None,
        classifier: DiagnosticClassifier | None = None,
        default_timeout: float = DEFAULT_TIMEOUT,
    ):
        self.registry = registry
        self.resolver = DependencyResolver(registry)
        self.selector = selector or StrategySelector()
        self.validator = validator or SafetyValidator()
        self.classifier = classifier or DiagnosticClassifier()
        self.default_timeout = default_timeout

    def run(
        self,
        request: ExecutionRequest,
        cancel: CancellationToken | None = None,
        resolution: Resolution | None = None,
    ) -> PipelineResult:
        """
        Run one file through its layers.

        Resolution happens here unless the caller already resolved (the
        engine does, so it can build a cache key). UnknownLayer propagates.
        """
        if resolution is None:
            resolution = self.resolver.resolve(request.layers)

        opts = request.options
        log_level = logging.INFO if opts.verbose else logging.DEBUG
        for warning in resolution.warnings:
            logger.log(log_level, warning)

        language = language_for(request.filename)
        context = TransformContext(request.filename, language)
        timeout = self.default_timeout if opts.timeout is None else opts.timeout

        start = time.perf_counter()
        deadline = start + timeout
        current = request.text
        snapshots = [Snapshot(None, "initial", current)]
        outcomes: list[LayerOutcome] = []
        aborted = False
        abort_reason = None
        abort_layer = None
        cancelled = False

        for layer_id in resolution.corrected_layers:
            if cancel is not None and cancel.cancelled:
                logger.log(log_level, "run cancelled before layer %d", layer_id)
                cancelled = True
                break

            unit = self.registry.get(layer_id)
            descriptor = unit.descriptor
            previous = current

            if not descriptor.applies_to(request.filename):
                logger.log(log_level, "layer %d (%s) skipped: not applicable to %s",
                           layer_id, descriptor.name, request.filename)
                snapshots.append(Snapshot(layer_id, ACCEPTED, current))
                outcomes.append(LayerOutcome(layer_id, ACCEPTED, current, skipped=True))
                continue

            logger.log(log_level, "layer %d (%s) starting", layer_id, descriptor.name)
            step_start = time.perf_counter()

            try:
                remaining = deadline - step_start
                if remaining <= 0:
                    raise LayerTimeout(layer_id, timeout)
                result = self._transform_with_budget(unit, previous, context, remaining, timeout)
                verdict = self.validator.validate(previous, result.text, language)
            except Exception as e:
                elapsed = time.perf_counter() - step_start
                diagnostic = self.classifier.classify(layer_id, e)
                logger.warning("layer %d (%s) failed: %s", layer_id, descriptor.name, e)
                outcomes.append(LayerOutcome(
                    layer_id, FAILED, previous,
                    elapsed=elapsed,
                    error=str(e),
                    diagnostic=diagnostic,
                ))
                if descriptor.critical:
                    aborted = True
                    abort_reason = f"Critical layer {layer_id} ({descriptor.name}) failed: {e}"
                    abort_layer = layer_id
                    logger.warning(abort_reason)
                    break
                continue

            elapsed = time.perf_counter() - step_start

            if not verdict.accepted:
                logger.warning("layer %d (%s) reverted: %s", layer_id, descriptor.name, verdict.reason)
                snapshots.append(Snapshot(layer_id, REVERTED, previous))
                outcomes.append(LayerOutcome(
                    layer_id, REVERTED, previous,
                    elapsed=elapsed,
                    revert_reason=verdict.reason,
                    strategy=result.strategy,
                    fallback_reason=result.fallback_reason,
                ))
                continue

            current = result.text
            snapshots.append(Snapshot(layer_id, ACCEPTED, current))
            change_count = count_changed_lines(previous, current)
            improvements = result.fixes or tuple(detect_improvements(previous, current))
            if verdict.reason:
                logger.log(log_level, "layer %d (%s) accepted with warning: %s",
                           layer_id, descriptor.name, verdict.reason)
            else:
                logger.log(log_level, "layer %d (%s) accepted: %d line(s) changed in %.3fs",
                           layer_id, descriptor.name, change_count, elapsed)
            outcomes.append(LayerOutcome(
                layer_id, ACCEPTED, current,
                elapsed=elapsed,
                change_count=change_count,
                improvements=tuple(improvements) if current != previous else (),
                warning=verdict.reason,
                strategy=result.strategy,
                fallback_reason=result.fallback_reason,
            ))

        return PipelineResult(
            original_text=request.text,
            final_text=current,
            outcomes=tuple(outcomes),
            snapshots=tuple(snapshots),
            total_elapsed=time.perf_counter() - start,
            resolution=resolution,
            aborted=aborted,
            abort_reason=abort_reason,
            abort_layer=abort_layer,
            cancelled=cancelled,
            dry_run=opts.dry_run,
            filename=request.filename,
        )

    def _transform_with_budget(self, unit, text, context, remaining, timeout):
        """
        Run the transform on a worker thread and wait at most `remaining`.

        A transform that overruns cannot be interrupted; its result is
        discarded when it eventually finishes. Workers are daemon threads and
        never hold up interpreter exit.
        """
        future = Future()

        def work():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.selector.transform(unit, text, context))
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=work, name=f"layer-{unit.id}", daemon=True).start()
        try:
            return future.result(timeout=remaining)
        except FutureTimeout:
            raise LayerTimeout(unit.id, timeout) from None
