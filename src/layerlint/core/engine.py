"""
Engine facade: the one entry point callers need.

Owns the registry, the pipeline and the result cache. The pipeline never
sees the cache; lookups and stores happen here around each run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace

from layerlint.core.analysis import Analysis, LayerAdvisor
from layerlint.core.cache import ResultCache, content_hash
from layerlint.core.config import EngineConfig
from layerlint.core.diagnostics import DiagnosticClassifier
from layerlint.core.layers import LayerDescriptor, LayerRegistry, build_default_registry
from layerlint.core.layers.runner import ExecutionPipeline
from layerlint.core.layers.strategy import StrategySelector
from layerlint.core.run import CancellationToken, ExecutionRequest, PipelineResult, RunOptions
from layerlint.core.validator import SafetyValidator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchItem:
    text: str
    filename: str | None = None
    layers: tuple[int, ...] | None = None


class Engine:

    def __init__(self, config: EngineConfig | None = None, registry: LayerRegistry | None = None):
        self.config = config or EngineConfig()
        self.registry = registry or build_default_registry()
        self.pipeline = ExecutionPipeline(
            self.registry,
            selector=StrategySelector(),
            validator=SafetyValidator(self.config),
            classifier=DiagnosticClassifier(),
            default_timeout=self.config.default_timeout,
        )
        self.cache = ResultCache(self.config.cache_capacity)
        self.advisor = LayerAdvisor()

    def describe_layers(self) -> list[LayerDescriptor]:
        return self.registry.descriptors()

    def analyze(self, text: str, filename: str | None = None) -> Analysis:
        return self.advisor.analyze(text, filename)

    def run_layers(
        self,
        text: str,
        layers=None,
        options: RunOptions | None = None,
        filename: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> PipelineResult:
        """
        Run `layers` over `text`.

        layers=None runs the advisor's recommendation. Raises UnknownLayer for
        ids the registry does not hold. A critical abort is returned, not
        raised; call raise_for_abort() on the result to turn it into an error.
        """
        options = options or RunOptions()
        if layers is None:
            layers = self.advisor.analyze(text, filename).recommended_layers
            logger.debug("no layers requested, advisor recommends %s", layers)

        request = ExecutionRequest(text, tuple(layers), options, filename)
        resolution = self.pipeline.resolver.resolve(request.layers)
        key = content_hash(text, filename)

        if options.use_cache:
            cached = self.cache.get(key, resolution.corrected_layers)
            if cached is not None:
                logger.debug("cache hit for %s", filename or key[:12])
                return replace(
                    cached,
                    resolution=resolution,
                    from_cache=True,
                    dry_run=options.dry_run,
                    filename=filename,
                )

        result = self.pipeline.run(request, cancel=cancel, resolution=resolution)

        if options.use_cache:
            self.cache.put(key, resolution.corrected_layers, result)
        return result

    def run_batch(
        self,
        items: list[BatchItem],
        layers=None,
        options: RunOptions | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[PipelineResult]:
        """Run independent files concurrently. Results come back in input order."""
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures = [
                pool.submit(
                    self.run_layers,
                    item.text,
                    item.layers if item.layers is not None else layers,
                    options,
                    item.filename,
                    cancel,
                )
                for item in items
            ]
            return [f.result() for f in futures]
