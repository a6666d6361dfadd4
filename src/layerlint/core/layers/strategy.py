"""
Strategy selection: structural (tree-sitter) first, textual fallback.
"""

import logging
from dataclasses import dataclass

from layerlint.core.errors import NoFallbackAvailable, StructuralError, StructuralTransformError
from layerlint.core.layers import LayerUnit, Rewrite, TransformContext
from layerlint.core.syntax import parse_strict


logger = logging.getLogger(__name__)


STRUCTURAL = "structural"
TEXTUAL = "textual"


@dataclass(frozen=True)
class TransformResult:
    text: str
    strategy: str
    fixes: tuple[str, ...] = ()
    fallback_reason: str | None = None


class StrategySelector:

    def transform(self, unit: LayerUnit, text: str, context: TransformContext) -> TransformResult:
        caps = unit.descriptor.capabilities
        if not (caps.structural and unit.structural is not None and context.language):
            return self._textual(unit, text, context)

        try:
            source_tree = parse_strict(text, context.language)
            rewrite = unit.structural(source_tree, context)
            _check_rewrite(rewrite)
            return TransformResult(rewrite.text, STRUCTURAL, tuple(rewrite.fixes))
        except StructuralError as e:
            if caps.textual and unit.textual is not None:
                logger.info("layer %d: structural transform failed (%s), using textual fallback", unit.id, e)
                result = self._textual(unit, text, context)
                return TransformResult(result.text, TEXTUAL, result.fixes, fallback_reason=str(e))
            raise NoFallbackAvailable(unit.id, e) from e

    def _textual(self, unit: LayerUnit, text: str, context: TransformContext) -> TransformResult:
        if unit.textual is None:
            # declared structural-only and no grammar to parse with
            return TransformResult(text, TEXTUAL)
        rewrite = unit.textual(text, context)
        _check_rewrite(rewrite, TypeError, "textual")
        return TransformResult(rewrite.text, TEXTUAL, tuple(rewrite.fixes))


def _check_rewrite(rewrite, error=StructuralTransformError, kind="structural"):
    if not isinstance(rewrite, Rewrite) or not isinstance(rewrite.text, str):
        got = type(rewrite.text if isinstance(rewrite, Rewrite) else rewrite).__name__
        raise error(f"{kind} transform returned {got}")
