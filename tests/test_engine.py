import pytest

from layerlint.core.engine import BatchItem, Engine
from layerlint.core.errors import UnknownLayer
from layerlint.core.run import RunOptions


ENTITY_SOURCE = "const a = <p>&quot;Hello&quot;</p>;\n"


def boom(text):
    raise RuntimeError("boom")


class TestEngine:
    def test_describe_layers(self, engine):
        layers = engine.describe_layers()
        assert [d.id for d in layers] == [1, 2, 3, 4, 5, 6]
        assert layers[5].name == "Testing & Validation"
        assert layers[2].capabilities.structural

    def test_unknown_layer(self, engine):
        with pytest.raises(UnknownLayer):
            engine.run_layers("x", [99])

    def test_cache_hit(self, engine):
        first = engine.run_layers(ENTITY_SOURCE, [2])
        second = engine.run_layers(ENTITY_SOURCE, [2])
        assert not first.from_cache
        assert second.from_cache
        assert second.final_text == first.final_text

    def test_cache_key_uses_corrected_layers(self, engine):
        engine.run_layers(ENTITY_SOURCE, [2])
        assert engine.run_layers(ENTITY_SOURCE, [1, 2]).from_cache

    def test_cache_hit_reports_current_resolution(self, engine):
        src = "const x = items.map(i => <li>{i.name}</li>);\n"
        engine.run_layers(src, [3])
        second = engine.run_layers(src, [1, 2, 3])
        assert second.from_cache
        assert second.resolution.requested == (1, 2, 3)
        assert second.resolution.auto_added == ()
        assert second.resolution.warnings == ()

    def test_cache_bypass(self, engine):
        engine.run_layers(ENTITY_SOURCE, [2])
        assert not engine.run_layers(ENTITY_SOURCE, [2], RunOptions(use_cache=False)).from_cache

    def test_critical_failure_never_cached(self, make_unit, make_registry):
        engine = Engine(registry=make_registry(make_unit(1, boom, critical=True)))
        first = engine.run_layers("const a = 1;\n", [1])
        assert first.aborted
        second = engine.run_layers("const a = 1;\n", [1])
        assert not second.from_cache
        assert len(engine.cache) == 0

    def test_dry_run_flag_survives_cache(self, engine):
        engine.run_layers(ENTITY_SOURCE, [2])
        preview = engine.run_layers(ENTITY_SOURCE, [2], RunOptions(dry_run=True))
        assert preview.dry_run
        assert preview.from_cache
        assert preview.original_text == ENTITY_SOURCE

    def test_no_layers_runs_recommendation(self, engine):
        result = engine.run_layers(ENTITY_SOURCE)
        assert result.resolution.requested == (1, 2)
        assert '"Hello"' in result.final_text

    def test_broken_input_is_never_made_worse(self, engine):
        broken = "const a = <div>&quot;x&quot;;\n"
        result = engine.run_layers(broken, [6], filename="a.tsx")
        assert result.final_text == broken
        for o in result.outcomes:
            if o.status == "reverted":
                assert o.revert_reason.startswith("Syntax error")
            elif o.status == "accepted":
                assert o.change_count == 0

    def test_batch_keeps_order(self, engine):
        items = [
            BatchItem("console.log('a');\n", "a.ts"),
            BatchItem(ENTITY_SOURCE, "b.tsx"),
            BatchItem("const c = 1;\n", "c.tsx", layers=(1,)),
        ]
        results = engine.run_batch(items, layers=[2])
        assert [r.filename for r in results] == ["a.ts", "b.tsx", "c.tsx"]
        assert "console.debug('a')" in results[0].final_text
        assert results[2].resolution.corrected_layers == (1,)
