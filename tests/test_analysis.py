import pytest

from layerlint.core.analysis import LayerAdvisor


advisor = LayerAdvisor()


class TestAdvisor:
    def test_clean_code_recommends_foundation_only(self):
        a = advisor.analyze("const a = 1;\n")
        assert a.recommended_layers == [1]
        assert a.issues == []
        assert a.confidence == 0.5
        assert a.impact["level"] == "low"

    def test_entities_recommend_layer_two(self):
        a = advisor.analyze("const a = '&quot;hi&quot;';\n")
        assert a.recommended_layers == [1, 2]
        assert a.issues[0].count == 2
        assert a.confidence == pytest.approx(0.6)

    def test_unguarded_storage(self):
        a = advisor.analyze("const v = localStorage.getItem('k');\n")
        assert 4 in a.recommended_layers
        assert a.confidence == pytest.approx(0.9)
        assert a.impact["level"] == "medium"

    def test_component_issues(self):
        src = """import { useState } from 'react';
export function List({ items }) {
  const [open] = useState(false);
  return <ul>{items.map(i => <li>{i.name}</li>)}<img src="a.png" /></ul>;
}
"""
        a = advisor.analyze(src, "List.tsx")
        patterns = {i.pattern for i in a.issues}
        assert "Missing key props" in patterns
        assert "Accessibility issues" in patterns
        assert "Missing use client for hooks" in patterns
        assert a.recommended_layers == [1, 3, 5]

    def test_reasons_mention_layers(self):
        a = advisor.analyze("console.log('x');\n")
        assert a.reasons[0] == "Configuration layer provides essential foundation"
        assert "Layer 2: 1 medium priority issues detected" in a.reasons

    def test_to_dict(self):
        data = advisor.analyze("const a = 1;\n").to_dict()
        assert set(data) == {"recommended_layers", "issues", "reasons", "confidence", "impact"}
