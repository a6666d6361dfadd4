import pytest

from layerlint.core.edits import SourceEditor
from layerlint.core.errors import StructuralParseError, StructuralTransformError
from layerlint.core.syntax import check_syntax, language_for, parse, parse_strict


class TestLanguageFor:
    def test_mapping(self):
        assert language_for("a.tsx") == "tsx"
        assert language_for("a.jsx") == "tsx"
        assert language_for("a.js") == "tsx"
        assert language_for("a.ts") == "typescript"
        assert language_for("tsconfig.json") == "json"

    def test_no_hint_means_tsx(self):
        assert language_for(None) == "tsx"

    def test_unknown_extension(self):
        assert language_for("README.md") is None


class TestParse:
    def test_valid(self):
        st = parse_strict("const a = <p>hi</p>;\n", "tsx")
        assert st.root.type == "program"

    def test_error_position(self):
        with pytest.raises(StructuralParseError) as exc:
            parse_strict("const a = 1;\nconst b = <div>hi;\n", "tsx")
        assert exc.value.line is not None and exc.value.line >= 2

    def test_check_syntax(self):
        assert check_syntax('{"a": 1}', "json") is None
        assert check_syntax('{"a": }', "json") is not None
        assert check_syntax("anything", None) is None


class TestSourceEditor:
    def test_edits_apply_in_source_order(self):
        st = parse("let a = 1;\nlet b = 2;\n", "tsx")
        nums = [n for n in st.walk() if n.type == "number"]
        editor = SourceEditor(st)
        editor.replace(nums[1], "20")
        editor.replace(nums[0], "10")
        assert editor.apply() == "let a = 10;\nlet b = 20;\n"

    def test_inserts_at_same_offset_keep_order(self):
        st = parse("x;\n", "tsx")
        editor = SourceEditor(st)
        editor.insert_at(0, "a")
        editor.insert_at(0, "b")
        assert editor.apply() == "abx;\n"

    def test_overlap_rejected(self):
        st = parse("foo(bar);\n", "tsx")
        call = next(n for n in st.walk() if n.type == "call_expression")
        editor = SourceEditor(st)
        editor.replace(call, "x")
        editor.replace(call.child_by_field_name("arguments"), "(y)")
        with pytest.raises(StructuralTransformError):
            editor.apply()

    def test_non_ascii_offsets(self):
        st = parse("const s = 'é'; let n = 1;\n", "tsx")
        num = next(n for n in st.walk() if n.type == "number")
        editor = SourceEditor(st)
        editor.replace(num, "2")
        assert editor.apply() == "const s = 'é'; let n = 2;\n"
