import pytest

from layerlint.core.config import CorruptionPattern, EngineConfig
from layerlint.core.validator import (
    ACCEPT, ACCEPT_WITH_WARNING, REVERT, SafetyValidator, imported_names,
)


HOOK_BEFORE = """import React, { useState } from 'react';
export function A() { const [a] = useState(0); return a; }
"""


@pytest.fixture
def validator():
    return SafetyValidator()


class TestOrder:
    def test_no_op_accepts_even_broken_code(self, validator):
        broken = "const a = (1;"
        assert validator.validate(broken, broken, "tsx").kind == ACCEPT

    def test_syntax_error_reverts(self, validator):
        v = validator.validate("const a = 1;", "const a = (1;", "tsx")
        assert v.kind == REVERT
        assert v.reason.startswith("Syntax error:")
        assert "line 1" in v.reason

    def test_no_grammar_skips_syntax(self, validator):
        assert validator.validate("notes", "notes {{", None).kind == ACCEPT

    def test_introduced_corruption_reverts(self, validator):
        before = "const a = <b>hi</b>;"
        after = "const a = <b onClick={() => go()}>hi</b>;"
        v = validator.validate(before, after, "tsx")
        assert v.kind == REVERT
        assert v.reason == "Corruption detected: Invalid JSX attributes"

    def test_preexisting_pattern_is_not_corruption(self, validator):
        before = "const a = <b onClick={() => go()}>hi</b>;"
        after = "const a = <b onClick={() => go()}>hello</b>;"
        assert validator.validate(before, after, "tsx").accepted

    def test_removed_critical_import_reverts(self, validator):
        after = HOOK_BEFORE.replace("React, { useState }", "React")
        v = validator.validate(HOOK_BEFORE, after, "tsx")
        assert v.kind == REVERT
        assert v.reason == "Logical issue: Critical imports removed: useState"

    def test_unused_critical_import_may_go(self, validator):
        before = "import { useEffect } from 'react';\nconst a = 1;\n"
        after = "const a = 1;\n"
        assert validator.validate(before, after, "tsx").accepted


class TestWarnings:
    def test_partial_entity_coverage(self, validator):
        v = validator.validate("const a = '&amp; &amp;';", "const a = '& &amp;';", "tsx")
        assert v.kind == ACCEPT_WITH_WARNING
        assert v.reason.startswith("Partial pattern coverage: HTML entities")
        assert v.accepted

    def test_large_shrink(self, validator):
        before = "const a = 1;\n" * 10
        v = validator.validate(before, "const a = 1;\n", "tsx")
        assert v.kind == ACCEPT_WITH_WARNING
        assert "shrank" in v.reason


class TestConfigurable:
    def test_custom_corruption_catalogue(self):
        config = EngineConfig(corruption_patterns=[CorruptionPattern(name="Debugger", pattern=r"\bdebugger\b")])
        v = SafetyValidator(config).validate("const a = 1;\n", "const a = 1;\ndebugger;\n", "tsx")
        assert v.reason == "Corruption detected: Debugger"

    def test_custom_critical_identifiers(self):
        before = "import { useMemo } from 'react';\nconst a = useMemo(() => 1, []);\n"
        after = "const a = useMemo(() => 1, []);\n"
        assert SafetyValidator().validate(before, after, "tsx").accepted
        config = EngineConfig(critical_identifiers=["useMemo"])
        assert SafetyValidator(config).validate(before, after, "tsx").kind == REVERT


def test_imported_names():
    text = """import React, { useState, type FC } from 'react';
import * as utils from './utils';
import {
  a as b,
} from "./x";
"""
    names = imported_names(text)
    assert {"React", "useState", "FC", "utils", "a", "b"} <= names
