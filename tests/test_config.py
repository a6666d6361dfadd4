import json

import pytest
from pydantic import ValidationError

from layerlint.core.config import CorruptionPattern, EngineConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LAYERLINT_CONFIG", "LAYERLINT_CACHE_CAPACITY", "LAYERLINT_TIMEOUT", "LAYERLINT_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig.load()
        assert config.cache_capacity == 256
        assert config.default_timeout == 30.0
        assert "useState" in config.critical_identifiers
        assert any(p.name == "Broken import statements" for p in config.corruption_patterns)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LAYERLINT_CACHE_CAPACITY", "8")
        monkeypatch.setenv("LAYERLINT_TIMEOUT", "2.5")
        config = EngineConfig.load()
        assert config.cache_capacity == 8
        assert config.default_timeout == 2.5

    def test_json_file(self, tmp_path):
        path = tmp_path / "layerlint.json"
        path.write_text(json.dumps({
            "critical_identifiers": ["React", "useRouter"],
            "corruption_patterns": [{"name": "Stray TODO", "pattern": "TODO!!"}],
        }))
        config = EngineConfig.load(path)
        assert config.critical_identifiers == ["React", "useRouter"]
        assert config.corruption_patterns[0].compile().search("x TODO!! y")

    def test_config_env_points_at_file(self, tmp_path, monkeypatch):
        path = tmp_path / "c.json"
        path.write_text('{"max_workers": 2}')
        monkeypatch.setenv("LAYERLINT_CONFIG", str(path))
        assert EngineConfig.load().max_workers == 2

    def test_invalid_regex(self):
        with pytest.raises(ValidationError):
            CorruptionPattern(name="bad", pattern="(unclosed")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            EngineConfig(default_timeout=0)
