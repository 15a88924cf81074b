"""Tests for Settings configuration model."""

import pytest

from healthyai.config import Settings


class TestUrls:
    def test_default_urls(self):
        s = Settings()
        assert s.models_url() == "http://localhost:11434/api/tags"
        assert s.generate_url() == "http://localhost:11434/api/generate"
        assert s.pull_url() == "http://localhost:11434/api/pull"

    def test_trailing_slash_on_base(self):
        s = Settings(ollama_base_url="http://gpu-box:11434/")
        assert s.generate_url() == "http://gpu-box:11434/api/generate"

    def test_custom_paths(self):
        s = Settings(ollama_models_path="models", ollama_generate_path="/generate")
        assert s.models_url() == "http://localhost:11434/models"
        assert s.generate_url() == "http://localhost:11434/generate"


class TestDefaults:
    def test_default_model(self):
        assert Settings().default_model == "llama3.2"

    def test_generation_defaults(self):
        s = Settings()
        assert s.temperature == 0.7
        assert s.max_tokens == 500

    def test_knowledge_defaults(self):
        s = Settings()
        assert s.knowledge_enabled is True
        assert s.retrieval_top_k == 3

    def test_default_database_path(self):
        from pathlib import Path

        assert Settings().database_path == Path("data/healthyai.db")


class TestValidation:
    def test_unknown_field_raises(self):
        with pytest.raises(ValueError, match="extra_forbidden"):
            Settings(**{"nonexistent_field": "value"})

    def test_temperature_out_of_range(self):
        with pytest.raises(ValueError):
            Settings(temperature=5.0)
