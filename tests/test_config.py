"""Test configuration reading from multiple sources."""

import os
from datetime import timedelta
from unittest.mock import patch

from zivy.configs.config import PROJECT_ROOT, AppConfig
from zivy.configs.system import KnowledgeConfig, LLMConfig


class TestConfigSources:
    """Test configuration loading from multiple sources."""

    def test_static_yaml_defaults(self):
        config = AppConfig()

        assert config.llm.model_name == "gpt-4o"
        assert config.knowledge.filename == "travdif_knowledge.txt"
        assert "https://travdif.com" in config.cors.allow_origins

    def test_env_vars_override_nested_fields(self):
        env_vars = {
            "ZIVY_LLM__PROVIDER": "gemini",
            "ZIVY_SESSIONS__CAPACITY": "50",
            "ZIVY_CORS__ALLOW_ALL": "true",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

        assert config.llm.provider == "gemini"
        assert config.sessions.capacity == 50
        assert config.cors.allow_all is True

    def test_init_kwargs_beat_env(self):
        with patch.dict(os.environ, {"ZIVY_LLM__PROVIDER": "gemini"}, clear=False):
            config = AppConfig(llm=LLMConfig(provider="assistant"))

        assert config.llm.provider == "assistant"

    def test_assistant_poll_interval_accepts_iso_duration(self):
        with patch.dict(
            os.environ, {"ZIVY_ASSISTANT__POLL_INTERVAL": "PT2S"}, clear=False
        ):
            config = AppConfig()

        assert config.assistant.poll_interval == timedelta(seconds=2)
        assert config.assistant.max_poll_attempts == 30


class TestLLMConfig:
    def test_api_keys_fall_back_to_vendor_env_vars(self):
        env_vars = {"OPENAI_API_KEY": "sk-env", "GOOGLE_API_KEY": "g-env"}

        with patch.dict(os.environ, env_vars, clear=False):
            llm = LLMConfig()

        assert llm.openai_api_key == "sk-env"
        assert llm.google_api_key == "g-env"

    def test_api_key_follows_provider(self):
        llm = LLMConfig(openai_api_key="sk", google_api_key="g")

        assert llm.api_key == "sk"
        assert llm.model_copy(update={"provider": "gemini"}).api_key == "g"
        assert llm.model_copy(update={"provider": "assistant"}).api_key == "sk"

    def test_defaults(self):
        llm = LLMConfig()

        assert llm.max_tokens == 600
        assert llm.model_timeout == timedelta(seconds=60)
        assert "gpt-4o-mini" in llm.allowed_models


class TestKnowledgePath:
    def test_relative_directory_is_under_project_root(self):
        config = AppConfig(knowledge=KnowledgeConfig(directory="knowledge"))

        expected = PROJECT_ROOT / "knowledge" / "travdif_knowledge.txt"
        assert config.knowledge_path == expected
        assert config.knowledge_path.is_absolute()

    def test_absolute_directory_is_kept(self, tmp_path):
        config = AppConfig(
            knowledge=KnowledgeConfig(directory=str(tmp_path), filename="kb.txt")
        )

        assert config.knowledge_path == tmp_path / "kb.txt"
