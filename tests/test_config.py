"""
Tests for configuration and token budget lookup.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from synopsis import config
from synopsis.config import get_backend_config, get_token_budget, load_backend_configs


@pytest.fixture
def restore_backend_configs():
    yield
    load_backend_configs()


class TestTokenBudgets:
    """Test budget resolution from config/backends.yaml."""

    @pytest.mark.parametrize("kind, expected", [
        ("local", 512),
        ("ollama", 2048),
        ("huggingface", 1024),
        ("openai", 8000),
        ("claude", 8000),
        ("gemini", 8000),
    ])
    def test_backend_defaults(self, kind, expected):
        assert get_token_budget(kind) == expected

    def test_t5_models_have_smaller_budget(self):
        assert get_token_budget("local", "t5-small") == 400
        assert get_token_budget("local", "google-t5/t5-base") == 400

    def test_unlisted_model_uses_backend_budget(self):
        assert get_token_budget("local", "sshleifer/distilbart-cnn-6-6") == 512

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            get_backend_config("telegraph")


class TestConfigFile:
    """Test fallbacks when the YAML file is missing or broken."""

    def test_missing_file_uses_defaults(self, tmp_path, restore_backend_configs):
        load_backend_configs(tmp_path / "missing.yaml")

        assert config.BACKEND_CONFIGS == config.DEFAULT_BACKEND_CONFIGS
        assert get_token_budget("local", "t5-small") == 400

    def test_invalid_yaml_uses_defaults(self, tmp_path, restore_backend_configs):
        bad_file = tmp_path / "backends.yaml"
        bad_file.write_text("backends: [unclosed\n", encoding="utf-8")

        load_backend_configs(bad_file)

        assert get_token_budget("openai") == 8000

    def test_custom_file(self, tmp_path, restore_backend_configs):
        custom = tmp_path / "backends.yaml"
        custom.write_text(
            "backends:\n"
            "  local:\n"
            "    default_model: my/model\n"
            "    token_budget: 256\n",
            encoding="utf-8",
        )

        load_backend_configs(custom)

        assert get_backend_config("local")["default_model"] == "my/model"
        assert get_token_budget("local") == 256
        with pytest.raises(ValueError):
            get_backend_config("openai")
