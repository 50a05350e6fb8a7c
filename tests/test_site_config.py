"""
Tests for environment configuration.

Run with: pytest tests/test_site_config.py -v
"""

import sys
from pathlib import Path

# Add scripts directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

import site_config
from site_config import Settings

ENV_VARS = [
    "CAMPAIGNS_JSON_URL",
    "STATS_BASE_URL",
    "PARTICIPATION_WEBHOOK_URL",
    "UPLOADS_BASE_URL",
    "SITE_URL",
    "SITE_ROOT",
    "OUTPUT_DIR",
    "LOG_LEVEL",
]


class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.campaigns_url == site_config.CAMPAIGNS_JSON_URL
        assert settings.stats_base_url == site_config.STATS_BASE_URL
        assert settings.webhook_url == site_config.PARTICIPATION_WEBHOOK_URL
        assert settings.output_dir == site_config.ROOT_DIR
        assert settings.log_level == "INFO"

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CAMPAIGNS_JSON_URL", "https://staging.example.org/campaigns.json")
        monkeypatch.setenv("STATS_BASE_URL", "https://staging.example.org/stats")
        monkeypatch.setenv("PARTICIPATION_WEBHOOK_URL", "https://hooks.example.org/participa")
        monkeypatch.setenv("SITE_URL", "https://staging.example.org/")
        monkeypatch.setenv("OUTPUT_DIR", str(tmp_path))
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.campaigns_url == "https://staging.example.org/campaigns.json"
        assert settings.stats_base_url == "https://staging.example.org/stats/"
        assert settings.webhook_url == "https://hooks.example.org/participa"
        assert settings.site_url == "https://staging.example.org"
        assert settings.output_dir == tmp_path.resolve()
        assert settings.log_level == "DEBUG"

    def test_blank_values_use_defaults(self, monkeypatch):
        monkeypatch.setenv("CAMPAIGNS_JSON_URL", "   ")

        assert Settings.from_env().campaigns_url == site_config.CAMPAIGNS_JSON_URL

    def test_site_root_moves_templates_and_assets(self, monkeypatch, tmp_path):
        """An installed build points SITE_ROOT at the site checkout."""
        monkeypatch.delenv("OUTPUT_DIR", raising=False)
        monkeypatch.setenv("SITE_ROOT", str(tmp_path))

        settings = Settings.from_env()

        assert settings.template_dir == tmp_path.resolve() / "templates"
        assert settings.assets_root == tmp_path.resolve()
        assert settings.output_dir == tmp_path.resolve()
