"""
Runtime configuration for the Participa site generator.

Everything is read from environment variables; there are no command-line
flags. Defaults point at the production Aldea Pucela endpoints.
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Repository root: the generated site lives next to the generator.
# Installed copies have no templates beside them and use the working directory.
_CHECKOUT_DIR = Path(__file__).resolve().parent.parent
ROOT_DIR = _CHECKOUT_DIR if (_CHECKOUT_DIR / "templates").is_dir() else Path.cwd()

# Data sources (exported by n8n from NocoDB)
CAMPAIGNS_JSON_URL = "https://proyectos.aldeapucela.org/exports/participa/campaigns.json"
STATS_BASE_URL = "https://proyectos.aldeapucela.org/exports/participa/stats/"
UPLOADS_BASE_URL = "https://proyectos.aldeapucela.org/"

# Consumed only by the browser-side participation form
PARTICIPATION_WEBHOOK_URL = "https://tasks.nukeador.com/webhook/aldea-participa"

SITE_URL = "https://participa.aldeapucela.org"
DEFAULT_SOCIAL_PREVIEW_URL = "https://participa.aldeapucela.org/img/social-preview.jpg"


def _env(name: str, default: str) -> str:
    value = (os.getenv(name, "") or "").strip()
    return value or default


@dataclass(frozen=True)
class Settings:
    """Configuration for one generation run."""

    campaigns_url: str = CAMPAIGNS_JSON_URL
    stats_base_url: str = STATS_BASE_URL
    webhook_url: str = PARTICIPATION_WEBHOOK_URL
    uploads_base_url: str = UPLOADS_BASE_URL
    site_url: str = SITE_URL
    default_social_image: str = DEFAULT_SOCIAL_PREVIEW_URL
    output_dir: Path = ROOT_DIR
    template_dir: Path = ROOT_DIR / "templates"
    assets_root: Path = ROOT_DIR
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the environment.

        Recognised variables: CAMPAIGNS_JSON_URL, STATS_BASE_URL,
        PARTICIPATION_WEBHOOK_URL, UPLOADS_BASE_URL, SITE_URL, SITE_ROOT,
        OUTPUT_DIR and LOG_LEVEL. Unset or blank variables fall back to the defaults.
        """
        stats_base = _env("STATS_BASE_URL", STATS_BASE_URL)
        if not stats_base.endswith("/"):
            stats_base += "/"

        uploads_base = _env("UPLOADS_BASE_URL", UPLOADS_BASE_URL)
        if not uploads_base.endswith("/"):
            uploads_base += "/"

        site_root = Path(_env("SITE_ROOT", str(ROOT_DIR))).resolve()

        return cls(
            campaigns_url=_env("CAMPAIGNS_JSON_URL", CAMPAIGNS_JSON_URL),
            stats_base_url=stats_base,
            webhook_url=_env("PARTICIPATION_WEBHOOK_URL", PARTICIPATION_WEBHOOK_URL),
            uploads_base_url=uploads_base,
            site_url=_env("SITE_URL", SITE_URL).rstrip("/"),
            output_dir=Path(_env("OUTPUT_DIR", str(site_root))).resolve(),
            template_dir=site_root / "templates",
            assets_root=site_root,
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )
