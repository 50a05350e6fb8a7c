"""
Page renderer for the landing page and the per-campaign pages.

A PageRenderer owns one Jinja2 environment per run. The shared partial and
the template helpers are bound when the renderer is built, and both page
templates are loaded up front so a missing template fails the run before
anything is written.
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, Undefined, select_autoescape
from jinja2.utils import htmlsafe_json_dumps
from markupsafe import Markup

from site_config import Settings
from stats_summary import summarize_stats

logger = logging.getLogger(__name__)

INDEX_TEMPLATE = "index.html"
CAMPAIGN_TEMPLATE = "campaign.html"
BARRIOS_PARTIAL = "partials/barrios_options.html"

# Options for the neighbourhood selector (Valladolid)
BARRIOS = [
    "Arturo Eyries",
    "Barrio Belén",
    "Barrio España",
    "Batallas",
    "Caamaño-Las Viudas",
    "Campo Grande",
    "Canterac",
    "Centro",
    "Cuatro de Marzo",
    "Delicias",
    "Girón",
    "Hospital",
    "Huerta del Rey",
    "La Rondilla",
    "La Victoria",
    "Las Flores",
    "Los Pajarillos",
    "Pilarica",
    "Parquesol",
    "Paseo Zorrilla",
    "Pinar de Antequera",
    "San Juan",
    "San Nicolás",
    "San Pablo",
    "Santa Clara",
    "Vadillos",
    "Covaresa",
    "Las Villas",
    "Otro",
]


def json_literal(value: Any) -> Markup:
    """
    Serialize *value* as a JSON literal safe to embed in a <script> block.

    Absent values become `null`; anything json can't encode is stringified.
    """
    if value is None or isinstance(value, Undefined):
        return Markup("null")
    return htmlsafe_json_dumps(value, dumps=json.dumps, default=str, ensure_ascii=False, sort_keys=True)


class PageRenderer:
    """Renders index and campaign pages from the on-disk templates."""

    def __init__(self, template_dir: Union[str, Path], settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            keep_trailing_newline=True,
        )
        self.env.filters["json_literal"] = json_literal
        self.env.globals.update(
            json_literal=json_literal,
            barrios=tuple(BARRIOS),
            site_url=self.settings.site_url,
        )

        # Load everything now; TemplateNotFound/TemplateSyntaxError are fatal
        self.index_template = self.env.get_template(INDEX_TEMPLATE)
        self.campaign_template = self.env.get_template(CAMPAIGN_TEMPLATE)
        self.env.get_template(BARRIOS_PARTIAL)
        logger.info(f"Templates loaded from {template_dir}")

    def render_index(self, campaigns: Sequence[dict], asset_versions: Mapping[str, str]) -> str:
        return self.index_template.render(
            campaigns=list(campaigns),
            asset_versions=dict(asset_versions),
        )

    def campaign_config(self, campaign: dict) -> dict:
        """Settings the browser script reads from CAMPAIGN_CONFIG."""
        slug = campaign["slug"]
        return {
            "slug": slug,
            "complaintTemplate": campaign.get("complaint_template") or "",
            "whatsappNumber": campaign.get("whatsapp_number") or "",
            "statsUrl": f"{self.settings.stats_base_url}{slug}.json",
            "webhookUrl": self.settings.webhook_url,
        }

    def render_campaign(
        self,
        campaign: dict,
        stats: Optional[dict],
        asset_versions: Mapping[str, str],
    ) -> str:
        """Render one local campaign page. External campaigns have no page."""
        if campaign.get("external_url"):
            raise ValueError(f"Campaign {campaign.get('slug')} is external and has no local page")

        return self.campaign_template.render(
            campaign=campaign,
            stats=stats,
            summary=summarize_stats(stats),
            config=self.campaign_config(campaign),
            asset_versions=dict(asset_versions),
        )
