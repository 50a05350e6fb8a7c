"""
Participa preview server

Renders the landing page and campaign pages on demand from the live
campaign export, exactly as build_static.py would write them. Nothing is
written to or deleted from the output root.
"""

import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from flask import Flask, abort, jsonify, send_from_directory

sys.path.insert(0, str(Path(__file__).resolve().parent / "scripts"))

from asset_versioner import compute_asset_versions
from campaign_catalog import CampaignCatalog, load_catalog
from fetcher import fetch_json
from page_renderer import PageRenderer
from site_config import Settings

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__, static_folder=None)
settings = Settings.from_env()

# Cache duration (5 minutes)
CACHE_DURATION = timedelta(minutes=5)
_cache: dict[str, Any] = {"data": None, "timestamp": None}


def get_campaigns() -> list:
    """Enriched campaign list with caching; a stale copy is served if a refresh fails."""
    now = datetime.now()

    if _cache["data"] is not None and _cache["timestamp"] is not None:
        if now - _cache["timestamp"] < CACHE_DURATION:
            logger.info("Serving campaigns from cache")
            return _cache["data"]

    logger.info("Fetching campaigns...")
    try:
        raw = load_catalog(settings.campaigns_url, fetch_json)
        catalog = CampaignCatalog(
            settings.stats_base_url,
            fetch=fetch_json,
            uploads_base_url=settings.uploads_base_url,
            default_social_image=settings.default_social_image,
        )
        campaigns = catalog.build(raw)
        _cache["data"] = campaigns
        _cache["timestamp"] = now
        return campaigns
    except Exception as e:
        logger.error(f"Failed to fetch campaigns: {e}")
        if _cache["data"] is not None:
            return _cache["data"]
        raise


def get_renderer() -> PageRenderer:
    return PageRenderer(settings.template_dir, settings)


@app.route("/")
def index():
    """Serve the landing page."""
    campaigns = get_campaigns()
    return get_renderer().render_index(campaigns, compute_asset_versions(settings.assets_root))


@app.route("/<slug>/")
def campaign_page(slug: str):
    """Serve one local campaign page."""
    campaigns = get_campaigns()
    campaign = next((c for c in campaigns if c.get("slug") == slug and not c["is_external"]), None)
    if campaign is None:
        abort(404)
    return get_renderer().render_campaign(
        campaign, campaign["stats"], compute_asset_versions(settings.assets_root)
    )


@app.route("/api/campaigns")
def api_campaigns():
    """Return the enriched campaign list as JSON."""
    try:
        return jsonify(get_campaigns())
    except Exception as e:
        logger.error(f"Error loading campaigns: {e}")
        return jsonify({"error": str(e)}), 500


@app.route("/css/<path:filename>")
def css(filename: str):
    return send_from_directory(settings.assets_root / "css", filename)


@app.route("/js/<path:filename>")
def js(filename: str):
    return send_from_directory(settings.assets_root / "js", filename)


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=8080, debug=True)
