"""
Generation pipeline for the Participa static site.

Fetches the campaign export, renders the landing page and one page per
active campaign, writes them under the output root and finally removes the
directories of campaigns that are gone. Configuration comes from the
environment (see site_config.py).
"""

import logging
import traceback
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Optional

import requests

from asset_versioner import compute_asset_versions
from campaign_catalog import CampaignCatalog, active_internal_slugs, load_catalog
from fetcher import fetch_json
from page_renderer import PageRenderer
from reconciler import OutputReconciler, ReconcileResult
from site_config import Settings

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Raised when the rendered page set can't be committed safely."""


@dataclass
class BuildReport:
    pages: list = field(default_factory=list)
    external: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    reconcile: ReconcileResult = field(default_factory=ReconcileResult)


def _external_label(campaign: dict) -> str:
    return str(campaign.get("slug") or campaign.get("external_url"))


def generate(settings: Settings, fetch: Optional[Callable[[str], Any]] = None) -> BuildReport:
    """
    Run one generation.

    Any exception escaping from here is fatal. Nothing touches the output
    root before every page has been rendered, and reconciliation only runs
    after every page has been written.
    """
    if fetch is None:
        with requests.Session() as session:
            return generate(settings, partial(fetch_json, session=session))

    logger.info("Starting campaign generation...")
    report = BuildReport()

    asset_versions = compute_asset_versions(settings.assets_root)
    renderer = PageRenderer(settings.template_dir, settings)
    reconciler = OutputReconciler(settings.output_dir)

    raw_campaigns = load_catalog(settings.campaigns_url, fetch)

    catalog = CampaignCatalog(
        settings.stats_base_url,
        fetch=fetch,
        uploads_base_url=settings.uploads_base_url,
        default_social_image=settings.default_social_image,
    )
    campaigns = catalog.build(raw_campaigns)
    report.warnings.extend(catalog.warnings)

    logger.info("Rendering index.html...")
    index_markup = renderer.render_index(campaigns, asset_versions)

    pages = []
    for campaign in campaigns:
        if campaign["is_external"]:
            report.external.append(_external_label(campaign))
            continue
        logger.info(f"Rendering {campaign['slug']}...")
        pages.append((campaign["slug"], renderer.render_campaign(campaign, campaign["stats"], asset_versions)))

    clashes = sorted(slug for slug, _ in pages if slug in reconciler.ignored)
    if clashes:
        raise BuildError(f"Campaign slugs clash with reserved directories: {', '.join(clashes)}")

    reconciler.write_index(index_markup)
    for slug, markup in pages:
        reconciler.write_page(slug, markup)
        report.pages.append(slug)

    report.reconcile = reconciler.reconcile(active_internal_slugs(campaigns))
    return report


def log_summary(report: BuildReport, settings: Settings) -> None:
    logger.info(f"Generated index.html and {len(report.pages)} campaign pages in {settings.output_dir}")
    for slug in report.pages:
        logger.info(f"  - {slug}/index.html")
    if report.external:
        logger.info(f"  External campaigns (index link only): {', '.join(map(str, report.external))}")
    if report.reconcile.deleted:
        logger.info(f"  Removed: {', '.join(report.reconcile.deleted)}")
    if report.reconcile.kept_for_review:
        logger.warning(f"  Left for review: {', '.join(report.reconcile.kept_for_review)}")
    if report.warnings:
        logger.warning(f"Completed with {len(report.warnings)} warnings")


def main() -> int:
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        report = generate(settings)
        log_summary(report, settings)
        logger.info("Generation complete!")
    except Exception as e:
        logger.error(f"Build failed: {e}")
        traceback.print_exc()
        return 1

    return 0
