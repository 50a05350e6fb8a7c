"""
Campaign catalog: filter, enrich and order the raw campaign export.

The catalog fetch itself is fatal when it fails. Per-campaign stats lookups
are best-effort: a failed lookup yields a StatsLookup carrying the zeroed
default and the error text, and never raises out of this module.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from fetcher import FetchError, fetch_json
from site_config import DEFAULT_SOCIAL_PREVIEW_URL, UPLOADS_BASE_URL

logger = logging.getLogger(__name__)

# Output file inside each campaign directory, and the landing page at the root
PAGE_FILENAME = "index.html"

ZERO_STATS = {
    "totales": {
        "total_reclamaciones": 0,
        "total_barrios": 0,
        "barrios": {},
    },
    "historico_semanal": [],
}


class CatalogError(Exception):
    """The campaign export is unusable (wrong shape, bad or duplicated slugs)."""


def zero_stats() -> dict:
    """Fresh copy of the zeroed stats default."""
    return copy.deepcopy(ZERO_STATS)


@dataclass(frozen=True)
class StatsLookup:
    """Outcome of one stats lookup: the stats to render plus the error, if any."""

    slug: str
    stats: dict
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_external(campaign: dict) -> bool:
    return bool(campaign.get("external_url"))


def is_safe_slug(slug: Any) -> bool:
    """A slug must be usable as exactly one directory name."""
    if not isinstance(slug, str) or not slug:
        return False
    if slug.startswith(".") or "/" in slug or "\\" in slug:
        return False
    if slug == PAGE_FILENAME:
        return False
    return slug == slug.strip()


def _sort_key(campaign: dict) -> float:
    order = campaign.get("order")
    if isinstance(order, bool):
        return float("inf")
    try:
        return float(order)
    except (TypeError, ValueError):
        return float("inf")


def load_catalog(url: str, fetch: Callable[[str], Any] = fetch_json) -> list:
    """Fetch the raw campaign list. Any failure here aborts the run."""
    logger.info(f"Fetching campaigns data from {url}...")
    raw = fetch(url)
    if not isinstance(raw, list):
        raise CatalogError(f"Expected a JSON array of campaigns from {url}, got {type(raw).__name__}")
    logger.info(f"Found {len(raw)} campaigns")
    return raw


def active_internal_slugs(campaigns: Iterable[dict]) -> set:
    """Slugs of the campaigns that own a local output directory."""
    return {c["slug"] for c in campaigns if not is_external(c)}


class CampaignCatalog:
    """Turns the raw export into the ordered list the renderer consumes."""

    def __init__(
        self,
        stats_base_url: str,
        fetch: Callable[[str], Any] = fetch_json,
        uploads_base_url: str = UPLOADS_BASE_URL,
        default_social_image: str = DEFAULT_SOCIAL_PREVIEW_URL,
    ):
        self.stats_base_url = stats_base_url
        self.fetch = fetch
        self.uploads_base_url = uploads_base_url
        self.default_social_image = default_social_image
        self.warnings: list[str] = []

    def stats_url(self, slug: str) -> str:
        return f"{self.stats_base_url}{slug}.json"

    def lookup_stats(self, slug: str) -> StatsLookup:
        """Best-effort stats fetch for one campaign."""
        url = self.stats_url(slug)
        try:
            data = self.fetch(url)
        except FetchError as e:
            return StatsLookup(slug, zero_stats(), str(e))

        if not isinstance(data, dict):
            return StatsLookup(slug, zero_stats(), f"Unexpected stats payload from {url}: {type(data).__name__}")
        return StatsLookup(slug, data)

    def resolve_social_image(self, campaign: dict) -> str:
        """
        Absolute URL of the social preview image.

        Uses the first uploaded descriptor when the campaign has any,
        otherwise the site-wide default.
        """
        images = campaign.get("social_preview_img")
        if not isinstance(images, list) or not images:
            return self.default_social_image

        first = images[0]
        if not isinstance(first, dict):
            return self.default_social_image

        path = first.get("path") or first.get("signedPath")
        if path:
            path = str(path)
            if path.startswith(("http://", "https://")):
                return path
            return self.uploads_base_url + path.lstrip("/")
        if first.get("url"):
            return str(first["url"])
        return self.default_social_image

    def enrich(self, campaign: dict) -> dict:
        """New dict with the preview image, link target and stats attached."""
        enriched = dict(campaign)
        enriched["social_image_url"] = self.resolve_social_image(campaign)
        enriched["is_external"] = is_external(campaign)

        if enriched["is_external"]:
            enriched["url"] = campaign["external_url"]
            enriched["stats"] = None
            enriched["stats_ok"] = False
            return enriched

        enriched["url"] = f"/{campaign['slug']}/"
        lookup = self.lookup_stats(campaign["slug"])
        if not lookup.ok:
            logger.warning(f"No stats for {lookup.slug}, using zeroed defaults: {lookup.error}")
            self.warnings.append(f"{lookup.slug}: {lookup.error}")
        enriched["stats"] = lookup.stats
        enriched["stats_ok"] = lookup.ok
        return enriched

    def _check_slugs(self, campaigns: list) -> None:
        seen = set()
        for campaign in campaigns:
            if is_external(campaign):
                continue
            slug = campaign.get("slug")
            if not is_safe_slug(slug):
                raise CatalogError(f"Campaign {campaign.get('title')!r} has an unusable slug: {slug!r}")
            if slug in seen:
                raise CatalogError(f"Duplicate slug among active campaigns: {slug}")
            seen.add(slug)

    def build(self, raw_campaigns: list) -> list:
        """Filter to active campaigns, enrich them, and sort by `order` (stable)."""
        self.warnings = []

        campaigns = []
        for entry in raw_campaigns:
            if not isinstance(entry, dict):
                logger.warning(f"Skipping malformed campaign entry: {entry!r}")
                continue
            if entry.get("active"):
                campaigns.append(entry)
        logger.info(f"{len(campaigns)} active campaigns")

        self._check_slugs(campaigns)

        enriched = [self.enrich(c) for c in campaigns]
        # sorted() is stable, ties keep export order
        return sorted(enriched, key=_sort_key)
