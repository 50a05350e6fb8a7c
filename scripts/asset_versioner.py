"""Content-derived cache-busting tags for the static assets."""

import hashlib
import logging
import time
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Union

logger = logging.getLogger(__name__)

TAG_LENGTH = 8

# Logical asset name -> path relative to the site root
DEFAULT_ASSETS = {
    "css": "css/style.css",
    "js": "js/campaign.js",
}


def _fallback_tag() -> str:
    return format(time.time_ns() // 1_000_000, "x")


def version_of(path: Union[str, Path]) -> str:
    """
    Short hex tag derived from the file's current bytes.

    Unreadable files get a timestamp-derived tag instead so the build can go
    on with degraded cache-busting.
    """
    try:
        digest = hashlib.sha256(Path(path).read_bytes()).hexdigest()
    except OSError as e:
        tag = _fallback_tag()
        logger.warning(f"Could not read asset {path} ({e}), using fallback version {tag}")
        return tag
    return digest[:TAG_LENGTH]


def compute_asset_versions(
    site_root: Union[str, Path],
    assets: Mapping[str, str] = DEFAULT_ASSETS,
) -> Mapping[str, str]:
    """Version every asset once; the result is read-only for the rest of the run."""
    root = Path(site_root)
    versions = {name: version_of(root / rel_path) for name, rel_path in assets.items()}
    logger.info("Asset versions: " + ", ".join(f"{k}={v}" for k, v in versions.items()))
    return MappingProxyType(versions)
