"""
Writes rendered pages into the output root and removes the directories of
campaigns that are no longer active.

reconcile() is destructive. The orchestrator only calls it once every page
of the current run has been written.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

from campaign_catalog import PAGE_FILENAME, is_safe_slug

logger = logging.getLogger(__name__)

# Top-level directories that are part of the repo, never campaign output
IGNORED_DIRECTORIES = frozenset({
    ".git",
    ".github",
    "node_modules",
    "venv",
    "env",
    "__pycache__",
    "build",
    "dist",
    "scripts",
    "templates",
    "tests",
    "css",
    "js",
    "img",
    "video",
    "fonts",
})


@dataclass
class ReconcileResult:
    deleted: list = field(default_factory=list)
    kept_for_review: list = field(default_factory=list)


class OutputReconciler:
    """Owns index.html and the <slug>/ directories under one output root."""

    def __init__(self, output_root: Union[str, Path], ignored: Iterable[str] = IGNORED_DIRECTORIES):
        self.output_root = Path(output_root)
        self.ignored = frozenset(ignored)

    def _write(self, path: Path, markup: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markup, encoding="utf-8")
        return path

    def write_index(self, markup: str) -> Path:
        path = self._write(self.output_root / PAGE_FILENAME, markup)
        logger.info(f"Generated: {PAGE_FILENAME}")
        return path

    def write_page(self, slug: str, markup: str) -> Path:
        """Create <slug>/ if needed and overwrite <slug>/index.html."""
        if not is_safe_slug(slug) or slug in self.ignored:
            raise ValueError(f"Refusing to write campaign page for slug {slug!r}")
        path = self._write(self.output_root / slug / PAGE_FILENAME, markup)
        logger.info(f"Generated: {slug}/{PAGE_FILENAME}")
        return path

    def candidates(self) -> list:
        """Top-level directories that may hold campaign output, sorted by name."""
        if not self.output_root.is_dir():
            return []
        found = []
        for entry in sorted(self.output_root.iterdir()):
            if entry.is_symlink() or not entry.is_dir():
                continue
            if entry.name.startswith(".") or entry.name in self.ignored:
                continue
            found.append(entry)
        return found

    def reconcile(self, active_slugs: Iterable[str]) -> ReconcileResult:
        """
        Delete output directories whose slug is not in *active_slugs*.

        Only directories that look like generated pages (they hold an
        index.html) are removed. Anything else is unknown to the generator;
        it is left in place and logged for review.
        """
        keep = set(active_slugs)
        result = ReconcileResult()

        for directory in self.candidates():
            if directory.name in keep:
                continue
            if not (directory / PAGE_FILENAME).is_file():
                logger.warning(f"Unrecognized directory {directory.name}/ left in place, please review")
                result.kept_for_review.append(directory.name)
                continue
            shutil.rmtree(directory)
            logger.info(f"Removed stale campaign directory: {directory.name}/")
            result.deleted.append(directory.name)

        return result
