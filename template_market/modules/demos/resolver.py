"""Decide which directory of an extracted package is the servable site."""

from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Optional

from .exceptions import UnrecognizedStructureError
from .models import ResolvedSite, SiteSubdirectory

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
BUILD_DIRS = ("build", "dist")
MANIFEST_FILES = ("package.json",)
SOURCE_DIR = "src"
ENTRY_STEMS = frozenset({"app", "main", "index"})
ENTRY_SUFFIXES = frozenset({".js", ".jsx", ".ts", ".tsx", ".vue", ".svelte"})

PLACEHOLDER_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title} - demo unavailable</title>
  <style>
    body {{ font-family: system-ui, sans-serif; max-width: 40rem; margin: 4rem auto; padding: 0 1rem; color: #222; }}
    code {{ background: #f2f2f2; padding: 0 .25rem; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
  <p>This package contains front-end source code but no compiled output was found,
  so there is nothing to preview yet.</p>
  <p>Build the project (for example with <code>npm run build</code>) and upload a package
  that includes the generated <code>build/</code> or <code>dist/</code> folder.</p>
</body>
</html>
"""


class SiteStructureResolver:
    def resolve(self, extract_dir: Path, *, title: Optional[str] = None) -> ResolvedSite:
        root = Path(extract_dir)
        if (root / INDEX_FILE).is_file():
            return ResolvedSite(deploy_dir=root)

        for name in BUILD_DIRS:
            candidate = root / name
            if (candidate / INDEX_FILE).is_file():
                logger.info("Serving %s/ of %s", name, root.name)
                return ResolvedSite(deploy_dir=candidate)

        if self.looks_like_source_project(root):
            self.write_placeholder(root, title=title)
            logger.info("No build output in %s, published placeholder page", root.name)
            return ResolvedSite(deploy_dir=root, is_placeholder=True)

        raise UnrecognizedStructureError(
            "no index.html at the root or in build/ or dist/, and no front-end project was detected"
        )

    def find_site_subdirectory(self, extract_dir: Path) -> SiteSubdirectory:
        """Looser scan used for directly uploaded sites.

        Accepts a root ``index.html`` or exactly one immediate subdirectory
        holding one; that subdirectory name becomes a URL path segment.
        """
        root = Path(extract_dir)
        if (root / INDEX_FILE).is_file():
            return SiteSubdirectory(deploy_dir=root)

        matches = sorted(
            entry
            for entry in root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".") and (entry / INDEX_FILE).is_file()
        )
        if len(matches) != 1:
            raise UnrecognizedStructureError(
                f"expected one folder containing index.html, found {len(matches)}"
            )
        logger.info("Found index.html in subfolder: %s", matches[0].name)
        return SiteSubdirectory(deploy_dir=matches[0], subpath=matches[0].name)

    def looks_like_source_project(self, root: Path) -> bool:
        if not any((root / name).is_file() for name in MANIFEST_FILES):
            return False
        source = root / SOURCE_DIR
        if not source.is_dir():
            return False
        return any(
            entry.is_file()
            and entry.suffix.lower() in ENTRY_SUFFIXES
            and entry.stem.lower() in ENTRY_STEMS
            for entry in source.iterdir()
        )

    def write_placeholder(self, root: Path, *, title: Optional[str] = None) -> Path:
        target = root / INDEX_FILE
        target.write_text(
            PLACEHOLDER_TEMPLATE.format(title=html.escape(title or "Template preview")),
            encoding="utf-8",
        )
        return target
