"""Writes an assembled site to disk.

Layout of a project directory:

    <output_root>/<slug>/
        index.html, <page>.html
        artifact.json
        content/copy.json, content/seo.json, content/layout.json
        styles/styles.css
        images/images.json
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from sitegen.assembly.renderer import render_site
from sitegen.orchestration.orchestrator import SiteArtifact

logger = logging.getLogger(__name__)


class SiteWriter:
    """Persists SiteArtifacts under a common output root."""

    def __init__(self, output_root: Path | str):
        """Initialize the writer.

        Args:
            output_root: Directory holding one subdirectory per project.
        """
        self.output_root = Path(output_root)

    def project_dir(self, artifact: SiteArtifact) -> Path:
        return self.output_root / artifact.slug

    def write(self, artifact: SiteArtifact) -> Path:
        """Write content, styles, image manifest and rendered pages.

        Args:
            artifact: The assembled site.

        Returns:
            The project directory.
        """
        root = self.project_dir(artifact)
        for sub in ("content", "styles", "images"):
            (root / sub).mkdir(parents=True, exist_ok=True)

        self._dump(root / "content" / "copy.json", [c.to_dict() for c in artifact.copy])
        self._dump(root / "content" / "layout.json", artifact.layout.to_dict())
        if artifact.seo_metadata is not None:
            self._dump(root / "content" / "seo.json", artifact.seo_metadata.to_dict())
        images = artifact.images.assets if artifact.images is not None else []
        self._dump(root / "images" / "images.json", [a.to_dict() for a in images])

        for relative, content in render_site(artifact).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        self._dump(root / "artifact.json", artifact.to_dict())
        logger.info("wrote %s to %s", artifact.slug, root)
        return root

    def _dump(self, path: Path, data: Any) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=self._json_serializer)

    @staticmethod
    def _json_serializer(obj: Any) -> Any:
        """JSON serializer for objects not serializable by default."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
