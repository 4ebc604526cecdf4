"""
CV Export Service Module

Renders a profile and its projects, certificates and assessments into a
single self-contained HTML document, writes it to disk and hands it to a
viewer. Every interpolated value is HTML-escaped by the template engine.
"""
from __future__ import annotations

import logging
import tempfile
import webbrowser
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .portfolio_link_service import random_suffix, slug_base
from .records_service import utc_now_iso

logger = logging.getLogger(__name__)

CV_LOGS_TABLE = "cv_generator_logs"
CV_TEMPLATE = "cv.html.j2"
PLACEHOLDER_NAME = "Nama"

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

Viewer = Callable[[str], Any]


def is_safe_url(value: Any) -> bool:
    """Only http(s) links are rendered as clickable anchors."""
    if not isinstance(value, str):
        return False
    return urlparse(value.strip()).scheme.lower() in ("http", "https")


class CVExportService:
    """Render CV documents and record each generation in ``cv_generator_logs``."""

    def __init__(
        self,
        client: Any = None,
        *,
        export_dir: Optional[Path] = None,
        viewer: Optional[Viewer] = None,
        template_dir: Optional[Path] = None,
    ) -> None:
        self.client = client
        self.export_dir = export_dir
        self._viewer = viewer if viewer is not None else webbrowser.open
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(enabled_extensions=("html", "j2"), default=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.tests["safe_url"] = is_safe_url

    def render_html(
        self,
        profile: Optional[Mapping[str, Any]],
        projects: Sequence[Mapping[str, Any]],
        certificates: Sequence[Mapping[str, Any]],
        assessments: Sequence[Mapping[str, Any]],
    ) -> str:
        template = self.env.get_template(CV_TEMPLATE)
        return template.render(
            profile=dict(profile or {}),
            projects=list(projects),
            certificates=list(certificates),
            assessments=list(assessments),
            placeholder_name=PLACEHOLDER_NAME,
        )

    def write_html(self, html: str, full_name: Optional[str] = None) -> Path:
        """
        Write the rendered document to the export directory.

        Falls back to a fresh file in the system temp directory when no
        export directory is configured.
        """
        if self.export_dir is not None:
            self.export_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
            # one file per export; earlier CVs are kept
            output_path = self.export_dir / f"cv-{slug_base(full_name)}-{stamp}-{random_suffix()}.html"
            output_path.write_text(html, encoding="utf-8")
            return output_path

        with tempfile.NamedTemporaryFile(
            "w", suffix=".html", prefix="cv-", delete=False, encoding="utf-8"
        ) as handle:
            handle.write(html)
        return Path(handle.name)

    def open_document(self, path: Path) -> None:
        try:
            self._viewer(path.resolve().as_uri())
        except Exception as exc:
            logger.warning(f"Unable to open CV document {path}: {exc}")

    def log_generation(self, profile_id: Any) -> None:
        """Append an audit row; ``ai_summary`` and ``generated_url`` stay empty for now."""
        if self.client is None:
            return
        try:
            self.client.table(CV_LOGS_TABLE).insert([{
                "profile_id": profile_id,
                "ai_summary": None,
                "generated_url": None,
                "created_at": utc_now_iso(),
            }]).execute()
        except Exception as exc:
            logger.warning(f"Failed to record CV generation for profile {profile_id}: {exc}")

    def export(
        self,
        profile: Mapping[str, Any],
        projects: List[Dict[str, Any]],
        certificates: List[Dict[str, Any]],
        assessments: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        html = self.render_html(profile, projects, certificates, assessments)
        path = self.write_html(html, profile.get("full_name"))
        self.open_document(path)
        self.log_generation(profile.get("id"))
        return {"html": html, "path": path}
