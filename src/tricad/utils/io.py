"""I/O utilities: element payload loading and export file writing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tricad.core.contracts import Element

logger = logging.getLogger(__name__)


def load_elements(path: Path) -> tuple[str | None, list[Element]]:
    """Read an element payload from JSON.

    Accepts either a bare list of elements or an object of the form
    ``{"projectName": ..., "elements": [...]}`` (``project_name`` also works).

    Returns:
        (project name or None, validated elements)
    """
    with open(path, encoding="utf-8") as f:
        raw: Any = json.load(f)

    project_name = None
    if isinstance(raw, dict):
        project_name = raw.get("projectName") or raw.get("project_name")
        raw = raw.get("elements", [])
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of elements in {path}, got {type(raw).__name__}")

    elements = [Element.model_validate(item) for item in raw]
    logger.info(f"Loaded {len(elements)} elements from {path}")
    return project_name, elements


def write_text(path: Path, text: str) -> Path:
    """Write an export document, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")
    size_kb = path.stat().st_size / 1024
    logger.info(f"Wrote {path} ({size_kb:.1f} KB)")
    return path
