"""DXF writer — ASCII DXF with one 3DFACE per triangle.

Layout (R12 style, no TABLES/BLOCKS sections):

  HEADER    $ACADVER, $INSUNITS, $EXTMIN, $EXTMAX
  ENTITIES  3DFACE × triangles, layer = element IFC type

A 3DFACE has four corners; triangles repeat the third one.
Bad triangles are dropped one by one, the document is always written.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from tricad.core.contracts import Element
from .config import DxfExportConfig

logger = logging.getLogger(__name__)

DEFAULT_LAYER = "0"
MAX_LAYER_NAME_LENGTH = 31
_ILLEGAL_LAYER_CHARS = re.compile(r'[<>/\\":;?*|=,`\x00-\x1f]')


@dataclass
class DxfBuildResult:
    text: str
    num_faces: int = 0
    num_dropped: int = 0
    extmin: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    extmax: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


def layer_name(ifc_type: str | None) -> str:
    """DXF-safe layer name from an IFC type; empty input maps to layer "0"."""
    if not ifc_type:
        return DEFAULT_LAYER
    name = _ILLEGAL_LAYER_CHARS.sub("_", ifc_type).strip()[:MAX_LAYER_NAME_LENGTH]
    return name or DEFAULT_LAYER


def _fmt(value: float) -> str:
    return repr(float(value))


def compute_extents(elements: Sequence[Element], scale: float) -> tuple[list[float], list[float]]:
    """Componentwise min/max over all finite scaled world vertices; (0,0,0) when none."""
    blocks = []
    for element in elements:
        coords = element.world_coords
        n = len(coords) // 3
        if n == 0:
            continue
        pts = np.asarray(coords[: n * 3], dtype=np.float64).reshape(n, 3) * scale
        blocks.append(pts[np.isfinite(pts).all(axis=1)])

    pts = np.concatenate(blocks) if blocks else np.empty((0, 3))
    if len(pts) == 0:
        return [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]
    return pts.min(axis=0).tolist(), pts.max(axis=0).tolist()


def _triangle_corners(
    coords: Sequence[float], indices: Sequence[int], i: int, scale: float
) -> list[float] | None:
    """Nine scaled coordinates of triangle ``i``, or None if any is missing or non-finite."""
    tri = indices[i:i + 3]
    if len(tri) < 3:
        return None
    corners = []
    for idx in tri:
        base = idx * 3
        if idx < 0 or base + 2 >= len(coords):
            return None
        corners.extend(coords[base + k] * scale for k in range(3))
    if not all(math.isfinite(c) for c in corners):
        return None
    return corners


def _face_lines(layer: str, corners: list[float]) -> list[str]:
    x1, y1, z1, x2, y2, z2, x3, y3, z3 = corners
    return [
        "0", "3DFACE",
        "8", layer,
        "10", _fmt(x1), "20", _fmt(y1), "30", _fmt(z1),
        "11", _fmt(x2), "21", _fmt(y2), "31", _fmt(z2),
        "12", _fmt(x3), "22", _fmt(y3), "32", _fmt(z3),
        "13", _fmt(x3), "23", _fmt(y3), "33", _fmt(z3),
        "70", "0",
    ]


def build_dxf_model(
    elements: Iterable[Element | Mapping[str, Any]],
    config: DxfExportConfig | None = None,
) -> DxfBuildResult:
    """Assemble the DXF document; returns text plus face statistics."""
    config = config or DxfExportConfig()
    elements = [e if isinstance(e, Element) else Element.model_validate(e) for e in elements]
    scale = config.scale

    extmin, extmax = compute_extents(elements, scale)

    out = [
        "0", "SECTION",
        "2", "HEADER",
        "9", "$ACADVER",
        "1", config.dxf_version,
        "9", "$INSUNITS",
        "70", str(config.insunits),
        "9", "$EXTMIN",
        "10", _fmt(extmin[0]), "20", _fmt(extmin[1]), "30", _fmt(extmin[2]),
        "9", "$EXTMAX",
        "10", _fmt(extmax[0]), "20", _fmt(extmax[1]), "30", _fmt(extmax[2]),
        "0", "ENDSEC",
        "0", "SECTION",
        "2", "ENTITIES",
    ]

    num_faces = 0
    num_dropped = 0
    for element in elements:
        coords = element.world_coords
        if not coords:
            logger.debug(f"Element {element.uuid}: no world positions, skipped")
            continue
        layer = layer_name(element.ifc_type)
        indices = element.indices
        for i in range(0, len(indices), 3):
            corners = _triangle_corners(coords, indices, i, scale)
            if corners is None:
                num_dropped += 1
                continue
            out.extend(_face_lines(layer, corners))
            num_faces += 1

    out.extend(["0", "ENDSEC", "0", "EOF"])

    if num_dropped:
        logger.warning(f"DXF: dropped {num_dropped} malformed triangles")
    text = "\n".join(out) + "\n"
    logger.info(f"DXF done: {num_faces} faces, extents {extmin} .. {extmax}, {len(text)} bytes")
    return DxfBuildResult(text, num_faces, num_dropped, extmin, extmax)


def build_dxf(
    elements: Iterable[Element | Mapping[str, Any]],
    config: DxfExportConfig | None = None,
) -> str:
    """Return DXF text with one 3DFACE per valid triangle. Never raises on bad geometry."""
    return build_dxf_model(elements, config).text
