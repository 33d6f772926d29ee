"""Tests for S02: DXF export — 3DFACE writer, extents, layers and step integration."""

from pathlib import Path

import pytest

from tricad.steps.s02_dxf_export._dxf_writer import (
    build_dxf,
    build_dxf_model,
    compute_extents,
    layer_name,
)
from tricad.core.contracts import Element
from tricad.steps.s02_dxf_export.config import DxfExportConfig
from tricad.steps.s02_dxf_export.contracts import DxfExportInput
from tricad.steps.s02_dxf_export.step import DxfExportStep


def _pairs(text: str) -> list[tuple[str, str]]:
    lines = text.split("\n")
    assert lines[-1] == ""
    lines = lines[:-1]
    assert len(lines) % 2 == 0
    return list(zip(lines[0::2], lines[1::2]))


def _faces(text: str) -> list[dict[str, str]]:
    """Group codes of every 3DFACE, keyed by code."""
    faces = []
    current = None
    for code, value in _pairs(text):
        if code == "0":
            current = {} if value == "3DFACE" else None
            if current is not None:
                faces.append(current)
        elif current is not None:
            current[code] = value
    return faces


def _header_point(text: str, var: str) -> list[float]:
    pairs = _pairs(text)
    i = pairs.index(("9", var))
    return [float(pairs[i + k][1]) for k in (1, 2, 3)]


# ── Layer names ──


class TestLayerName:
    @pytest.mark.parametrize("ifc_type, expected", [
        ("IfcWall", "IfcWall"),
        ("", "0"),
        (None, "0"),
        ("Ifc/Wall:A", "Ifc_Wall_A"),
        ("  ", "0"),
        ("IfcBuildingElementProxyWithAVeryLongName", "IfcBuildingElementProxyWithAVer"),
    ])
    def test_sanitized(self, ifc_type, expected):
        assert layer_name(ifc_type) == expected

    def test_length_limit(self):
        assert len(layer_name("X" * 100)) == 31


# ── Extents ──


class TestExtents:
    def test_scaled_min_max(self):
        el = Element(uuid="a", worldPositions=[0, -1, 2, 3, 4, -5])
        extmin, extmax = compute_extents([el], 1000.0)
        assert extmin == [0.0, -1000.0, -5000.0]
        assert extmax == [3000.0, 4000.0, 2000.0]

    def test_non_finite_vertices_ignored(self):
        el = Element(uuid="a", worldPositions=[1, 1, 1, float("nan"), 50, 50, 2, 2, 2])
        extmin, extmax = compute_extents([el], 1.0)
        assert extmin == [1.0, 1.0, 1.0]
        assert extmax == [2.0, 2.0, 2.0]

    def test_no_vertices_gives_origin(self):
        assert compute_extents([], 1.0) == ([0.0, 0.0, 0.0], [0.0, 0.0, 0.0])
        el = Element(uuid="a", worldPositions=[float("inf"), 0, 0])
        assert compute_extents([el], 1.0) == ([0.0, 0.0, 0.0], [0.0, 0.0, 0.0])


# ── Document ──


class TestBuildDxf:
    def test_cube_faces_on_type_layer(self, cube_element):
        text = build_dxf([cube_element], DxfExportConfig(scale=1000.0))
        faces = _faces(text)
        assert len(faces) == 12
        assert all(f["8"] == "IfcWall" for f in faces)
        assert all(f["70"] == "0" for f in faces)

    def test_fourth_corner_repeats_third(self, single_triangle_element):
        face = _faces(build_dxf([single_triangle_element]))[0]
        assert (face["10"], face["20"], face["30"]) == ("0.0", "0.0", "0.0")
        assert (face["11"], face["21"], face["31"]) == ("2.0", "0.0", "0.0")
        assert (face["12"], face["22"], face["32"]) == ("0.0", "3.0", "0.0")
        assert (face["13"], face["23"], face["33"]) == (face["12"], face["22"], face["32"])

    def test_header_and_sections(self, cube_element):
        text = build_dxf([cube_element], DxfExportConfig(scale=1000.0, insunits=4))
        pairs = _pairs(text)
        assert pairs[:3] == [("0", "SECTION"), ("2", "HEADER"), ("9", "$ACADVER")]
        assert pairs[3] == ("1", "AC1009")
        assert ("70", "4") in pairs
        assert pairs[-2:] == [("0", "ENDSEC"), ("0", "EOF")]
        assert ("2", "ENTITIES") in pairs
        assert _header_point(text, "$EXTMIN") == [0.0, 0.0, 0.0]
        assert _header_point(text, "$EXTMAX") == [1000.0, 1000.0, 1000.0]

    def test_coordinates_are_scaled_world(self):
        el = {
            "uuid": "s",
            "ifcType": "IfcSlab",
            "worldPositions": [1, 0, 0, 2, 0, 0, 1, 1, 0],
            "localPositions": [0, 0, 0, 1, 0, 0, 0, 1, 0],
            "indices": [0, 1, 2],
        }
        face = _faces(build_dxf([el], DxfExportConfig(scale=1000.0)))[0]
        assert float(face["10"]) == 1000.0
        assert float(face["11"]) == 2000.0

    def test_legacy_positions_used_as_world(self):
        el = {"uuid": "p", "positions": [0, 0, 0, 1, 0, 0, 0, 1, 0], "indices": [0, 1, 2]}
        faces = _faces(build_dxf([el]))
        assert len(faces) == 1
        assert faces[0]["8"] == "0"

    def test_bad_triangles_dropped_individually(self):
        el = {
            "uuid": "bad",
            "ifcType": "IfcPlate",
            "worldPositions": [0, 0, 0, 1, 0, 0, 0, 1, 0, float("nan"), 0, 0],
            "indices": [0, 1, 2, 0, 1, 9, 0, 1, 3, 0, 1],
        }
        result = build_dxf_model([el])
        assert result.num_faces == 1
        assert result.num_dropped == 3
        assert len(_faces(result.text)) == 1

    def test_element_without_world_coords_skipped(self, cube_element):
        empty = {"uuid": "e", "ifcType": "IfcWall", "indices": [0, 1, 2]}
        result = build_dxf_model([empty, cube_element])
        assert result.num_faces == 12
        assert result.num_dropped == 0

    def test_empty_input_still_valid(self):
        text = build_dxf([])
        assert _faces(text) == []
        assert text.endswith("0\nEOF\n")

    def test_dxf_version_from_config(self, cube_element):
        text = build_dxf([cube_element], DxfExportConfig(dxf_version="AC1015"))
        assert ("1", "AC1015") in _pairs(text)


# ── Step integration ──


class TestDxfExportStep:
    def test_run_writes_dxf(self, data_root: Path, elements_file: Path):
        step = DxfExportStep(config=DxfExportConfig(scale=1000.0), data_root=data_root)
        out = step.execute(DxfExportInput(elements_file=elements_file))

        assert out.dxf_path == data_root / "processed" / "elements.dxf"
        assert out.dxf_path.exists()
        assert out.num_elements == 2
        assert out.num_faces == 16  # cube 12 + tetrahedron 4
        assert out.num_dropped == 0
        assert out.extmax == [1000.0, 1000.0, 1000.0]
        layers = {f["8"] for f in _faces(out.dxf_path.read_text(encoding="utf-8"))}
        assert layers == {"IfcWall", "IfcSlab"}

    def test_validate_inputs_missing_file(self, data_root: Path):
        step = DxfExportStep(config=DxfExportConfig(), data_root=data_root)
        assert step.validate_inputs(DxfExportInput(elements_file=data_root / "nope.json")) is False

    def test_non_positive_scale_rejected(self, data_root: Path, elements_file: Path):
        step = DxfExportStep(config=DxfExportConfig(scale=0.0), data_root=data_root)
        with pytest.raises(ValueError, match="Input validation failed"):
            step.execute(DxfExportInput(elements_file=elements_file))
