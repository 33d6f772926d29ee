"""Shared pytest fixtures for tricad tests."""

import json
from pathlib import Path

import pytest


def _has_ifcopenshell() -> bool:
    try:
        import ifcopenshell  # noqa: F401
        return True
    except ImportError:
        return False


needs_ifc = pytest.mark.skipif(not _has_ifcopenshell(), reason="ifcopenshell not installed")

# Unit cube: 8 corners, 12 outward triangles
CUBE_POSITIONS = [
    0.0, 0.0, 0.0,  1.0, 0.0, 0.0,  1.0, 1.0, 0.0,  0.0, 1.0, 0.0,
    0.0, 0.0, 1.0,  1.0, 0.0, 1.0,  1.0, 1.0, 1.0,  0.0, 1.0, 1.0,
]
CUBE_INDICES = [
    0, 2, 1,  0, 3, 2,   # bottom
    4, 5, 6,  4, 6, 7,   # top
    0, 1, 5,  0, 5, 4,   # front
    1, 2, 6,  1, 6, 5,   # right
    2, 3, 7,  2, 7, 6,   # back
    3, 0, 4,  3, 4, 7,   # left
]

TETRA_POSITIONS = [
    0.0, 0.0, 0.0,
    1.0, 0.0, 0.0,
    0.0, 1.0, 0.0,
    0.0, 0.0, 1.0,
]
TETRA_INDICES = [0, 2, 1,  0, 1, 3,  1, 2, 3,  2, 0, 3]


@pytest.fixture
def cube_element() -> dict:
    """One closed cube wall, JSON-shaped (camelCase keys), no storey given."""
    return {
        "uuid": "cube-0001",
        "name": "Cube Wall",
        "ifcType": "IfcWall",
        "worldPositions": list(CUBE_POSITIONS),
        "localPositions": list(CUBE_POSITIONS),
        "indices": list(CUBE_INDICES),
    }


@pytest.fixture
def tetra_element() -> dict:
    return {
        "uuid": "tetra-0001",
        "ifcType": "IfcSlab",
        "worldPositions": list(TETRA_POSITIONS),
        "indices": list(TETRA_INDICES),
        "props": {"storey": "Level 1", "thickness": 0.25, "loadBearing": True},
    }


@pytest.fixture
def single_triangle_element() -> dict:
    return {
        "uuid": "tri-0001",
        "ifcType": "IfcPlate",
        "worldPositions": [0.0, 0.0, 0.0, 2.0, 0.0, 0.0, 0.0, 3.0, 0.0],
        "localPositions": [0.0, 0.0, 0.0, 2.0, 0.0, 0.0, 0.0, 3.0, 0.0],
        "indices": [0, 1, 2],
        "storey": "Level 1",
    }


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Temporary data root with the standard directory structure."""
    for subdir in ["raw", "processed"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def elements_file(data_root: Path, cube_element: dict, tetra_element: dict) -> Path:
    """Element payload in the {projectName, elements} envelope."""
    payload = {"projectName": "Fixture Project", "elements": [cube_element, tetra_element]}
    path = data_root / "raw" / "elements.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f)
    return path
