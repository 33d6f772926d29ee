"""End-to-end pipeline test: pipeline.yaml → IFC + DXF files on disk."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pytest
import yaml

from tricad.core.pipeline_runner import run_pipeline

logger = logging.getLogger(__name__)


def _write_yaml(path: Path, data: dict) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def pipeline_file(tmp_path: Path, data_root: Path, elements_file: Path) -> Path:
    steps_dir = tmp_path / "configs" / "steps"
    steps_dir.mkdir(parents=True)
    ifc_cfg = _write_yaml(steps_dir / "s01_ifc_export.yaml", {
        "ifc_version": "IFC4",
        "geometry_format": "tfs",
        "timestamp": "2024-01-01T00:00:00+00:00",
    })
    dxf_cfg = _write_yaml(steps_dir / "s02_dxf_export.yaml", {"scale": 1000.0, "insunits": 4})

    return _write_yaml(tmp_path / "pipeline.yaml", {
        "project_name": "E2E Project",
        "data_root": str(data_root),
        "inputs": {"elements_file": str(elements_file)},
        "steps": [
            {"name": "s01_ifc_export", "module": "tricad.steps.s01_ifc_export",
             "config_file": str(ifc_cfg), "depends_on": [], "enabled": True},
            {"name": "s02_dxf_export", "module": "tricad.steps.s02_dxf_export",
             "config_file": str(dxf_cfg), "depends_on": [], "enabled": True},
        ],
    })


@pytest.mark.e2e
def test_pipeline_e2e(pipeline_file: Path, data_root: Path):
    """Both exporters run from one payload and write their documents under processed/."""
    results = run_pipeline(pipeline_file)
    assert list(results) == ["s01_ifc_export", "s02_dxf_export"]

    # ========== Step 01: IFC ==========
    ifc_out = results["s01_ifc_export"]
    assert ifc_out.ifc_path == data_root / "processed" / "elements.ifc"
    text = ifc_out.ifc_path.read_text(encoding="utf-8")
    assert re.search(r"^#\d+=IFCPROJECT\('[^']+',#\d+,'E2E Project',", text, re.M)
    assert ifc_out.num_elements == 2
    assert ifc_out.num_storeys == 2
    assert "FILE_NAME('export.ifc','2024-01-01T00:00:00+00:00'" in text
    logger.info(f"S01 wrote {ifc_out.num_entities} entities")

    # ========== Step 02: DXF ==========
    dxf_out = results["s02_dxf_export"]
    assert dxf_out.dxf_path == data_root / "processed" / "elements.dxf"
    assert dxf_out.num_faces == 16
    assert dxf_out.extmax == [1000.0, 1000.0, 1000.0]
    assert dxf_out.dxf_path.read_text(encoding="utf-8").endswith("0\nEOF\n")


@pytest.mark.e2e
def test_disabled_step_skipped(pipeline_file: Path):
    with open(pipeline_file, encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    cfg["steps"][0]["enabled"] = False
    _write_yaml(pipeline_file, cfg)

    results = run_pipeline(pipeline_file)
    assert list(results) == ["s02_dxf_export"]


@pytest.mark.e2e
def test_missing_step_config_uses_defaults(pipeline_file: Path):
    with open(pipeline_file, encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    cfg["steps"][1]["config_file"] = str(pipeline_file.parent / "nope.yaml")
    _write_yaml(pipeline_file, cfg)

    dxf_out = run_pipeline(pipeline_file)["s02_dxf_export"]
    assert dxf_out.extmax == [1.0, 1.0, 1.0]
