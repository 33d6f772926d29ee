"""tricad: tessellated building elements → IFC (ISO-10303-21) and 3D DXF."""

from tricad.core.contracts import Element
from tricad.steps.s01_ifc_export._ifc_writer import IfcValidationError, build_ifc, build_ifc_model
from tricad.steps.s01_ifc_export.config import IfcCompatConfig, IfcExportConfig
from tricad.steps.s02_dxf_export._dxf_writer import build_dxf, build_dxf_model
from tricad.steps.s02_dxf_export.config import DxfExportConfig

__all__ = [
    "Element",
    "IfcValidationError",
    "IfcCompatConfig",
    "IfcExportConfig",
    "DxfExportConfig",
    "build_ifc",
    "build_ifc_model",
    "build_dxf",
    "build_dxf_model",
]
