"""I/O contracts for Step 01: IFC export."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class IfcExportInput(BaseModel):
    elements_file: Path = Field(..., description="Path to elements JSON (list or {projectName, elements})")
    project_name: Optional[str] = Field(None, description="IfcProject name (overrides the payload's)")


class IfcExportOutput(BaseModel):
    ifc_path: Path = Field(..., description="Path to generated .ifc file")
    num_elements: int = Field(0, description="Number of building elements written")
    num_storeys: int = Field(0, description="Number of IfcBuildingStorey records created")
    num_closed: int = Field(0, description="Number of element meshes detected as closed")
    num_entities: int = Field(0, description="Total number of records in the DATA section")
    ifc_version: str = Field("IFC4", description="IFC schema version used")
    geometry_format: str = Field("tfs", description="Geometry encoding used (tfs/brep)")
