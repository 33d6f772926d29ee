"""I/O contracts for Step 02: DXF export."""

from pathlib import Path

from pydantic import BaseModel, Field


class DxfExportInput(BaseModel):
    elements_file: Path = Field(..., description="Path to elements JSON (list or {projectName, elements})")


class DxfExportOutput(BaseModel):
    dxf_path: Path = Field(..., description="Path to generated .dxf file")
    num_elements: int = Field(0, description="Number of elements read")
    num_faces: int = Field(0, description="Number of 3DFACE entities written")
    num_dropped: int = Field(0, description="Triangles skipped for bad indices or coordinates")
    extmin: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0], description="$EXTMIN (scaled)")
    extmax: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0], description="$EXTMAX (scaled)")
