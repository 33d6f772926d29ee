"""Configuration for Step 02: DXF export."""

from pydantic import BaseModel, Field


class DxfExportConfig(BaseModel):
    dxf_version: str = Field("AC1009", description="$ACADVER header value (AC1009 = R12 ASCII)")
    scale: float = Field(1.0, description="Uniform coordinate scale (1000 = metres to millimetres)")
    insunits: int = Field(4, ge=0, description="$INSUNITS code (4 = millimetres, 6 = metres)")
