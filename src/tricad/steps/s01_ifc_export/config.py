"""Configuration for Step 01: IFC export."""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


class IfcCompatConfig(BaseModel):
    use_root_context_for_body: bool = Field(
        False, description="Attach body geometry to the root Model context instead of the Body sub-context"
    )


class IfcExportConfig(BaseModel):
    ifc_version: Literal["IFC4", "IFC2X3"] = Field("IFC4", description="IFC schema version")
    geometry_format: Literal["tfs", "brep"] = Field(
        "tfs",
        description="'tfs' = IfcTriangulatedFaceSet, 'brep' = IfcFacetedBrep (forced for IFC2X3)",
    )
    bake_world: bool = Field(
        False, description="Write world coordinates with identity placements instead of local + matrixWorld"
    )
    compat: IfcCompatConfig = Field(default_factory=IfcCompatConfig)

    # Header / owner history
    file_name: str = Field("export.ifc", description="FILE_NAME header entry")
    author_name: str = Field("tricad", description="Author for FILE_NAME and IfcPerson")
    organization_name: str = Field("tricad", description="Organization for FILE_NAME and IfcOrganization")
    application_name: str = Field("tricad IFC writer", description="IfcApplication full name")
    application_identifier: str = Field("tricad-ifc", description="IfcApplication identifier")
    application_version: str = Field("1.0", description="IfcApplication version")
    timestamp: Optional[str] = Field(
        None, description="ISO timestamp pinned in FILE_NAME (None = current UTC time)"
    )

    # Names
    site_name: str = Field("Site", description="IfcSite name")
    building_name: str = Field("Building", description="IfcBuilding name")
    property_set_name: str = Field("Pset_ElementCommon", description="Name of the per-element property set")

    @model_validator(mode="after")
    def _ifc2x3_forces_brep(self) -> "IfcExportConfig":
        # IFC2X3 has no tessellated face sets
        if self.ifc_version == "IFC2X3" and self.geometry_format != "brep":
            logger.info("IFC2X3 requested: switching geometry format to 'brep'")
            self.geometry_format = "brep"
        return self
