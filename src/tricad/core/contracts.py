"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

IFC_TYPE_PATTERN = re.compile(r"^Ifc[A-Za-z0-9_]+$")
DEFAULT_IFC_TYPE = "IfcBuildingElementProxy"
DEFAULT_STOREY = "Ground"

# Valid IFC names that are not IfcElement subclasses; written as proxies
NON_ELEMENT_TYPES = frozenset({
    "IFCPROJECT",
    "IFCSITE",
    "IFCBUILDING",
    "IFCBUILDINGSTOREY",
    "IFCSPACE",
    "IFCSPATIALZONE",
    "IFCEXTERNALSPATIALELEMENT",
    "IFCZONE",
    "IFCGRID",
    "IFCANNOTATION",
    "IFCPROXY",
})


class StepMeta(BaseModel):
    """Metadata attached to every step output for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class Element(BaseModel):
    """One tessellated building element as handed over by the modeller.

    Accepts both the camelCase keys of the JSON payload (``ifcType``,
    ``worldPositions``, ...) and the snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    uuid: str = Field(..., description="Stable external identity")
    name: Optional[str] = Field(None, description="Display name")
    ifc_type: str = Field("", alias="ifcType", description="IFC class name, e.g. IfcWall")
    props: Optional[dict[str, Any]] = Field(None, description="Free-form business attributes")
    world_positions: Optional[list[float]] = Field(
        None, alias="worldPositions", description="Flat XYZ triples in world space"
    )
    local_positions: Optional[list[float]] = Field(
        None, alias="localPositions", description="Flat XYZ triples in local space"
    )
    positions: Optional[list[float]] = Field(
        None, description="Legacy flat XYZ triples, used when the specific set is missing"
    )
    indices: list[int] = Field(default_factory=list, description="Flat triangle index triples (0-based)")
    storey: Optional[str] = Field(None, description="Storey name if props.storey is absent")
    matrix_world: Optional[list[float]] = Field(
        None,
        alias="matrixWorld",
        min_length=16,
        max_length=16,
        description="4x4 column-major world transform",
    )

    @property
    def world_coords(self) -> list[float]:
        if self.world_positions is not None:
            return self.world_positions
        return self.positions or []

    @property
    def local_coords(self) -> list[float]:
        if self.local_positions is not None:
            return self.local_positions
        return self.positions or []

    @property
    def resolved_ifc_type(self) -> str:
        """IFC class to write.

        Anything not shaped like ``Ifc...``, spatial and other non-element
        products, and type objects (``...Type``, ``...Style``) become a proxy.
        """
        entity = self.ifc_type.upper()
        if (
            IFC_TYPE_PATTERN.match(self.ifc_type)
            and entity not in NON_ELEMENT_TYPES
            and not entity.endswith(("TYPE", "STYLE"))
        ):
            return self.ifc_type
        return DEFAULT_IFC_TYPE

    @property
    def storey_name(self) -> str:
        props_storey = (self.props or {}).get("storey")
        if isinstance(props_storey, str) and props_storey:
            return props_storey
        return self.storey or DEFAULT_STOREY


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "tricad_project"
    data_root: Path = Path("./data")
    inputs: dict[str, Any] = Field(
        default_factory=dict, description="Input fields seeded into every step"
    )
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True


# Fix forward reference
PipelineConfig.model_rebuild()
