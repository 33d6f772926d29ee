"""IFC file hierarchy builder — contexts, units, owner history, Project/Site/Building/Storey."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ._guid import random_guid
from ._step_writer import StepWriter, ref, ref_list, step_string

logger = logging.getLogger(__name__)


@dataclass
class StoreyNode:
    """A lazily created IfcBuildingStorey and the elements it contains."""

    name: str
    record_id: int
    placement_id: int
    member_ids: list[int] = field(default_factory=list)


@dataclass
class IfcContext:
    """Holds the record writer and ids of the core entities shared by all builders."""

    writer: StepWriter
    schema: str = "IFC4"
    world_axis: int = 0  # IfcAxis2Placement3D at the origin, reused by every placement
    model_context: int = 0
    body_context: int = 0
    owner_history: int = 0
    project: int = 0
    site: int = 0
    site_placement: int = 0
    building: int = 0
    building_placement: int = 0

    # {storey name: StoreyNode}, insertion order = creation order
    storeys: dict[str, StoreyNode] = field(default_factory=dict)


def create_ifc_file(
    *,
    schema: str = "IFC4",
    project_name: str = "Untitled Project",
    site_name: str = "Site",
    building_name: str = "Building",
    author_name: str = "tricad",
    organization_name: str = "tricad",
    application_name: str = "tricad IFC writer",
    application_identifier: str = "tricad-ifc",
    application_version: str = "1.0",
    creation_date: int = 0,
) -> IfcContext:
    """Write contexts, units, owner history and the Project > Site > Building root.

    Storeys are not created here; they appear on first use through
    :func:`get_storey`.

    Returns an IfcContext holding the writer and the ids of all shared entities.
    """
    s = StepWriter()

    # --- World coordinate system + representation contexts ---
    origin = s.add("IFCCARTESIANPOINT", "(0.,0.,0.)")
    wcs = s.add("IFCAXIS2PLACEMENT3D", f"{ref(origin)},$,$")
    model_ctx = s.add("IFCGEOMETRICREPRESENTATIONCONTEXT", f"$,'Model',3,1.E-05,{ref(wcs)},$")
    body_ctx = s.add(
        "IFCGEOMETRICREPRESENTATIONSUBCONTEXT",
        f"'Body','Model',*,*,*,*,{ref(model_ctx)},$,.MODEL_VIEW.,$",
    )

    # --- Units (SI, metres) ---
    unit_ids = [
        s.add("IFCSIUNIT", f"*,.{unit_type}.,$,.{unit_name}.")
        for unit_type, unit_name in (
            ("LENGTHUNIT", "METRE"),
            ("AREAUNIT", "SQUARE_METRE"),
            ("VOLUMEUNIT", "CUBIC_METRE"),
            ("TIMEUNIT", "SECOND"),
            ("MASSUNIT", "GRAM"),
            ("PLANEANGLEUNIT", "RADIAN"),
        )
    ]
    units = s.add("IFCUNITASSIGNMENT", ref_list(unit_ids))

    # --- Owner History ---
    person = s.add("IFCPERSON", f"$,$,{step_string(author_name)},$,$,$,$,$")
    org = s.add("IFCORGANIZATION", f"$,{step_string(organization_name)},$,$,$")
    person_org = s.add("IFCPERSONANDORGANIZATION", f"{ref(person)},{ref(org)},$")
    app = s.add(
        "IFCAPPLICATION",
        f"{ref(org)},{step_string(application_version)},"
        f"{step_string(application_name)},{step_string(application_identifier)}",
    )
    owner = s.add(
        "IFCOWNERHISTORY",
        f"{ref(person_org)},{ref(app)},$,.NOCHANGE.,$,$,$,{int(creation_date)}",
    )

    # --- Spatial root: Project > Site > Building ---
    project = s.add(
        "IFCPROJECT",
        f"{step_string(random_guid())},{ref(owner)},{step_string(project_name)},"
        f"$,$,$,$,{ref_list([model_ctx])},{ref(units)}",
    )
    site_loc = s.add("IFCLOCALPLACEMENT", f"$,{ref(wcs)}")
    site = s.add(
        "IFCSITE",
        f"{step_string(random_guid())},{ref(owner)},{step_string(site_name)},"
        f"$,$,{ref(site_loc)},$,$,.ELEMENT.,$,$,$,$,$",
    )
    building_loc = s.add("IFCLOCALPLACEMENT", f"{ref(site_loc)},{ref(wcs)}")
    building = s.add(
        "IFCBUILDING",
        f"{step_string(random_guid())},{ref(owner)},{step_string(building_name)},"
        f"$,$,{ref(building_loc)},$,$,.ELEMENT.,$,$,$",
    )

    return IfcContext(
        writer=s,
        schema=schema,
        world_axis=wcs,
        model_context=model_ctx,
        body_context=body_ctx,
        owner_history=owner,
        project=project,
        site=site,
        site_placement=site_loc,
        building=building,
        building_placement=building_loc,
    )


def get_storey(ctx: IfcContext, name: str) -> StoreyNode:
    """Return the storey called ``name``, creating it on first use.

    Every storey is placed at the building origin; elevations are not
    stacked.
    """
    node = ctx.storeys.get(name)
    if node is not None:
        return node

    s = ctx.writer
    placement = s.add("IFCLOCALPLACEMENT", f"{ref(ctx.building_placement)},{ref(ctx.world_axis)}")
    storey = s.add(
        "IFCBUILDINGSTOREY",
        f"{step_string(random_guid())},{ref(ctx.owner_history)},{step_string(name)},"
        f"$,$,{ref(placement)},$,$,.ELEMENT.,0.",
    )
    node = StoreyNode(name=name, record_id=storey, placement_id=placement)
    ctx.storeys[name] = node
    logger.debug(f"Created IfcBuildingStorey '{name}' (#{storey}, placement #{placement})")
    return node


def assign_to_storey(node: StoreyNode, element_id: int) -> None:
    """Record ``element_id`` as contained in the storey; written later in one relation."""
    node.member_ids.append(element_id)


def write_spatial_relationships(ctx: IfcContext) -> None:
    """Aggregate Project > Site > Building > Storeys and contain elements per storey."""
    s = ctx.writer
    owner = ref(ctx.owner_history)

    s.add("IFCRELAGGREGATES", f"{step_string(random_guid())},{owner},$,$,{ref(ctx.project)},{ref_list([ctx.site])}")
    s.add("IFCRELAGGREGATES", f"{step_string(random_guid())},{owner},$,$,{ref(ctx.site)},{ref_list([ctx.building])}")

    storey_ids = [node.record_id for node in ctx.storeys.values()]
    if storey_ids:
        s.add(
            "IFCRELAGGREGATES",
            f"{step_string(random_guid())},{owner},$,$,{ref(ctx.building)},{ref_list(storey_ids)}",
        )

    for node in ctx.storeys.values():
        if not node.member_ids:
            continue
        s.add(
            "IFCRELCONTAINEDINSPATIALSTRUCTURE",
            f"{step_string(random_guid())},{owner},$,$,{ref_list(node.member_ids)},{ref(node.record_id)}",
        )
