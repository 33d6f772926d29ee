"""Element builder — one IfcProduct per input element.

Per element: body geometry, placement under its storey, the product
record itself, a material association and an optional property set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tricad.core.contracts import Element

from ._guid import deterministic_guid
from ._ifc_builder import IfcContext, assign_to_storey, get_storey
from ._property_builder import create_material, create_property_set
from ._step_writer import ref, step_string
from ._tessellation_builder import (
    BodyGeometry,
    create_brep_shape,
    create_element_placement,
    create_tessellated_shape,
)

logger = logging.getLogger(__name__)

# IfcElement has 8 attributes (GlobalId .. Tag). Concrete classes append
# optional attributes that are written as $.
_DEFAULT_EXTRA_ATTRIBUTES = {"IFC4": 1, "IFC2X3": 0}  # IFC4: PredefinedType
_EXTRA_ATTRIBUTES: dict[str, dict[str, int]] = {
    "IFC4": {
        "IFCDOOR": 5,
        "IFCDOORSTANDARDCASE": 5,
        "IFCWINDOW": 5,
        "IFCWINDOWSTANDARDCASE": 5,
        "IFCSTAIRFLIGHT": 5,
        "IFCPILE": 2,
        "IFCELEMENTASSEMBLY": 2,
        "IFCFURNISHINGELEMENT": 0,
        "IFCDISTRIBUTIONELEMENT": 0,
        "IFCFLOWTERMINAL": 0,
        "IFCFLOWSEGMENT": 0,
        "IFCFLOWFITTING": 0,
        "IFCVIRTUALELEMENT": 0,
        "IFCCIVILELEMENT": 0,
    },
    "IFC2X3": {
        "IFCBUILDINGELEMENTPROXY": 1,
        "IFCDOOR": 2,
        "IFCWINDOW": 2,
        "IFCSLAB": 1,
        "IFCCOVERING": 1,
        "IFCRAILING": 1,
        "IFCRAMP": 1,
        "IFCROOF": 1,
        "IFCSTAIR": 1,
        "IFCSTAIRFLIGHT": 4,
        "IFCFOOTING": 1,
        "IFCPILE": 2,
        "IFCELEMENTASSEMBLY": 2,
    },
}


def extra_attribute_count(schema: str, entity: str) -> int:
    """Number of trailing optional attributes ``entity`` declares after Tag."""
    per_schema = _EXTRA_ATTRIBUTES.get(schema, {})
    return per_schema.get(entity, _DEFAULT_EXTRA_ATTRIBUTES.get(schema, 0))


@dataclass
class ElementRecord:
    record_id: int
    storey: str
    geometry: BodyGeometry


def create_element(
    ctx: IfcContext,
    element: Element,
    *,
    geometry_format: str = "tfs",
    bake_world: bool = False,
    use_root_context_for_body: bool = False,
    pset_name: str = "Pset_ElementCommon",
) -> ElementRecord:
    """Write one element and register it with its storey."""
    storey = get_storey(ctx, element.storey_name)
    context_id = ctx.model_context if use_root_context_for_body else ctx.body_context

    coords = element.world_coords if bake_world else element.local_coords
    if not coords:
        logger.warning(f"Element {element.uuid}: no positions, writing empty geometry")

    if geometry_format == "tfs":
        geometry = create_tessellated_shape(ctx, coords, element.indices, context_id)
    else:
        geometry = create_brep_shape(ctx, coords, element.indices, context_id)
    if geometry.num_dropped:
        logger.warning(
            f"Element {element.uuid}: dropped {geometry.num_dropped} triangles "
            f"with out-of-range indices"
        )

    placement = create_element_placement(ctx, storey, element.matrix_world, bake_world)

    ifc_type = element.resolved_ifc_type
    if ifc_type != element.ifc_type:
        logger.debug(f"Element {element.uuid}: {element.ifc_type!r} is not an element type, using {ifc_type}")
    entity = ifc_type.upper()
    trailing = ",$" * extra_attribute_count(ctx.schema, entity)
    element_id = ctx.writer.add(
        entity,
        f"{step_string(deterministic_guid('elem:' + element.uuid))},{ref(ctx.owner_history)},"
        f"{step_string(element.name or ifc_type)},$,$,{ref(placement)},"
        f"{ref(geometry.product_shape)},${trailing}",
    )
    assign_to_storey(storey, element_id)

    create_material(ctx, element_id, ifc_type)
    create_property_set(ctx, element_id, element.uuid, element.props or {}, pset_name)

    return ElementRecord(record_id=element_id, storey=storey.name, geometry=geometry)
