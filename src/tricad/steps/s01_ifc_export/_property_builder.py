"""Property sets and materials attached to every exported element."""

from __future__ import annotations

import json
import logging
import numbers
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from ._guid import deterministic_guid, random_guid
from ._ifc_builder import IfcContext
from ._step_writer import bool_literal, format_real, ref, ref_list, step_string

logger = logging.getLogger(__name__)

ValueKind = Literal["null", "bool", "number", "text", "json"]


def _as_text(value: Any) -> str:
    try:
        return str(value)
    except ValueError:
        # int to str conversion limit
        logger.warning(f"Property value of type {type(value).__name__} too large to write, left empty")
        return ""


@dataclass(frozen=True)
class PropertyValue:
    """A props entry classified once into the IFC literal it will be written as."""

    kind: ValueKind
    literal: str

    @classmethod
    def from_python(cls, value: Any) -> "PropertyValue":
        if value is None:
            return cls("null", "$")
        # bool before number: bool is an int subclass
        if isinstance(value, bool):
            return cls("bool", f"IFCBOOLEAN({bool_literal(value)})")
        if isinstance(value, numbers.Real):
            try:
                float(value)
            except OverflowError:
                # integers beyond float range keep every digit as text
                return cls("text", f"IFCTEXT({step_string(_as_text(value))})")
            return cls("number", f"IFCREAL({format_real(value, ndigits=None)})")
        if isinstance(value, str):
            return cls("text", f"IFCTEXT({step_string(value)})")
        try:
            text = json.dumps(value, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            text = _as_text(value)
        return cls("json", f"IFCTEXT({step_string(text)})")


def create_property_set(
    ctx: IfcContext,
    element_id: int,
    element_uuid: str,
    props: Mapping[str, Any],
    pset_name: str,
) -> int | None:
    """Write one IfcPropertySet with a single value per key and link it to the element.

    The property set GlobalId is derived from the element uuid so that
    repeated exports keep it stable. Returns the property set id, or None
    for empty props.
    """
    if not props:
        return None

    s = ctx.writer
    owner = ref(ctx.owner_history)
    prop_ids = []
    for key, value in props.items():
        literal = PropertyValue.from_python(value).literal
        prop_ids.append(s.add("IFCPROPERTYSINGLEVALUE", f"{step_string(key)},$,{literal},$"))

    guid = deterministic_guid(f"pset:{element_uuid}:{pset_name}")
    pset = s.add(
        "IFCPROPERTYSET",
        f"{step_string(guid)},{owner},{step_string(pset_name)},$,{ref_list(prop_ids)}",
    )
    s.add(
        "IFCRELDEFINESBYPROPERTIES",
        f"{step_string(random_guid())},{owner},$,$,{ref_list([element_id])},{ref(pset)}",
    )
    return pset


def create_material(ctx: IfcContext, element_id: int, material_name: str) -> int:
    """One IfcMaterial per element (not shared between elements of the same type)."""
    s = ctx.writer
    if ctx.schema == "IFC2X3":
        material = s.add("IFCMATERIAL", step_string(material_name))
    else:
        material = s.add("IFCMATERIAL", f"{step_string(material_name)},$,$")
    s.add(
        "IFCRELASSOCIATESMATERIAL",
        f"{step_string(random_guid())},{ref(ctx.owner_history)},$,$,{ref_list([element_id])},{ref(material)}",
    )
    return material
