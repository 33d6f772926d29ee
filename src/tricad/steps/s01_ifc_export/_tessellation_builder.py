"""Tessellation builder — body geometry and placement for triangle-soup elements.

Two encodings of the same (vertices, triangle indices) pair:

  tfs:  IfcCartesianPointList3D → IfcTriangulatedFaceSet          (IFC4 only)
  brep: IfcCartesianPoint × N → IfcPolyLoop → IfcFaceOuterBound → IfcFace
        → IfcClosedShell → IfcFacetedBrep                            (IFC2X3 + IFC4)

Both end in an IfcShapeRepresentation wrapped by an IfcProductDefinitionShape.
Input indices are 0-based, IFC point indices are 1-based.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from tricad.utils.geometry import decompose_placement

from ._ifc_builder import IfcContext, StoreyNode
from ._step_writer import bool_literal, point_literal, ref, ref_list

logger = logging.getLogger(__name__)


@dataclass
class BodyGeometry:
    """Result of encoding one element's mesh."""

    product_shape: int
    closed: bool
    num_faces: int
    num_dropped: int = 0


def is_closed_mesh(indices: Sequence[int]) -> bool:
    """Edge-count closedness test.

    Closed iff the index list is non-empty, a multiple of 3, and every
    undirected edge is shared by exactly two triangles. Orientation and
    connectivity are not checked, so this is a necessary condition only.
    """
    if not indices or len(indices) % 3 != 0:
        return False
    edges: Counter[tuple[int, int]] = Counter()
    for i in range(0, len(indices), 3):
        a, b, c = indices[i], indices[i + 1], indices[i + 2]
        for u, v in ((a, b), (b, c), (c, a)):
            edges[(u, v) if u < v else (v, u)] += 1
    return all(count == 2 for count in edges.values())


def _points(coords: Sequence[float]) -> list[Sequence[float]]:
    """Group a flat coordinate array into XYZ triples; a short tail is zero-padded."""
    points = []
    for i in range(0, len(coords), 3):
        xyz = list(coords[i:i + 3])
        xyz.extend([0.0] * (3 - len(xyz)))
        points.append(xyz)
    return points


def _triangles(indices: Sequence[int], num_points: int) -> tuple[list[tuple[int, int, int]], int]:
    """Split indices into triangles referencing existing points.

    Returns (valid triangles, number dropped). An incomplete trailing
    triple counts as dropped.
    """
    triangles = []
    dropped = 0
    for i in range(0, len(indices), 3):
        tri = tuple(indices[i:i + 3])
        if len(tri) == 3 and all(0 <= idx < num_points for idx in tri):
            triangles.append(tri)
        else:
            dropped += 1
    return triangles, dropped


def create_tessellated_shape(
    ctx: IfcContext,
    coords: Sequence[float],
    indices: Sequence[int],
    context_id: int,
) -> BodyGeometry:
    """Encode a mesh as one IfcTriangulatedFaceSet."""
    s = ctx.writer
    points = _points(coords)
    triangles, dropped = _triangles(indices, len(points))
    closed = dropped == 0 and is_closed_mesh(indices)

    point_list = s.add("IFCCARTESIANPOINTLIST3D", "(" + ",".join(point_literal(p) for p in points) + ")")
    faces = ",".join(f"({a + 1},{b + 1},{c + 1})" for a, b, c in triangles)
    face_set = s.add(
        "IFCTRIANGULATEDFACESET",
        f"{ref(point_list)},$,{bool_literal(closed)},({faces}),$",
    )
    shape_rep = s.add(
        "IFCSHAPEREPRESENTATION",
        f"{ref(context_id)},'Body','Tessellation',{ref_list([face_set])}",
    )
    product_shape = s.add("IFCPRODUCTDEFINITIONSHAPE", f"$,$,{ref_list([shape_rep])}")
    return BodyGeometry(product_shape, closed, len(triangles), dropped)


def create_brep_shape(
    ctx: IfcContext,
    coords: Sequence[float],
    indices: Sequence[int],
    context_id: int,
) -> BodyGeometry:
    """Encode a mesh as an IfcFacetedBrep with one point record per vertex."""
    s = ctx.writer
    point_ids = [s.add("IFCCARTESIANPOINT", point_literal(p)) for p in _points(coords)]
    triangles, dropped = _triangles(indices, len(point_ids))

    face_ids = []
    for a, b, c in triangles:
        loop = s.add("IFCPOLYLOOP", ref_list([point_ids[a], point_ids[b], point_ids[c]]))
        bound = s.add("IFCFACEOUTERBOUND", f"{ref(loop)},.T.")
        face_ids.append(s.add("IFCFACE", ref_list([bound])))

    shell = s.add("IFCCLOSEDSHELL", ref_list(face_ids))
    brep = s.add("IFCFACETEDBREP", ref(shell))
    shape_rep = s.add(
        "IFCSHAPEREPRESENTATION",
        f"{ref(context_id)},'Body','Brep',{ref_list([brep])}",
    )
    product_shape = s.add("IFCPRODUCTDEFINITIONSHAPE", f"$,$,{ref_list([shape_rep])}")
    closed = dropped == 0 and is_closed_mesh(indices)
    return BodyGeometry(product_shape, closed, len(triangles), dropped)


def create_element_placement(
    ctx: IfcContext,
    storey: StoreyNode,
    matrix_world: Sequence[float] | None,
    bake_world: bool,
) -> int:
    """IfcLocalPlacement relative to the storey.

    Identity when coordinates are baked or no matrix is given; otherwise
    an IfcAxis2Placement3D decomposed from the Y-up world matrix.
    """
    s = ctx.writer
    if bake_world or not matrix_world:
        return s.add("IFCLOCALPLACEMENT", f"{ref(storey.placement_id)},{ref(ctx.world_axis)}")

    location, axis, ref_direction = decompose_placement(matrix_world)
    loc = s.add("IFCCARTESIANPOINT", point_literal(location))
    axis_id = s.add("IFCDIRECTION", point_literal(axis))
    ref_id = s.add("IFCDIRECTION", point_literal(ref_direction))
    axis2 = s.add("IFCAXIS2PLACEMENT3D", f"{ref(loc)},{ref(axis_id)},{ref(ref_id)}")
    return s.add("IFCLOCALPLACEMENT", f"{ref(storey.placement_id)},{ref(axis2)}")
