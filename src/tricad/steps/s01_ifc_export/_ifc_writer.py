"""IFC assembler — full ISO-10303-21 document from a list of elements.

Build order (single forward pass, no back-patching):

  contexts + units → owner history → Project/Site/Building
  → per element: storey (lazy), geometry, placement, product, material, pset
  → aggregation + containment relationships
  → header/footer + structural validation
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from tricad.core.contracts import Element

from ._element_builder import ElementRecord, create_element
from ._ifc_builder import IfcContext, create_ifc_file, write_spatial_relationships
from ._step_writer import step_string
from .config import IfcExportConfig

logger = logging.getLogger(__name__)

_VIEW_DEFINITIONS = {
    "IFC4": "ViewDefinition [ReferenceView_V1.2]",
    "IFC2X3": "ViewDefinition [CoordinationView_V2.0]",
}

# (check id, pattern); every one must match the assembled document
VALIDATION_CHECKS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("file_description", re.compile(r"FILE_DESCRIPTION\(\(", re.M)),
    ("file_name", re.compile(r"FILE_NAME\('", re.M)),
    ("file_schema", re.compile(r"^FILE_SCHEMA\(\('(IFC4|IFC2X3)'\)\);", re.M)),
    ("project", re.compile(r"^#\d+=IFCPROJECT\(", re.M)),
    ("shape_representation", re.compile(r"^#\d+=IFCSHAPEREPRESENTATION\(", re.M)),
    ("ifc_entity", re.compile(r"^#\d+=IFC\w+\(", re.M)),
    ("end_marker", re.compile(r"END-ISO-10303-21;\s*\Z")),
)


class IfcValidationError(ValueError):
    """The assembled document failed one of the structural checks."""

    def __init__(self, check: str, pattern: str):
        self.check = check
        self.pattern = pattern
        super().__init__(f"IFC validation failed on '{check}' ({pattern})")


@dataclass
class IfcBuildResult:
    text: str
    context: IfcContext
    elements: list[ElementRecord] = field(default_factory=list)

    @property
    def num_entities(self) -> int:
        return len(self.context.writer)

    @property
    def num_storeys(self) -> int:
        return len(self.context.storeys)

    @property
    def num_closed(self) -> int:
        return sum(1 for e in self.elements if e.geometry.closed)


def validate_ifc(text: str) -> None:
    """Run the structural checks; raise IfcValidationError on the first miss."""
    for check, pattern in VALIDATION_CHECKS:
        if not pattern.search(text):
            raise IfcValidationError(check, pattern.pattern)


def _resolve_timestamp(config: IfcExportConfig) -> tuple[str, int]:
    """(ISO timestamp for FILE_NAME, unix seconds for IfcOwnerHistory.CreationDate).

    A pinned timestamp without an offset is read as UTC.
    """
    if config.timestamp is None:
        now = datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)
        return now.isoformat(), int(now.timestamp())
    try:
        parsed = datetime.datetime.fromisoformat(config.timestamp)
    except ValueError:
        logger.warning(f"Unparseable timestamp {config.timestamp!r}, CreationDate set to 0")
        return config.timestamp, 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return config.timestamp, int(parsed.timestamp())


def _header(config: IfcExportConfig, timestamp: str) -> str:
    view = _VIEW_DEFINITIONS[config.ifc_version]
    return "\n".join([
        "ISO-10303-21;",
        "HEADER;",
        f"FILE_DESCRIPTION(({step_string(view)}),'2;1');",
        f"FILE_NAME({step_string(config.file_name)},{step_string(timestamp)},"
        f"({step_string(config.author_name)}),({step_string(config.organization_name)}),"
        f"{step_string(config.application_identifier)},{step_string(config.application_name)},'');",
        f"FILE_SCHEMA(({step_string(config.ifc_version)}));",
        "ENDSEC;",
        "DATA;",
    ])


def _as_elements(elements: Iterable[Element | Mapping[str, Any]]) -> list[Element]:
    return [e if isinstance(e, Element) else Element.model_validate(e) for e in elements]


def build_ifc_model(
    project_name: str,
    elements: Iterable[Element | Mapping[str, Any]],
    config: IfcExportConfig | None = None,
) -> IfcBuildResult:
    """Assemble and validate an IFC document; returns text plus build statistics."""
    config = config or IfcExportConfig()
    elements = _as_elements(elements)
    logger.info(
        f"Building IFC '{project_name}': {len(elements)} elements, "
        f"schema={config.ifc_version}, format={config.geometry_format}, bake_world={config.bake_world}"
    )

    timestamp, creation_date = _resolve_timestamp(config)
    ctx = create_ifc_file(
        schema=config.ifc_version,
        project_name=project_name,
        site_name=config.site_name,
        building_name=config.building_name,
        author_name=config.author_name,
        organization_name=config.organization_name,
        application_name=config.application_name,
        application_identifier=config.application_identifier,
        application_version=config.application_version,
        creation_date=creation_date,
    )

    records = [
        create_element(
            ctx,
            element,
            geometry_format=config.geometry_format,
            bake_world=config.bake_world,
            use_root_context_for_body=config.compat.use_root_context_for_body,
            pset_name=config.property_set_name,
        )
        for element in elements
    ]

    write_spatial_relationships(ctx)

    text = _header(config, timestamp) + "\n" + ctx.writer.to_text() + "\nENDSEC;\nEND-ISO-10303-21;\n"
    validate_ifc(text)

    result = IfcBuildResult(text=text, context=ctx, elements=records)
    logger.info(
        f"IFC done: {result.num_entities} entities, {result.num_storeys} storeys, "
        f"{result.num_closed}/{len(records)} closed meshes, {len(text)} bytes"
    )
    return result


def build_ifc(
    project_name: str,
    elements: Iterable[Element | Mapping[str, Any]],
    config: IfcExportConfig | None = None,
) -> str:
    """Return the ISO-10303-21 text for ``elements``.

    Raises:
        IfcValidationError: the document misses one of the structural checks.
    """
    return build_ifc_model(project_name, elements, config).text
