"""Step 01: IFC export — tessellated elements JSON → ISO-10303-21 (.ifc).

Reads the element payload, assembles the STEP entity graph
(Project > Site > Building > Storey > Element) and writes it to
``processed/<stem>.ifc``.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from tricad.core.step_base import BaseStep
from tricad.utils.io import load_elements, write_text
from .config import IfcExportConfig
from .contracts import IfcExportInput, IfcExportOutput

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Untitled Project"


class IfcExportStep(BaseStep[IfcExportInput, IfcExportOutput, IfcExportConfig]):
    name: ClassVar[str] = "ifc_export"
    input_type: ClassVar = IfcExportInput
    output_type: ClassVar = IfcExportOutput
    config_type: ClassVar = IfcExportConfig

    def validate_inputs(self, inputs: IfcExportInput) -> bool:
        if not inputs.elements_file.exists():
            logger.error(f"elements_file not found: {inputs.elements_file}")
            return False
        return True

    def run(self, inputs: IfcExportInput) -> IfcExportOutput:
        from ._ifc_writer import build_ifc_model

        output_dir = self.data_root / "processed"
        output_dir.mkdir(parents=True, exist_ok=True)

        payload_name, elements = load_elements(inputs.elements_file)
        if not elements:
            raise ValueError(f"No elements provided in {inputs.elements_file}")
        project_name = inputs.project_name or payload_name or DEFAULT_PROJECT_NAME

        result = build_ifc_model(project_name, elements, self.config)

        ifc_path = write_text(output_dir / f"{inputs.elements_file.stem}.ifc", result.text)

        return IfcExportOutput(
            ifc_path=ifc_path,
            num_elements=len(result.elements),
            num_storeys=result.num_storeys,
            num_closed=result.num_closed,
            num_entities=result.num_entities,
            ifc_version=self.config.ifc_version,
            geometry_format=self.config.geometry_format,
        )
