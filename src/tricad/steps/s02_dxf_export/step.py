"""Step 02: DXF export — tessellated elements JSON → 3D DXF (.dxf).

Independent of the IFC step: reads the same element payload and writes
one 3DFACE per triangle to ``processed/<stem>.dxf``. The result is the
input for an external DXF → DWG conversion service.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from tricad.core.step_base import BaseStep
from tricad.utils.io import load_elements, write_text
from .config import DxfExportConfig
from .contracts import DxfExportInput, DxfExportOutput

logger = logging.getLogger(__name__)


class DxfExportStep(BaseStep[DxfExportInput, DxfExportOutput, DxfExportConfig]):
    name: ClassVar[str] = "dxf_export"
    input_type: ClassVar = DxfExportInput
    output_type: ClassVar = DxfExportOutput
    config_type: ClassVar = DxfExportConfig

    def validate_inputs(self, inputs: DxfExportInput) -> bool:
        if not inputs.elements_file.exists():
            logger.error(f"elements_file not found: {inputs.elements_file}")
            return False
        if self.config.scale <= 0:
            logger.error(f"scale must be positive, got {self.config.scale}")
            return False
        return True

    def run(self, inputs: DxfExportInput) -> DxfExportOutput:
        from ._dxf_writer import build_dxf_model

        output_dir = self.data_root / "processed"
        output_dir.mkdir(parents=True, exist_ok=True)

        _, elements = load_elements(inputs.elements_file)
        if not elements:
            logger.warning(f"No elements in {inputs.elements_file}, writing an empty drawing")

        result = build_dxf_model(elements, self.config)
        dxf_path = write_text(output_dir / f"{inputs.elements_file.stem}.dxf", result.text)

        return DxfExportOutput(
            dxf_path=dxf_path,
            num_elements=len(elements),
            num_faces=result.num_faces,
            num_dropped=result.num_dropped,
            extmin=result.extmin,
            extmax=result.extmax,
        )
