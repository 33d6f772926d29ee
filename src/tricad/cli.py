"""CLI entry point for tricad.

Usage:
    tricad run                          # Run the configured pipeline
    tricad run-step s01_ifc_export -i '{"elements_file": "elements.json"}'
    tricad info                         # Show pipeline info
    tricad ifc elements.json -o model.ifc --schema IFC2X3
    tricad dxf elements.json -o model.dxf --scale 1000
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from tricad.core.logging import setup_logging

app = typer.Typer(name="tricad", help="Tessellated elements to IFC / DXF")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@app.command()
def run(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Run the full pipeline."""
    setup_logging()
    from tricad.core.pipeline_runner import run_pipeline

    results = run_pipeline(config)
    for step_name, output in results.items():
        console.print(f"[green]{step_name}:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. s01_ifc_export)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    import json

    setup_logging()
    from tricad.core.pipeline_runner import load_pipeline_config, import_step_class, load_step_config

    pipeline_cfg = load_pipeline_config(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step_cls = import_step_class(entry.module)
    step_config = load_step_config(Path(entry.config_file), step_cls.config_type)
    step_instance = step_cls(config=step_config, data_root=pipeline_cfg.data_root)

    input_data = dict(pipeline_cfg.inputs)
    if input_json:
        input_data.update(json.loads(input_json))
    required = step_cls.input_type.model_json_schema().get("required", [])
    missing = [f for f in required if f not in input_data]
    if missing:
        console.print(f"[yellow]Step '{step_name}' requires input fields: {missing}[/yellow]")
        console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
        console.print(f'  tricad run-step {step_name} -i \'{{"elements_file": "elements.json"}}\'')
        raise typer.Exit(1)

    console.print(f"[green]Running step: {step_name}[/green]")
    step_input = step_cls.input_type(**{k: v for k, v in input_data.items() if k in step_cls.input_type.model_fields})
    output = step_instance.execute(step_input)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    from tricad.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


@app.command()
def ifc(
    elements_file: Path = typer.Argument(..., exists=True, help="Elements JSON"),
    output: Path = typer.Option(Path("export.ifc"), "--output", "-o", help="Output .ifc path"),
    project_name: Optional[str] = typer.Option(None, "--project", help="IfcProject name"),
    schema: str = typer.Option("IFC4", help="IFC4 or IFC2X3"),
    geometry_format: str = typer.Option("tfs", "--format", help="tfs or brep (IFC2X3 forces brep)"),
    bake_world: bool = typer.Option(False, "--bake-world", help="Write world coordinates"),
    root_context: bool = typer.Option(False, "--root-context", help="Use the root context for body geometry"),
) -> None:
    """Export elements to IFC."""
    setup_logging()
    from tricad.steps.s01_ifc_export._ifc_writer import IfcValidationError, build_ifc_model
    from tricad.steps.s01_ifc_export.config import IfcCompatConfig, IfcExportConfig
    from tricad.utils.io import load_elements, write_text

    cfg = IfcExportConfig(
        ifc_version=schema.upper(),
        geometry_format=geometry_format,
        bake_world=bake_world,
        compat=IfcCompatConfig(use_root_context_for_body=root_context),
        file_name=output.name,
    )
    payload_name, elements = load_elements(elements_file)
    if not elements:
        console.print(f"[red]No elements provided in {elements_file}[/red]")
        raise typer.Exit(1)

    try:
        result = build_ifc_model(project_name or payload_name or "Untitled Project", elements, cfg)
    except IfcValidationError as e:
        console.print(f"[red]IFC export failed: {e}[/red]")
        raise typer.Exit(2)

    write_text(output, result.text)
    console.print(
        f"[green]Wrote {output}[/green] ({result.num_entities} entities, "
        f"{result.num_storeys} storeys, {cfg.ifc_version}/{cfg.geometry_format})"
    )


@app.command()
def dxf(
    elements_file: Path = typer.Argument(..., exists=True, help="Elements JSON"),
    output: Path = typer.Option(Path("export.dxf"), "--output", "-o", help="Output .dxf path"),
    scale: float = typer.Option(1.0, help="Coordinate scale (1000 = m to mm)"),
    insunits: int = typer.Option(4, help="$INSUNITS code"),
    dxf_version: str = typer.Option("AC1009", "--version", help="$ACADVER value"),
) -> None:
    """Export elements to a 3D DXF (3DFACE per triangle)."""
    setup_logging()
    from tricad.steps.s02_dxf_export._dxf_writer import build_dxf_model
    from tricad.steps.s02_dxf_export.config import DxfExportConfig
    from tricad.utils.io import load_elements, write_text

    if scale <= 0:
        console.print(f"[red]--scale must be positive, got {scale}[/red]")
        raise typer.Exit(1)

    cfg = DxfExportConfig(dxf_version=dxf_version, scale=scale, insunits=insunits)
    _, elements = load_elements(elements_file)
    result = build_dxf_model(elements, cfg)
    write_text(output, result.text)
    console.print(
        f"[green]Wrote {output}[/green] ({result.num_faces} faces, {result.num_dropped} dropped)"
    )


if __name__ == "__main__":
    app()
