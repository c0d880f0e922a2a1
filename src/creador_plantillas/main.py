"""
Entrada principal Creador de Plantillas
"""
import argparse
import json
import logging
import sys

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from .captions.presets import load_registry
from .domain.document import PLACEMENT_MAPPING
from .domain.errors import PipelineError, ValidationFailure
from .orchestrator import BuildOrchestrator

# Configurar logging
logging.basicConfig(level=logging.INFO)

console = Console()


def cmd_build(args) -> int:
    try:
        with open(args.request, "r", encoding="utf-8") as f:
            request = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error leyendo la petición: {e}[/red]")
        return 1

    try:
        document = BuildOrchestrator().build(request, model=args.model)
    except ValidationFailure as e:
        console.print(Panel("[red]✗ Documento inválido[/red]", title="Resultado"))
        for error in e.errors:
            console.print(f"  • {error}")
        return 1
    except PipelineError as e:
        console.print(f"[red]✗ {type(e).__name__}: {e}[/red]")
        return 1

    text = json.dumps(document, indent=2, ensure_ascii=False)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        console.print(f"[green]✓ Documento guardado en {args.output}[/green]")
    else:
        console.print(Panel(JSON(text), title="Documento"))
    return 0


def cmd_presets(args) -> int:
    registry = load_registry()

    table = Table(title="Presets de subtítulos")
    table.add_column("ID", style="cyan")
    table.add_column("Nombre")
    table.add_column("Color")
    table.add_column("Efecto")
    table.add_column("Posición")

    for preset in registry:
        marker = " (default)" if preset.id == registry.default_id else ""
        placement = preset.placement or "-"
        if preset.placement in PLACEMENT_MAPPING:
            placement = f"{preset.placement} ({PLACEMENT_MAPPING[preset.placement]})"
        table.add_row(
            preset.id + marker,
            preset.name,
            preset.transcript_color or "-",
            preset.transcript_effect or "-",
            placement,
        )

    console.print(table)
    return 0


def main():
    print("🎬 Creador de Plantillas")
    parser = argparse.ArgumentParser(description="Genera documentos de render a partir de un guion")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Generar un documento desde una petición JSON")
    build.add_argument("request", type=str, help="Archivo JSON con la petición")
    build.add_argument("--model", type=str, help="Modelo del LLM")
    build.add_argument("--output", type=str, help="Archivo de salida (por defecto se imprime)")
    build.set_defaults(func=cmd_build)

    presets = subparsers.add_parser("presets", help="Listar presets de subtítulos")
    presets.set_defaults(func=cmd_presets)

    args = parser.parse_args()
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
