"""Command-line interface for derivekit code generation."""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, NoReturn

import click
from lark.exceptions import LarkError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from derivekit.generator import parse, python
from derivekit.generator.errors import GenerationError
from derivekit.generator.operations import REQUIREMENTS, Requirement

if TYPE_CHECKING:
    from derivekit.generator.planner import PlanOutcome, PlannedField

RUNTIME_IMPORT_ENVVAR = "DERIVEKIT_RUNTIME_IMPORT"


def _read(input_file: str) -> str:
    with open(input_file, encoding="utf-8") as f:
        return f.read()


def _fail(error: Exception) -> NoReturn:
    Console(stderr=True).print(f"[bold red]error:[/bold red] {error}", highlight=False)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output")
def cli(verbose: bool) -> None:
    """derivekit record code generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    envvar=RUNTIME_IMPORT_ENVVAR,
    default=python.DEFAULT_RUNTIME_IMPORT,
    show_default=True,
    help="Module the generated code imports its runtime from",
)
@click.option(
    "--keep-going",
    is_flag=True,
    default=False,
    help="Generate the remaining records when one of them fails",
)
def gen(input_file: str, output_file: str, runtime_import: str, keep_going: bool) -> None:
    """Generate a Python module from a definition file."""
    options = python.RenderOptions(
        runtime_import=runtime_import, keep_going=keep_going, source=input_file
    )
    try:
        generated_file, errors = python.generate(_read(input_file), options)
    except (GenerationError, LarkError) as e:
        _fail(e)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)

    if errors:
        console = Console(stderr=True)
        for error in errors:
            console.print(f"[bold red]error:[/bold red] {error}", highlight=False)
        sys.exit(1)


@cli.command(name="parse")
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
def parse_cmd(input_file: str) -> None:
    """Dump the parsed declarations as JSON."""
    try:
        records = parse(_read(input_file))
    except (GenerationError, LarkError) as e:
        _fail(e)

    print(json.dumps([r.to_dict() for r in records], indent=2))


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Show the fields each operation of each record uses."""
    try:
        outcomes = python.plan_text(_read(input_file))
    except (GenerationError, LarkError) as e:
        _fail(e)

    if output_json:
        _output_json(outcomes)
    else:
        _output_plain(outcomes)

    if any(not o.ok for o in outcomes):
        sys.exit(1)


def _format_default(field: PlannedField) -> str:
    if not field.default.present:
        return "required"
    return f"{field.default.source} ({field.default.kind})"


def _output_json(outcomes: list[PlanOutcome]) -> None:
    """Output plans as JSON."""
    data: dict = {}
    for outcome in outcomes:
        if outcome.plan is None:
            data[outcome.name] = {"error": str(outcome.error)}
            continue

        record = outcome.plan.record
        data[outcome.name] = {
            "exposed": record.aliases,
            "operations": {
                str(op): [
                    {
                        "field": f.descriptor.label,
                        "name": f.name,
                        "default": f.default.source,
                        "default_kind": str(f.default.kind),
                    }
                    for f in plan.fields
                ]
                for op, plan in outcome.plan.operations.items()
            },
        }

    print(json.dumps(data, indent=2))


def _output_plain(outcomes: list[PlanOutcome]) -> None:
    """Output plans using rich text formatting."""
    console = Console()

    for outcome in outcomes:
        if outcome.plan is None:
            console.print(f"[bold cyan]{outcome.name}[/bold cyan]")
            console.print(f"  [red]{outcome.error}[/red]", highlight=False)
            console.print()
            continue

        record = outcome.plan.record
        console.print(
            f"[bold cyan]{record.name}[/bold cyan] [dim]as {', '.join(record.aliases)}[/dim]"
        )

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Operation", style="white")
        table.add_column("Fields", style="yellow")
        table.add_column("Defaults", style="dim")

        for op, plan in outcome.plan.operations.items():
            if REQUIREMENTS[op] is Requirement.WHOLE_RECORD:
                table.add_row(str(op), "[dim](whole record)[/dim]", "")
                continue
            names = ", ".join(f.name for f in plan.fields)
            defaults = ", ".join(
                f"{f.name}={_format_default(f)}" for f in plan.fields if f.default.present
            )
            table.add_row(str(op), names, defaults)

        console.print(table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
