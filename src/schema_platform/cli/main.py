"""Main CLI entry point for the Schema Platform.

Compiles schema files, renders extraction prompts and screens extraction
results from the command line.
"""

from pathlib import Path
from typing import Any
import json
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from schema_platform import __version__
from schema_platform.config import CompilerSettings, PromptMode, load_settings
from schema_platform.compiler.compiler import SchemaCompiler
from schema_platform.engine.result_gate import ResultGate, generate_report
from schema_platform.schemas.converter import from_wire, to_wire
from schema_platform.schemas.loader import DocumentLoader

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="schema-platform")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="YAML file with compiler settings")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """Schema Platform - compile extraction schemas.

    Turns one author schema into a record validator, LLM views, an
    extraction prompt and a result gate.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    try:
        ctx.obj["settings"] = load_settings(config_path) if config_path else CompilerSettings()
    except Exception as e:
        _fail(ctx, e, "Error loading settings")


@cli.command("compile")
@click.argument("schema_file", type=click.Path(exists=True))
@click.option("--agents", "-a", "agents_file", type=click.Path(exists=True), help="JSON/YAML file with the agent list")
@click.option("--name", "-n", help="Schema name")
@click.option("--instructions", "-i", help="General extraction instructions")
@click.option("--output", "-o", type=click.Path(), help="Output file (stdout if not specified)")
@click.pass_context
def compile_schema(
    ctx: click.Context,
    schema_file: str,
    agents_file: str | None,
    name: str | None,
    instructions: str | None,
    output: str | None,
) -> None:
    """Compile a schema into its derived artifacts.

    SCHEMA_FILE holds a wire schema tree or a property list.
    """
    verbose = ctx.obj.get("verbose", False)

    try:
        loader = DocumentLoader()
        definition = loader.load_definition(schema_file)
        agents = _load_agents(loader, agents_file) if agents_file else None

        compiler = SchemaCompiler(ctx.obj["settings"])
        compiled = compiler.compile(definition, name=name, prompt=instructions, agents=agents)

        json_output = json.dumps(compiled.to_dict(), indent=2, ensure_ascii=False)

        if output:
            Path(output).write_text(json_output)
            console.print(Panel.fit(
                f"[green]Compiled schema[/green]\n\n"
                f"[cyan]Source:[/cyan] {escape(schema_file)}\n"
                f"[cyan]Fields:[/cyan] {len(compiled.wire_tree.get('properties', {}))}\n"
                f"[cyan]Agents:[/cyan] {len(compiled.agents)}\n"
                f"[cyan]Output:[/cyan] {escape(output)}",
                title="Compile Complete",
            ))
        else:
            click.echo(json_output)

        if verbose and compiled.truncations:
            console.print("\n[yellow]Truncated text:[/yellow]")
            for event in compiled.truncations:
                console.print(f"  - {escape(event.location)}: {event.original_length} > {event.limit}")

    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True))
@click.option("--to", "target", type=click.Choice(["wire", "properties"]), default="wire", help="Target format")
@click.option("--output", "-o", type=click.Path(), help="Output file (stdout if not specified)")
@click.pass_context
def convert(ctx: click.Context, schema_file: str, target: str, output: str | None) -> None:
    """Convert between property lists and wire schema trees.

    SCHEMA_FILE holds a property list (--to wire) or a wire tree (--to properties).
    """
    try:
        loader = DocumentLoader()

        if target == "wire":
            converted: Any = to_wire(loader.load_properties(schema_file)).to_dict()
        else:
            converted = [prop.to_dict() for prop in from_wire(loader.load_file(schema_file))]

        json_output = json.dumps(converted, indent=2, ensure_ascii=False)

        if output:
            Path(output).write_text(json_output)
            console.print(f"[green]Wrote {target} schema to {escape(output)}[/green]")
        else:
            click.echo(json_output)

    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.argument("schema_file", type=click.Path(exists=True))
@click.option("--instructions", "-i", help="General extraction instructions")
@click.option("--instructions-file", type=click.Path(exists=True), help="File with general extraction instructions")
@click.option("--mode", "-m", type=click.Choice([m.value for m in PromptMode]), help="Schema view embedded in the prompt")
@click.pass_context
def prompt(
    ctx: click.Context,
    schema_file: str,
    instructions: str | None,
    instructions_file: str | None,
    mode: str | None,
) -> None:
    """Print the extraction prompt for a schema.

    SCHEMA_FILE holds a wire schema tree or a property list.
    """
    try:
        if instructions and instructions_file:
            raise click.UsageError("Use either --instructions or --instructions-file, not both")
        if instructions_file:
            instructions = Path(instructions_file).read_text()

        compiler = SchemaCompiler(ctx.obj["settings"])
        compiled = compiler.compile(DocumentLoader().load_definition(schema_file))
        click.echo(compiler.generate_extraction_prompt(compiled, instructions, mode=mode))

    except click.UsageError:
        raise
    except Exception as e:
        _fail(ctx, e)


@cli.command("check-agents")
@click.argument("agents_file", type=click.Path(exists=True))
@click.pass_context
def check_agents(ctx: click.Context, agents_file: str) -> None:
    """Validate an agent list and show its execution order.

    AGENTS_FILE holds a list of agents, or an object with an "agents" list.
    """
    try:
        compiler = SchemaCompiler(ctx.obj["settings"])
        agents = compiler.validate_agents(_load_agents(DocumentLoader(), agents_file))
        ordered = compiler.sort_agents_by_order(agents)
    except Exception as e:
        _fail(ctx, e)
        return

    table = Table(title="Agent Execution Order")
    table.add_column("Order", justify="right", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Description")

    for agent in ordered:
        description = agent.description or "-"
        table.add_row(
            str(agent.order),
            escape(agent.name),
            escape(description[:50] + "..." if len(description) > 50 else description),
        )

    console.print(table)

    skipped = len(agents) - len(ordered)
    console.print(f"[green]{len(agents)} agents valid[/green], {len(ordered)} enabled, {skipped} disabled")


@cli.command()
@click.argument("results_file", type=click.Path(exists=True))
@click.option("--schema", "-s", "schema_file", type=click.Path(exists=True), help="Schema the results must follow")
@click.option("--deep", is_flag=True, help="Also apply the synthesized record validator")
@click.option("--output", "-o", type=click.Path(), help="Write the valid/invalid partition as JSON")
@click.pass_context
def gate(
    ctx: click.Context,
    results_file: str,
    schema_file: str | None,
    deep: bool,
    output: str | None,
) -> None:
    """Screen extraction results before they reach the agents.

    RESULTS_FILE holds a list of results, or an object with a "results" list.
    """
    try:
        loader = DocumentLoader()
        results = loader.load_file(results_file)
        if isinstance(results, dict) and "results" in results:
            results = results["results"]
        if not isinstance(results, list):
            raise ValueError("Results file must contain a list of extraction results")

        schema = None
        if schema_file:
            schema = SchemaCompiler(ctx.obj["settings"]).compile(loader.load_definition(schema_file))

        gate_result = ResultGate(deep=deep).validate_results(results, schema)

        click.echo(generate_report(gate_result))

        if output:
            Path(output).write_text(json.dumps(gate_result.to_dict(), indent=2, ensure_ascii=False))
            console.print(f"[green]Wrote partition to {escape(output)}[/green]")

    except Exception as e:
        _fail(ctx, e)


@cli.command("validate-record")
@click.argument("schema_file", type=click.Path(exists=True))
@click.argument("record_file", type=click.Path(exists=True))
@click.pass_context
def validate_record(ctx: click.Context, schema_file: str, record_file: str) -> None:
    """Validate one record against a schema.

    Exits with status 1 when the record does not conform.
    """
    try:
        loader = DocumentLoader()
        compiler = SchemaCompiler(ctx.obj["settings"])
        compiled = compiler.compile(loader.load_definition(schema_file))
        result = compiler.validate_data(compiled, loader.load_file(record_file))
    except Exception as e:
        _fail(ctx, e)
        return

    if result.valid:
        console.print(f"{escape(record_file)}: [green]VALID[/green]")
        return

    console.print(f"{escape(record_file)}: [red]INVALID[/red] ({result.error_count} errors)")
    for mismatch in result.mismatches:
        console.print(f"  [red]ERROR[/red]: {escape(str(mismatch))}")
    sys.exit(1)


def _load_agents(loader: DocumentLoader, path: str) -> Any:
    """Load an agent list, unwrapping an ``agents`` key if present."""
    data = loader.load_file(path)
    if isinstance(data, dict) and "agents" in data:
        return data["agents"]
    return data


def _fail(ctx: click.Context, error: Exception, prefix: str = "Error") -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]{prefix}: {escape(str(error))}[/red]")
    if ctx.obj and ctx.obj.get("verbose", False):
        import traceback
        console.print(traceback.format_exc())
    sys.exit(1)


if __name__ == "__main__":
    cli()
