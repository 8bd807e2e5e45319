"""
nocode-contracts CLI.

Commands:
- compile: Compile editor state into layout, style and registry contracts
- validate: Check a layout contract for structural issues
- css: Render a style contract as a stylesheet
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nocode_contracts._version import get_version
from nocode_contracts.assembler import compile_contracts
from nocode_contracts.config import load_config
from nocode_contracts.css import style_contract_to_css
from nocode_contracts.errors import ContractError, ErrorContext, InputError
from nocode_contracts.loaders import load_document, load_entries, load_registry
from nocode_contracts.specs import LayoutSource, StyleContract
from nocode_contracts.tokens import DEFAULT_CSS_PREFIX
from nocode_contracts.validator import ValidationResult, validate_layout_contract

DEFAULT_CSS_FILE = "contracts.css"

app = typer.Typer(
    help="Compile no-code editor state into runtime contracts.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nocode-contracts {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """nocode-contracts main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(error: ContractError) -> None:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}", soft_wrap=True)
    raise typer.Exit(code=1)


def _write_json(path: Path, document: dict[str, Any], indent: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(document, indent=indent or None, ensure_ascii=False) + "\n", encoding="utf-8"
    )


def _print_validation(result: ValidationResult) -> None:
    if not result.errors and not result.warnings:
        console.print("[green]Layout contract is valid[/green]")
        return

    table = Table(title="Validation")
    table.add_column("Level", style="bold")
    table.add_column("Message")
    for message in result.errors:
        table.add_row("[red]error[/red]", escape(message))
    for message in result.warnings:
        table.add_row("[yellow]warning[/yellow]", escape(message))
    console.print(table)

    if result.valid:
        console.print(f"[green]Valid[/green] with {len(result.warnings)} warning(s)")
    else:
        console.print(
            f"[red]Invalid:[/red] {len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )


# =============================================================================
# Commands
# =============================================================================


@app.command("compile")
def compile_command(
    layout: Path = typer.Argument(..., help="Layout source file (JSON or YAML)"),
    entries: Path | None = typer.Option(
        None,
        "--entries",
        "-e",
        help="Raw host entries: one file keyed by page id, or a directory of <page_id>.json",
    ),
    definitions: str | None = typer.Option(
        None,
        "--definitions",
        "-d",
        help="Component definitions as module:attribute",
    ),
    out: Path | None = typer.Option(
        None, "--out", "-o", help="Output directory (default from contracts.toml)"
    ),
    css: bool = typer.Option(False, "--css", help="Also write a stylesheet"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Compile editor state into the three contracts.

    Examples:
        nocode-contracts compile layout.json -e entries/ -d myapp.blocks:DEFINITIONS
        nocode-contracts compile layout.yaml -o build/contracts --css
    """
    try:
        config = load_config(config_path)
        source_data = load_document(layout)
        try:
            source = LayoutSource.model_validate(source_data)
        except ValidationError as e:
            raise InputError(f"Invalid layout source: {e}", ErrorContext(file=layout)) from e
        output = compile_contracts(source, load_entries(entries), load_registry(definitions), config)
    except ContractError as e:
        _fail(e)
        return

    out_dir = out or Path(config.output.directory)
    indent = config.output.indent
    written = [
        (out_dir / config.output.layout_file, output.layout_contract.to_dict()),
        (out_dir / config.output.style_file, output.style_contract.to_dict()),
        (out_dir / config.output.registry_file, output.registry_contract.to_dict()),
    ]
    for path, document in written:
        _write_json(path, document, indent)

    css_path = None
    if css or config.output.css_file:
        css_path = out_dir / (config.output.css_file or DEFAULT_CSS_FILE)
        css_path.write_text(
            style_contract_to_css(output.style_contract, config.css_prefix), encoding="utf-8"
        )

    table = Table(title="Contracts")
    table.add_column("File")
    table.add_column("Hash")
    for path, document in written:
        table.add_row(str(path), document["$contract"]["hash"][:12])
    if css_path is not None:
        table.add_row(str(css_path), "")
    console.print(table)

    meta = output.layout_contract.meta
    console.print(
        f"[green]Compiled[/green] {meta.page_count} page(s), "
        f"{len(output.style_contract.component_styles)} styled node(s)"
    )

    result = validate_layout_contract(output.layout_contract)
    _print_validation(result)
    if not result.valid:
        raise typer.Exit(code=1)


@app.command("validate")
def validate_command(
    contract: Path = typer.Argument(..., help="Layout contract file"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Validate a layout contract.

    Exits with code 1 when the contract has errors.
    """
    try:
        document = load_document(contract)
    except ContractError as e:
        _fail(e)
        return

    result = validate_layout_contract(document)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_validation(result)

    if not result.valid:
        raise typer.Exit(code=1)


@app.command("css")
def css_command(
    style_contract: Path = typer.Argument(..., help="Style contract file"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Write to file instead of stdout"),
    prefix: str = typer.Option(DEFAULT_CSS_PREFIX, "--prefix", help="CSS variable prefix"),
) -> None:
    """Render a style contract as CSS."""
    try:
        document = load_document(style_contract)
        try:
            contract = StyleContract.model_validate(document)
        except ValidationError as e:
            raise InputError(
                f"Invalid style contract: {e}", ErrorContext(file=style_contract)
            ) from e
    except ContractError as e:
        _fail(e)
        return

    stylesheet = style_contract_to_css(contract, prefix)
    if out is None:
        typer.echo(stylesheet, nl=False)
        return

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(stylesheet, encoding="utf-8")
    console.print(f"[green]Wrote[/green] {escape(str(out))}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
