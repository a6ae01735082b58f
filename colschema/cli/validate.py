"""CLI validation command implementation.

This module implements the `colschema validate` command: it loads a
collection definition file and reports every naming and shape problem in it.
"""

import json
import sys
import traceback
from typing import Any

from rich.table import Table
import rich_click as click
import yaml

from ..core.schema import CollectionDefinition
from .common import (
    EXIT_INTERNAL_ERROR,
    EXIT_INVALID,
    EXIT_OK,
    console,
    load_and_validate,
    print_errors,
    setup_logging,
    should_use_rich_formatting,
)


def _summary(definition: CollectionDefinition) -> dict[str, Any]:
    return {
        "collection": definition.name,
        "api_name": definition.api_name,
        "field_count": len(definition.fields),
        "index_count": len(definition.indexes),
    }


def _output_table_format(
    definition: CollectionDefinition, file_path: str, force_colors: bool
) -> None:
    """Output a successful validation in table format."""
    summary = _summary(definition)

    if should_use_rich_formatting(force_colors):
        console.print("✅ [bold green]Validation successful[/bold green]")
        console.print()

        info_table = Table(show_header=False, box=None, padding=(0, 1))
        info_table.add_row("[bold]File:[/bold]", f"[cyan]{file_path}[/cyan]")
        info_table.add_row(
            "[bold]Collection:[/bold]", f"[yellow]{summary['collection']}[/yellow]"
        )
        info_table.add_row("[bold]Fields:[/bold]", str(summary["field_count"]))
        info_table.add_row("[bold]Indexes:[/bold]", str(summary["index_count"]))
        console.print(info_table)
    else:
        # Plain text for non-interactive (CI)
        click.echo("✅ Validation successful")
        click.echo()
        click.echo(f"File: {file_path}")
        click.echo(f"Collection: {summary['collection']}")
        click.echo(f"Fields: {summary['field_count']}")
        click.echo(f"Indexes: {summary['index_count']}")


def _validate_implementation(
    file: str, format: str, verbose: bool, force_colors: bool
) -> None:
    setup_logging(verbose)

    try:
        file_path, result = load_and_validate(file, format)

        if format in ("json", "yaml"):
            output: dict[str, Any] = {
                "status": "valid" if result.valid else "invalid",
                "file": str(file_path),
            }
            if isinstance(result.model, CollectionDefinition):
                output.update(_summary(result.model))
            if not result.valid:
                output["error_count"] = result.error_count
                output["errors"] = [error.to_dict() for error in result.errors]

            if format == "json":
                click.echo(json.dumps(output, indent=2))
            else:
                click.echo(yaml.dump(output, default_flow_style=False, sort_keys=False))
        elif result.valid and isinstance(result.model, CollectionDefinition):
            _output_table_format(result.model, str(file_path), force_colors)
        else:
            print_errors(result, str(file_path), force_colors)

        sys.exit(EXIT_OK if result.valid else EXIT_INVALID)

    except Exception as e:
        # Handle unexpected errors
        if format == "json":
            click.echo(
                json.dumps(
                    {
                        "status": "error",
                        "error_type": "internal_error",
                        "message": f"Internal error: {e}",
                        "file": file,
                    },
                    indent=2,
                )
            )
        else:
            click.echo(f"❌ Internal error: {e}")
            if verbose:
                click.echo("\nFull traceback:")
                click.echo(traceback.format_exc())
        sys.exit(EXIT_INTERNAL_ERROR)


@click.command("validate")
@click.argument("file", type=click.Path(exists=False))
@click.option(
    "--format",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="📋 **Output format** for validation results",
    show_default=True,
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="🔍 **Show detailed information** - debug logging and tracebacks",
)
@click.option(
    "--force-colors",
    is_flag=True,
    help="🎨 **Force colored output** - useful for testing rich formatting",
    hidden=True,  # Hide from main help but available for testing
)
def validate_command(file: str, format: str, verbose: bool, force_colors: bool) -> None:
    """🔍 **Validate a collection definition file**

    Checks naming rules, reserved names, per-kind field requirements and
    index references, reporting every problem at once.

    **Examples:**

    ```bash
    colschema validate articles.yaml                # Validate a definition
    colschema validate articles.yaml --format json  # JSON output
    ```

    **Exit Codes:**
    - `0`: Validation successful ✅
    - `1`: Validation failed ❌
    - `2`: File not found, not readable, or not YAML/JSON 📁
    - `4`: Internal error 💥
    """
    _validate_implementation(file, format, verbose, force_colors)
