"""Shared helpers for the CLI commands: logging setup, loading and errors."""

import json
from pathlib import Path
import sys
from typing import Any, NoReturn

from rich.console import Console
import rich_click as click
import yaml

from ..config import get_settings
from ..core.logging import configure_logging
from ..core.loader import read_definition_data
from ..core.schema import CollectionDefinition
from ..exceptions import DefinitionLoadError
from ..validation import CollectionValidator, ValidationResult

# Create console for rich formatting - auto-detects if we're in interactive environment
console = Console()

# Exit codes shared by every command
EXIT_OK = 0
EXIT_INVALID = 1
EXIT_FILE_ERROR = 2
EXIT_INTERNAL_ERROR = 4


def should_use_rich_formatting(force_colors: bool = False) -> bool:
    """Determine if we should use rich formatting based on environment."""
    return force_colors or console.is_terminal


def setup_logging(verbose: bool = False) -> None:
    """Configure logging from ``COLSCHEMA_*`` settings."""
    settings = get_settings()
    configure_logging(
        environment=settings.environment,
        log_level="DEBUG" if verbose else settings.log_level,
        json_logs=settings.json_logs,
    )


def fail(
    message: str,
    exit_code: int,
    format: str = "table",
    error_type: str = "error",
    **extra: Any,
) -> NoReturn:
    """Report a fatal problem and exit."""
    if format in ("json", "yaml"):
        output: dict[str, Any] = {
            "status": "error",
            "error_type": error_type,
            "message": message,
            **extra,
        }
        if format == "json":
            click.echo(json.dumps(output, indent=2))
        else:
            click.echo(yaml.dump(output, default_flow_style=False, sort_keys=False))
    else:
        click.echo(f"❌ {message}")
    sys.exit(exit_code)


def load_and_validate(file: str, format: str = "table") -> tuple[Path, ValidationResult]:
    """Read a definition file and run the validator on its payload.

    Exits with code 2 when the file cannot be read or parsed.
    """
    file_path = Path(file)
    try:
        data = read_definition_data(file_path)
    except DefinitionLoadError as e:
        fail(str(e), EXIT_FILE_ERROR, format, "file_error", file=str(file_path))

    return file_path, CollectionValidator().validate_data(data)


def print_errors(
    result: ValidationResult,
    file_path: str,
    force_colors: bool = False,
    prefix: str = "",
) -> None:
    """Print validation errors for one file in human-readable form."""
    if should_use_rich_formatting(force_colors):
        console.print(f"❌ [bold red]Validation failed[/bold red] [cyan]{file_path}[/cyan]")
        for i, error in enumerate(result.errors, 1):
            console.print(
                f"[bold red]Error {i}:[/bold red] [red]{error.type}[/red] in "
                f"[bold blue]{prefix}{error.field}[/bold blue]"
            )
            console.print(f"  [dim]{error.message}[/dim]")
    else:
        click.echo(f"❌ Validation failed: {file_path}")
        click.echo(f"Errors found: {result.error_count}")
        for error in result.errors:
            click.echo(f"❌ {error.type} in '{prefix}{error.field}': {error.message}")


def require_valid(
    file: str, format: str, force_colors: bool = False, prefix: str = ""
) -> CollectionDefinition:
    """Load a definition that must pass validation, exiting with 1 if it does not."""
    file_path, result = load_and_validate(file, format)
    if result.valid and isinstance(result.model, CollectionDefinition):
        return result.model

    if format in ("json", "yaml"):
        output = {"status": "invalid", "file": str(file_path), **result.to_dict()}
        if format == "json":
            click.echo(json.dumps(output, indent=2))
        else:
            click.echo(yaml.dump(output, default_flow_style=False, sort_keys=False))
    else:
        print_errors(result, str(file_path), force_colors, prefix)
    sys.exit(EXIT_INVALID)
