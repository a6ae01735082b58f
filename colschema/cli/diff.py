"""CLI diff command implementation.

`colschema diff OLD NEW` compares two versions of a collection definition
and prints the ALTER script that migrates the table, together with the risk
warnings for each change.
"""

import json
import sys
import traceback

from rich.syntax import Syntax
from rich.table import Table
import rich_click as click
import yaml

from ..exceptions import MigrationRefusedError
from ..migrations.detector import SchemaDiff
from ..migrations.planner import MigrationPlan, plan_migration
from ..migrations.types import Severity
from ..migrations.warnings import MigrationWarning
from .common import (
    EXIT_INTERNAL_ERROR,
    EXIT_INVALID,
    EXIT_OK,
    console,
    require_valid,
    setup_logging,
    should_use_rich_formatting,
)

SEVERITY_STYLES = {
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


def _change_rows(diff: SchemaDiff) -> list[tuple[str, str, str]]:
    """Flatten a diff into (change, target, details) rows."""
    rows: list[tuple[str, str, str]] = []
    for rename in diff.renamed_fields:
        rows.append(("renamed", rename.old_name, f"-> {rename.new_name}"))
    for field in diff.added_fields:
        rows.append(("added", field.name, field.kind.value))
    for field in diff.removed_fields:
        rows.append(("removed", field.name, field.kind.value))
    for change in diff.modified_fields:
        attributes = ", ".join(attribute.value for attribute in change.changed_attributes)
        rows.append(("modified", change.new_field.name, attributes))
    for index in diff.added_indexes:
        rows.append(("index added", index.name, ", ".join(index.fields)))
    for index in diff.removed_indexes:
        rows.append(("index removed", index.name, ", ".join(index.fields)))
    for index_change in diff.modified_indexes:
        rows.append(
            (
                "index modified",
                index_change.new_index.name,
                ", ".join(index_change.new_index.fields),
            )
        )
    return rows


def _echo_warnings(warnings: list[MigrationWarning]) -> None:
    """Write warnings to stderr as SQL comments."""
    for warning in warnings:
        click.echo(f"-- WARNING {warning}", err=True)


def _output_table_format(plan: MigrationPlan, force_colors: bool) -> None:
    """Output the diff, warnings and SQL for humans."""
    diff = plan.diff
    if diff is None:
        return

    if should_use_rich_formatting(force_colors):
        if diff.has_changes:
            changes = Table(title=f"Changes to {plan.table_name}")
            changes.add_column("Change", style="bold")
            changes.add_column("Target", style="cyan")
            changes.add_column("Details")
            for row in _change_rows(diff):
                changes.add_row(*row)
            console.print(changes)
        else:
            console.print("✅ [bold green]No schema changes detected[/bold green]")

        if diff.warnings:
            console.print()
            warnings = Table(title="Warnings")
            warnings.add_column("Severity")
            warnings.add_column("Kind")
            warnings.add_column("Message")
            for warning in diff.warnings:
                style = SEVERITY_STYLES[warning.severity]
                warnings.add_row(
                    f"[{style}]{warning.severity.value}[/{style}]",
                    warning.kind.value,
                    warning.message,
                )
            console.print(warnings)

        console.print()
        console.print(Syntax(plan.sql or "", "sql", word_wrap=True))
    else:
        # Plain text for non-interactive (CI)
        click.echo(f"Table: {plan.table_name}")
        for change, target, details in _change_rows(diff):
            click.echo(f"  {change}: {target} ({details})")
        if not diff.has_changes:
            click.echo("No schema changes detected")
        for warning in diff.warnings:
            click.echo(f"⚠️  {warning}")
        click.echo()
        click.echo(plan.sql)


def _output_invalid_plan(plan: MigrationPlan, format: str) -> None:
    """Report plan-level errors such as a bad ``--table`` value."""
    if format in ("json", "yaml"):
        output = {"status": "invalid", **plan.to_dict()}
        if format == "json":
            click.echo(json.dumps(output, indent=2))
        else:
            click.echo(yaml.dump(output, default_flow_style=False, sort_keys=False))
        return

    click.echo("❌ Migration plan rejected")
    for error in plan.errors:
        click.echo(f"❌ {error.type} in '{error.field}': {error.message}")


def _diff_implementation(  # noqa: PLR0913
    old_file: str,
    new_file: str,
    table: str | None,
    format: str,
    fail_on_data_loss: bool,
    verbose: bool,
    force_colors: bool,
) -> None:
    setup_logging(verbose)

    old = require_valid(old_file, format, force_colors, prefix="old.")
    new = require_valid(new_file, format, force_colors, prefix="new.")

    try:
        plan = plan_migration(old, new, table_name=table, require_safe=fail_on_data_loss)
    except MigrationRefusedError as e:
        if format in ("json", "yaml"):
            output = {
                "status": "refused",
                "message": str(e),
                "warnings": [
                    warning.model_dump(by_alias=True, mode="json", exclude_none=True)
                    for warning in e.warnings
                ],
            }
            if format == "json":
                click.echo(json.dumps(output, indent=2))
            else:
                click.echo(yaml.dump(output, default_flow_style=False, sort_keys=False))
        else:
            click.echo(f"❌ {e}")
            for warning in e.warnings:
                click.echo(f"   {warning}")
        sys.exit(EXIT_INVALID)
    except Exception as e:
        click.echo(f"❌ Internal error: {e}")
        if verbose:
            click.echo("\nFull traceback:")
            click.echo(traceback.format_exc())
        sys.exit(EXIT_INTERNAL_ERROR)

    if not plan.valid:
        _output_invalid_plan(plan, format)
        sys.exit(EXIT_INVALID)

    if format == "sql":
        _echo_warnings(plan.warnings)
        click.echo(plan.sql)
    elif format == "json":
        click.echo(json.dumps(plan.to_dict(), indent=2))
    elif format == "yaml":
        click.echo(yaml.dump(plan.to_dict(), default_flow_style=False, sort_keys=False))
    else:
        _output_table_format(plan, force_colors)

    sys.exit(EXIT_OK)


@click.command("diff")
@click.argument("old_file", type=click.Path(exists=False))
@click.argument("new_file", type=click.Path(exists=False))
@click.option(
    "--table",
    type=str,
    help="🗄️ **Physical table name** (defaults to the old definition's name)",
    metavar="NAME",
)
@click.option(
    "--format",
    type=click.Choice(["sql", "json", "yaml", "table"]),
    default="sql",
    help="📋 **Output format** for the migration plan",
    show_default=True,
)
@click.option(
    "--fail-on-data-loss",
    is_flag=True,
    help="🛑 **Refuse destructive migrations** - exit 1 on data-loss warnings",
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
def diff_command(  # noqa: PLR0913
    old_file: str,
    new_file: str,
    table: str | None,
    format: str,
    fail_on_data_loss: bool,
    verbose: bool,
    force_colors: bool,
) -> None:
    """🔀 **Diff two collection definitions and generate ALTER SQL**

    Detects added, removed, renamed and modified fields and indexes, warns
    about risky changes and prints the migration script.

    **Examples:**

    ```bash
    colschema diff v1.yaml v2.yaml                      # ALTER script
    colschema diff v1.yaml v2.yaml --format json        # Diff preview
    colschema diff v1.yaml v2.yaml --fail-on-data-loss  # Gate in CI
    ```

    **Exit Codes:**
    - `0`: Plan generated ✅
    - `1`: Definition invalid or migration refused ❌
    - `2`: File not found, not readable, or not YAML/JSON 📁
    - `4`: Internal error 💥
    """
    _diff_implementation(
        old_file, new_file, table, format, fail_on_data_loss, verbose, force_colors
    )
