"""CLI create command implementation.

`colschema create` prints the CREATE script for a brand-new collection.
"""

import sys
import traceback

import rich_click as click

from ..migrations.planner import plan_creation
from .common import EXIT_INTERNAL_ERROR, EXIT_OK, require_valid, setup_logging


@click.command("create")
@click.argument("file", type=click.Path(exists=False))
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="🔍 **Show detailed information** - debug logging and tracebacks",
)
def create_command(file: str, verbose: bool) -> None:
    """🏗️ **Generate CREATE TABLE SQL for a collection**

    Validates the definition, then prints enum types, the table, foreign
    keys and indexes in dependency order.

    **Examples:**

    ```bash
    colschema create articles.yaml > 001_articles.sql
    ```

    **Exit Codes:**
    - `0`: SQL generated ✅
    - `1`: Definition invalid ❌
    - `2`: File not found, not readable, or not YAML/JSON 📁
    - `4`: Internal error 💥
    """
    setup_logging(verbose)
    definition = require_valid(file, "sql")

    try:
        plan = plan_creation(definition)
    except Exception as e:
        click.echo(f"❌ Internal error: {e}")
        if verbose:
            click.echo(traceback.format_exc())
        sys.exit(EXIT_INTERNAL_ERROR)

    click.echo(plan.sql)
    sys.exit(EXIT_OK)
