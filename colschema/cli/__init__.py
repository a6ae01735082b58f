"""Command-line interface for collection schemas."""

import rich_click as click

from .create import create_command
from .diff import diff_command
from .validate import validate_command

# Configure rich-click styling
click.rich_click.TEXT_MARKUP = "rich"
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.STYLE_OPTION = "bold cyan"
click.rich_click.STYLE_ARGUMENT = "bold yellow"
click.rich_click.STYLE_COMMAND = "bold green"
click.rich_click.STYLE_SWITCH = "bold blue"


@click.group(name="colschema")
@click.version_option(version="0.1.0", prog_name="colschema")
def main() -> None:
    """🗂️ **colschema** - Declarative collection schemas for PostgreSQL.

    Validate collection definitions, generate CREATE TABLE scripts and diff
    two versions into ordered ALTER statements with risk warnings.
    """
    pass


# Add commands to the group
main.add_command(validate_command)
main.add_command(create_command)
main.add_command(diff_command)


if __name__ == "__main__":
    main()


__all__ = ["main"]
