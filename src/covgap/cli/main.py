"""covgap CLI - cover command."""

import click

from covgap import __version__
from covgap.cli.report import report_command
from covgap.config.constants import BANNER_TITLE, PROG_NAME
from covgap.core.progress import banner


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Report missing code coverage from Cobertura XML files."""
    if ctx.invoked_subcommand is None:
        banner(BANNER_TITLE, f"v{__version__}")


cli.add_command(report_command, name="report")


if __name__ == "__main__":
    cli()
