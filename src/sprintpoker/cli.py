"""Main CLI entry point for sprintpoker."""

import sys
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from sprintpoker import __version__
from sprintpoker.config import SprintPokerConfig, load_config
from sprintpoker.core.context import PokerContext
from sprintpoker.core.exceptions import ConfigError, SprintPokerError
from sprintpoker.core.output import OutputFormat


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


class OutputFormatType(click.ParamType):
    """Custom Click parameter type for output format."""

    name = "format"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return OutputFormat(value.lower())
        except ValueError:
            self.fail(
                f"Invalid format '{value}'. Choose from: table, json, yaml",
                param,
                ctx,
            )


OUTPUT_FORMAT = OutputFormatType()


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"sprintpoker version {__version__}")
    ctx.exit()


def use_color(config: SprintPokerConfig, no_color: bool) -> bool:
    """Decide whether to colorize output."""
    if no_color:
        return False
    setting = config.global_settings.color
    if setting == "auto":
        return sys.stdout.isatty()
    return setting == "always"


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("ticket_key", required=False)
@click.option(
    "-b",
    "--board",
    "board_id",
    metavar="ID",
    help="Board to pick the next sprint from (defaults to JIRA_BOARD_ID)",
)
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False),
    metavar="PATH",
    help="Where ticket runs save their commands (default: slack-commands.md)",
)
@click.option(
    "--inspect",
    is_flag=True,
    help="Diagnose why TICKET_KEY is or is not picked up instead of planning",
)
@click.option(
    "--list-sprints",
    is_flag=True,
    help="Show the board's sprints, most recent first, and exit",
)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=OUTPUT_FORMAT,
    default="table",
    metavar="FORMAT",
    help="Output format for --inspect and --list-sprints: table, json, yaml",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    metavar="FILE",
    envvar="SPRINTPOKER_CONFIG",
    help="Path to config file",
)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=".env",
    show_default=True,
    metavar="PATH",
    help="Dotenv file to load before reading the environment",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Only print the generated commands and errors",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
def cli(
    ticket_key: str | None,
    board_id: str | None,
    output_file: str | None,
    inspect: bool,
    list_sprints: bool,
    output_format: OutputFormat,
    config_file: str | None,
    env_file: str,
    verbose: int,
    quiet: bool,
    no_color: bool,
) -> None:
    """Sprintpoker - poker-planning commands for Jira sprints.

    Finds the next sprint, collects its "Ready to Size" tickets grouped by
    epic, and prints one /pp command per ticket.

    \b
    With TICKET_KEY, the sprint is the one that ticket belongs to and the
    commands are also saved to slack-commands.md. Without it, the sprint
    is chosen from the default board: the latest future sprint, else the
    active one, else the most recent.

    \b
    Examples:
        sprintpoker
        sprintpoker PROJ-123
        sprintpoker --board 42 --list-sprints
        sprintpoker PROJ-123 --inspect -o json

    \b
    Configuration:
        JIRA_BASE_URL, JIRA_EMAIL, JIRA_API_TOKEN, JIRA_BOARD_ID (required)
        .env                          Loaded from the working directory
        ~/.sprintpoker/config.yaml    User configuration
        ./sprintpoker.yaml            Project configuration
    """
    if inspect and not ticket_key:
        raise click.UsageError("--inspect requires TICKET_KEY")

    env_path = Path(env_file)
    if env_path.is_file():
        load_dotenv(env_path)

    try:
        config = load_config(config_file)
        ctx = PokerContext(
            config=config,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            color=use_color(config, no_color),
        )
        # Fail fast before any request is made
        settings = ctx.settings
    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}", highlight=False)
        sys.exit(1)

    try:
        if list_sprints:
            board = board_id or settings.board_id
            sprints = ctx.sprints.list_sprints(board)
            ctx.output.print_data(
                [s.to_dict() for s in sprints],
                headers=["id", "name", "state", "start", "end"],
                title=f"Sprints for board {board} ({len(sprints)} total)",
            )
        elif inspect:
            report = ctx.inspector().inspect(ticket_key)
            ctx.output.print_data(report.to_dict(), title=f"Ticket {ticket_key}")
        else:
            result = ctx.planning_run().run(
                ticket_key=ticket_key,
                board_id=board_id,
                output_file=output_file,
            )
            ctx.logger.debug("Run finished", **result.to_dict())
    finally:
        ctx.close()


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except SprintPokerError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
