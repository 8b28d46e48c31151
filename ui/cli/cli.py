"""CLI entrypoint for planwise."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer

from ui.cli import commands

app = typer.Typer(help="Goal planning, deadline risk and activity search")
config_app = typer.Typer(help="Configuration commands")

_NOW_HELP = "Reference time (defaults to the current UTC time)"


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", exists=True, dir_okay=False, help="Override YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    ctx.obj = {"config": config, "verbose": verbose}


@app.command("decompose")
def decompose_cmd(
    ctx: typer.Context,
    goal_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON with goal and keyResults"),
    now: datetime | None = typer.Option(None, help=_NOW_HELP),
) -> None:
    """Break a goal into milestones, tasks and a weekly schedule."""
    commands.decompose(goal_file, now, ctx.obj["config"], ctx.obj["verbose"])


@app.command("risk")
def risk_cmd(
    ctx: typer.Context,
    goal_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON with goal, keyResults, tasks"),
    now: datetime | None = typer.Option(None, help=_NOW_HELP),
) -> None:
    """Assess deadline risk for a goal."""
    commands.risk(goal_file, now, ctx.obj["config"], ctx.obj["verbose"])


@app.command("trajectory")
def trajectory_cmd(
    ctx: typer.Context,
    goal_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    progress: float = typer.Option(0.0, min=0.0, max=1.0, help="Current progress fraction"),
    now: datetime | None = typer.Option(None, help=_NOW_HELP),
) -> None:
    """Simulate completion dates for a goal."""
    commands.trajectory(goal_file, progress, now, ctx.obj["config"], ctx.obj["verbose"])


@app.command("index")
def index_cmd(
    ctx: typer.Context,
    records_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of {type, record}"),
) -> None:
    """Index activity records and show index statistics."""
    commands.index(records_file, ctx.obj["config"], ctx.obj["verbose"])


@app.command("search")
def search_cmd(
    ctx: typer.Context,
    records_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    query: str = typer.Argument(...),
    types: list[str] | None = typer.Option(None, "--type", help="Restrict to record types"),
    threshold: float | None = typer.Option(None, "--threshold", help="Relevance threshold"),
) -> None:
    """Search indexed records."""
    commands.search(records_file, query, types, threshold, ctx.obj["config"], ctx.obj["verbose"])


@app.command("ask")
def ask_cmd(
    ctx: typer.Context,
    records_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    question: str = typer.Argument(...),
) -> None:
    """Ask a question about indexed records."""
    commands.ask(records_file, question, ctx.obj["config"], ctx.obj["verbose"])


@app.command("summary")
def summary_cmd(
    ctx: typer.Context,
    records_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    start: datetime = typer.Option(..., help="Period start"),
    end: datetime = typer.Option(..., help="Period end"),
) -> None:
    """Summarize activity within a period."""
    commands.summary(records_file, start, end, ctx.obj["config"], ctx.obj["verbose"])


@config_app.command("show")
def config_show_cmd(ctx: typer.Context) -> None:
    """Show effective configuration."""
    commands.config_show(ctx.obj["config"])


app.add_typer(config_app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
