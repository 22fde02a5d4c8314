"""CLI entry point for prthreads.

Reads the JSON written by `gh api graphql` for a pull request's review
threads and writes the unresolved threads a reviewer approved with a
reaction (👍 by default) to OUTPUT_FILE.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from prthreads_core.config import DEFAULT_CONFIG_PATH
from prthreads_core.errors import ThreadFilterError

console = Console()
err_console = Console(stderr=True)


class _ThreadFilterCommand(click.Command):
    """Reports every usage error with exit status 1 rather than click's default 2."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("prthreads_core")
    logger.handlers = [RichHandler(console=err_console, show_path=False)]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.command("prthreads", cls=_ThreadFilterCommand)
@click.version_option(package_name="prthreads", prog_name="prthreads")
@click.argument("json_file", type=click.Path(dir_okay=False))
@click.argument("github_username")
@click.argument("output_file", type=click.Path(dir_okay=False))
@click.option(
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRTHREADS_CONFIG",
)
@click.option(
    "--reaction",
    default=None,
    help="Reaction content that counts as approval (e.g. HEART). Overrides config file.",
)
@click.option(
    "--exclude",
    "exclude",
    multiple=True,
    help="Drop threads on paths matching this pattern. Repeatable; added to config file patterns.",
)
@click.option("--show", is_flag=True, help="Print a table of the approved threads after writing.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(
    json_file: str,
    github_username: str,
    output_file: str,
    config_path: str,
    reaction: str | None,
    exclude: tuple[str, ...],
    show: bool,
    verbose: bool,
):
    """Filter PR review threads to those approved by GITHUB_USERNAME.

    JSON_FILE is the raw output of `gh api graphql` for a pull request's
    reviewThreads. Resolved threads are always dropped. A thread is kept when
    any of its comments carries the approval reaction from GITHUB_USERNAME.
    """
    from prthreads_core.config import load_config
    from prthreads_core.filter import run_filter

    _configure_logging(verbose)

    try:
        config = load_config(config_path, cli_overrides={"reaction": reaction})
        config["exclude"] = [*config["exclude"], *exclude]
        summary = run_filter(json_file, github_username, output_file, config=config)
    except ThreadFilterError as e:
        raise click.ClickException(str(e)) from e

    console.print(
        f"Wrote {len(summary.approved)} approved threads to {escape(summary.output_path)}",
        soft_wrap=True,
        highlight=False,
    )

    if show:
        from prthreads_cli.render import print_summary

        print_summary(console, summary)
