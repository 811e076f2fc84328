"""
tfreclaim CLI entry point.
"""
import io
import sys
from typing import Optional, Tuple

import click
from rich.console import Console

from tfreclaim import __version__, importer, inventory, log
from tfreclaim.config import load_config
from tfreclaim.errors import TfreclaimError
from tfreclaim.filter import Filter
from tfreclaim.tag import Tag
from tfreclaim.writers.hcl import HCLWriter
from tfreclaim.writers.state import StateWriter


def _save(path: str, buf: io.StringIO) -> None:
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(buf.getvalue())


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(__version__)
@click.pass_context
def cli(ctx):
    """tfreclaim: rebuild Terraform state and configuration from discovered resources."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command("import")
@click.argument("inventory_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--tfstate", type=click.Path(dir_okay=False), default=None, help="Write the Terraform state to this file.")
@click.option("--hcl", type=click.Path(dir_okay=False), default=None, help="Write the HCL configuration to this file.")
@click.option("--include", "-i", multiple=True, help="Resource type to import; can be repeated.")
@click.option("--exclude", "-e", multiple=True, help="Resource type to skip; can be repeated.")
@click.option("--tags", "-t", multiple=True, help="Only import resources with this tag, as NAME:VALUE; can be repeated.")
@click.option("--target", multiple=True, help="Only import this resource, as TYPE.ID; can be repeated.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="YAML config file (default: ./tfreclaim.yaml if present).")
@click.option("--no-interpolate", is_flag=True, default=False, help="Keep literal values instead of references.")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write the full debug log to this file.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log progress to stderr.")
@click.option("--debug", "-d", is_flag=True, default=False, help="Log everything to stderr.")
@click.option("--no-color", is_flag=True, default=False, help="Disable rich terminal color output.")
def import_cmd(
    inventory_file: str,
    tfstate: Optional[str],
    hcl: Optional[str],
    include: Tuple[str, ...],
    exclude: Tuple[str, ...],
    tags: Tuple[str, ...],
    target: Tuple[str, ...],
    config_path: Optional[str],
    no_interpolate: bool,
    log_file: Optional[str],
    verbose: bool,
    debug: bool,
    no_color: bool,
) -> None:
    """
    Import the resources listed in INVENTORY_FILE (JSON or YAML).
    """
    stderr = Console(stderr=True, no_color=no_color)

    if not tfstate and not hcl:
        stderr.print("[red]At least one of --tfstate or --hcl is required.[/red]")
        sys.exit(2)

    try:
        cfg = load_config(config_path)
        log.init(verbose=verbose, debug=debug, log_file=log_file or cfg.log_file)

        filters = Filter(
            tags=[Tag.parse(t) for t in (tags or cfg.tags)],
            include=list(include or cfg.include),
            exclude=list(exclude or cfg.exclude),
            targets=list(target or cfg.targets),
        )
        interpolate = cfg.interpolate and not no_interpolate

        with stderr.status("[bold]Loading inventory…"):
            provider = inventory.load_file(inventory_file)

        # Nothing reaches disk unless every writer synced
        hcl_buf, state_buf = io.StringIO(), io.StringIO()
        hcl_writer = HCLWriter(hcl_buf, interpolate=interpolate) if hcl else None
        state_writer = StateWriter(state_buf, interpolate=interpolate) if tfstate else None
        importer.run(provider, hcl_writer, state_writer, filters, out=stderr)

        if hcl:
            _save(hcl, hcl_buf)
            stderr.print(f"Configuration written to [bold]{hcl}[/bold]")
        if tfstate:
            _save(tfstate, state_buf)
            stderr.print(f"State written to [bold]{tfstate}[/bold]")
    except TfreclaimError as exc:
        stderr.print(f"[red]Import error:[/red] {exc}")
        sys.exit(2)

    sys.exit(0)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
