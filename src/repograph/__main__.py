"""CLI entry point for repograph."""

import dataclasses
import json
import logging
import sys

import click

from repograph.config import DEFAULT_CONFIG
from repograph.errors import LayoutError
from repograph.flow import generate_layout, relayout
from repograph.layout.ordering import available_strategies


def _read_json(input: str | None):
    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        click.echo(f"error: invalid JSON: {e}", err=True)
        sys.exit(1)


def _write_json(payload, output: str | None) -> None:
    rendered = json.dumps(payload, indent=2) + "\n"
    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


def _run(operation, input: str | None, direction: str, ordering: str, output: str | None) -> None:
    payload = _read_json(input)
    config = dataclasses.replace(DEFAULT_CONFIG, ordering=ordering)
    try:
        result = operation(payload, direction, config)
    except LayoutError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)
    _write_json(result, output)


_input_arg = click.argument("input", required=False, type=click.Path(exists=True))
_direction_opt = click.option("--direction", "-d", "direction", type=str, default="TB", help="Layout direction (TB or LR)")
_ordering_opt = click.option(
    "--ordering",
    "ordering",
    type=click.Choice(available_strategies()),
    default=DEFAULT_CONFIG.ordering,
    help="Crossing-reduction heuristic",
)
_output_opt = click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log layout phases to stderr")
def main(verbose: bool) -> None:
    """Lay out repository architecture graphs as layered diagrams."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@main.command()
@_input_arg
@_direction_opt
@_ordering_opt
@_output_opt
def generate(input: str | None, direction: str, ordering: str, output: str | None) -> None:
    """Classifier JSON ({"nodes", "edges"}) to a positioned flow graph."""
    _run(generate_layout, input, direction, ordering, output)


@main.command("relayout")
@_input_arg
@_direction_opt
@_ordering_opt
@_output_opt
def relayout_cmd(input: str | None, direction: str, ordering: str, output: str | None) -> None:
    """Recompute positions for an existing flow graph."""
    _run(relayout, input, direction, ordering, output)


if __name__ == "__main__":
    main()
