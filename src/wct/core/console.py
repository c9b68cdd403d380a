"""Console output helpers for wct commands.

Each line is prefixed with a short coloured label, e.g. "info", "done".
"""

import click


def info(message: str) -> None:
    click.echo(f"{click.style('info', fg='blue')} {message}")


def success(message: str) -> None:
    click.echo(f"{click.style('done', fg='green')} {message}")


def warn(message: str) -> None:
    click.echo(f"{click.style('warn', fg='yellow')} {message}", err=True)


def error(message: str) -> None:
    click.echo(f"{click.style('error', fg='red')} {message}", err=True)


def step(current: int, total: int, message: str) -> None:
    """Print a numbered progress line, e.g. "[2/5] Install dependencies"."""
    prefix = click.style(f"[{current}/{total}]", fg="cyan")
    click.echo(f"{prefix} {message}")


def bold(message: str) -> str:
    return click.style(message, bold=True)
