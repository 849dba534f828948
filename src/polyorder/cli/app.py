"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer
from dotenv import load_dotenv

from polyorder.config import Credentials, get_settings
from polyorder.config.settings import configure_logging

app = typer.Typer(
    name="polyorder",
    help="polyorder - Search Polymarket, inspect order books, place signed orders, track positions.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
    env_file: Path | None = typer.Option(None, "--env-file", help="Load credentials from this .env file"),
) -> None:
    """Load settings and credentials once and store them in context."""
    load_dotenv(env_file)
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "credentials": Credentials.from_env(), "profile": profile}


# Subcommands registered from other modules
from polyorder.cli import book, markets, order, positions  # noqa: E402

app.add_typer(markets.app, name="markets")
app.add_typer(book.app, name="book")
app.add_typer(order.app, name="order")
app.add_typer(positions.app, name="positions")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
