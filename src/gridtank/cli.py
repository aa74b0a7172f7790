from __future__ import annotations

import logging
import pathlib
import random
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.markup import escape

from .arena import ArenaUpdate
from .config import BotConfig
from .engine import Bot
from .simulator import SELF_HREF, opponent_roster, run_match

app = typer.Typer(add_completion=False, help="Grid tank battle bot")


def _load_config(path: Optional[pathlib.Path]) -> BotConfig:
    try:
        return BotConfig.load(path)
    except (OSError, ValueError) as exc:
        # pydantic's ValidationError is a ValueError
        print(f"[red]Invalid config[/red]: {escape(str(exc))}")
        raise typer.Exit(code=1)


def _parse_size(size: str) -> tuple[int, int]:
    try:
        width, height = (int(part) for part in size.lower().split("x"))
    except ValueError:
        raise typer.BadParameter(f"Expected WIDTHxHEIGHT, got {size!r}")
    if width <= 0 or height <= 0:
        raise typer.BadParameter("Arena dimensions must be positive")
    return width, height


@app.command()
def serve(
    config: Optional[pathlib.Path] = typer.Option(None, help="YAML config file"),
    host: Optional[str] = typer.Option(None, help="Bind address (overrides config)"),
    port: Optional[int] = typer.Option(None, help="Listening port (overrides config and PORT)"),
) -> None:
    """Run the HTTP bot."""
    import uvicorn

    from .server import create_app

    cfg = _load_config(config)
    logging.basicConfig(level=cfg.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    bind_host = host or cfg.host
    bind_port = port or cfg.port
    logging.getLogger("gridtank.cli").info("starting server on port :%d", bind_port)
    uvicorn.run(create_app(Bot(cfg.policy)), host=bind_host, port=bind_port, log_level=cfg.log_level.lower())


@app.command()
def decide(
    snapshot: pathlib.Path = typer.Argument(..., help="ArenaUpdate JSON file"),
    config: Optional[pathlib.Path] = typer.Option(None, help="YAML config file"),
    seed: Optional[int] = typer.Option(None, help="Seed for the fallback move"),
) -> None:
    """Print the action the bot would take for one snapshot."""
    cfg = _load_config(config)
    try:
        update = ArenaUpdate.model_validate_json(snapshot.read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"[red]Snapshot not found[/red]: {snapshot}")
        raise typer.Exit(code=1)
    except ValidationError as exc:
        print(f"[red]Invalid ArenaUpdate[/red]: {escape(str(exc))}")
        raise typer.Exit(code=1)
    decision = Bot(cfg.policy, rng=random.Random(seed)).decide(update)
    suffix = f" threat={decision.threat}" if decision.threat else ""
    print(f"[green]{decision.code}[/green] ({decision.reason}){suffix}")


@app.command()
def simulate(
    opponent: List[str] = typer.Option(["rammer"], help="Scripted opponents (repeatable): spinner, sitter, rammer, random"),
    turns: int = typer.Option(100, min=1, help="Turns to play"),
    size: str = typer.Option("8x6", help="Arena size as WIDTHxHEIGHT"),
    seed: Optional[int] = typer.Option(None, help="Seed for spawn positions and random opponents"),
    config: Optional[pathlib.Path] = typer.Option(None, help="YAML config file"),
) -> None:
    """Play a local match against scripted opponents and print the standings."""
    cfg = _load_config(config)
    width, height = _parse_size(size)
    try:
        opponents = opponent_roster(opponent, seed=seed)
        result = run_match(Bot(cfg.policy, rng=random.Random(seed)), opponents, width=width, height=height, turns=turns, seed=seed)
    except (KeyError, ValueError) as exc:
        print(f"[red]Cannot run match[/red]: {escape(str(exc))}")
        raise typer.Exit(code=1)
    print(f"[bold]{turns} turns on {width}x{height}[/bold]")
    for row in result.summary():
        name = "[cyan]self[/cyan]" if row["href"] == SELF_HREF else row["href"].rsplit("/", 1)[-1]
        print(
            f"{row['rank']}. {name} score={row['score']} hits={row['hits_dealt']} "
            f"hit_by={row['times_hit']} accuracy={row['accuracy']} actions={row['actions']}"
        )


if __name__ == "__main__":
    app()
