import logging
from typing import List, Optional

import typer
from eth_account import Account
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from realityrift.client.decryption import DecryptionService
from realityrift.client.encryption import EncryptionClient
from realityrift.compute.factory import create_runtime
from realityrift.game.engine import RiftGame
from realityrift.game.errors import RiftError
from realityrift.session.runner import SessionRunner
from realityrift.storage.json_store import JsonStorage

app = typer.Typer(help="Encrypted Reality Rift: guess the hidden monster, keep your score encrypted.")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _parse_choices(raw: str) -> List[int]:
    try:
        return [int(c) for c in raw.split(",") if c.strip()]
    except ValueError:
        raise typer.BadParameter("choices must be a comma separated list of integers")


@app.command()
def config(
    backend: str = typer.Option("mock", envvar="RIFT_BACKEND", help="Confidential runtime: mock or binfhe")
):
    """
    Prints the game constants and the protocol id.
    """
    game = RiftGame(create_runtime(backend))
    cfg = game.get_config()

    table = Table(title="Game Config")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Starting score", str(cfg.starting_score))
    table.add_row("Reward", str(cfg.reward))
    table.add_row("Penalty", str(cfg.penalty))
    table.add_row("Total monsters", str(cfg.total_options))
    table.add_row("Protocol id", str(game.get_protocol_id()))
    table.add_row("Contract", game.address)
    console.print(table)


@app.command()
def play(
    choices: str = typer.Option(..., help="Comma separated monster choices, e.g. 2,4"),
    backend: str = typer.Option("mock", envvar="RIFT_BACKEND", help="Confidential runtime: mock or binfhe"),
    player_key: Optional[str] = typer.Option(None, envvar="RIFT_PLAYER_KEY", help="Hex private key of the player"),
    results_dir: str = typer.Option("results", envvar="RIFT_RESULTS_DIR", help="Directory for session records"),
    save: bool = typer.Option(True, help="Save the session to the results directory"),
):
    """
    Registers a local player, submits encrypted guesses and decrypts the results.
    """
    monster_choices = _parse_choices(choices)
    account = Account.from_key(player_key) if player_key else Account.create()

    runtime = create_runtime(backend)
    game = RiftGame(runtime)
    runner = SessionRunner(
        game,
        EncryptionClient(runtime),
        DecryptionService(runtime, game.acl),
        JsonStorage(results_dir) if save else None,
    )

    try:
        record = runner.play(account, monster_choices, show_progress=True)
    except (RiftError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Rounds for {record.player}")
    table.add_column("Round", justify="right")
    table.add_column("Monster", justify="right")
    table.add_column("Outcome")
    table.add_column("Score", style="bold green", justify="right")
    table.add_column("Score handle", style="dim")
    for r in record.rounds:
        outcome = "[green]correct[/green]" if r.correct else "[red]wrong[/red]"
        table.add_row(str(r.round_number), str(r.choice), outcome, str(r.score), r.encrypted_score[:18] + "...")
    console.print(table)
    console.print(f"Games played: {record.final_state.games_played}")


if __name__ == "__main__":
    app()
