"""Command-line entry point: one command per script."""
from typing import Optional

import typer

from .scripts import (
    cancel_all,
    create_manager,
    deposit,
    inspect_manager,
    inspect_sdk,
    inspect_tx,
    l2_snapshot,
    place_order,
    register_manager,
    register_pool,
)
from .scripts._runner import run

app = typer.Typer(no_args_is_help=True, help="DeepBook v3 testnet tooling over a Sui wallet.")

EnvFile = typer.Option(".env", "--env-file", help="dotenv file to load before reading the environment.")


def _exit(code: int):
    raise typer.Exit(code=code)


@app.command("l2")
def l2_cmd(env_file: Optional[str] = EnvFile):
    """Print the level-2 book snapshot for POOL_KEY."""
    _exit(run(l2_snapshot.main, env_file=env_file))


@app.command("cancel-all")
def cancel_all_cmd(env_file: Optional[str] = EnvFile):
    """Cancel ORDER_IDS, or every open order of the balance manager."""
    _exit(run(cancel_all.main, env_file=env_file))


@app.command("create-manager")
def create_manager_cmd(env_file: Optional[str] = EnvFile):
    """Create and share a new BalanceManager and print its object id."""
    _exit(run(create_manager.main, env_file=env_file))


@app.command("deposit")
def deposit_cmd(env_file: Optional[str] = EnvFile):
    """Deposit DEPOSIT_BASE / DEPOSIT_QUOTE into the balance manager."""
    _exit(run(deposit.main, env_file=env_file))


@app.command("inspect-manager")
def inspect_manager_cmd(env_file: Optional[str] = EnvFile):
    """Print type and owner of BALANCE_MANAGER_ID."""
    _exit(run(inspect_manager.main, env_file=env_file))


@app.command("inspect-sdk")
def inspect_sdk_cmd(env_file: Optional[str] = EnvFile):
    """List the methods the loaded DeepBook SDK exposes."""
    _exit(run(inspect_sdk.main, env_file=env_file))


@app.command("inspect-tx")
def inspect_tx_cmd(digest: str = typer.Argument(..., help="Transaction digest."),
                   env_file: Optional[str] = EnvFile):
    """Print events and object changes of a transaction."""
    _exit(run(inspect_tx.main, digest, env_file=env_file))


@app.command("place-order")
def place_order_cmd(env_file: Optional[str] = EnvFile):
    """Place one resting bid far below the market (needs ALLOW_TRADING=true)."""
    _exit(run(place_order.main, env_file=env_file))


@app.command("register-manager")
def register_manager_cmd(env_file: Optional[str] = EnvFile):
    """Register the balance manager with its owner."""
    _exit(run(register_manager.main, env_file=env_file))


@app.command("register-pool")
def register_pool_cmd(env_file: Optional[str] = EnvFile):
    """Register POOL_KEY for the balance manager."""
    _exit(run(register_pool.main, env_file=env_file))


if __name__ == "__main__":
    app()
