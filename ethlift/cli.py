"""Typer-based CLI for EthLift developer utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import (
    DEFAULT_CHAIN_ID,
    FOUNDRY_PROFILE,
    LEGACY_CONFIG_FILENAME,
    NATIVE_CONFIG_FILENAME,
)
from .config_manager import (
    build_project_config,
    load_legacy_remappings,
    render_native_config,
)
from .etherscan import Chain
from .exceptions import EthLiftError
from .models import ContractIdentity
from .orchestrator import DiffOrchestrator
from .remappings import translate_legacy_remappings

CONFIG_KINDS = ("auto", "brownie", "foundry")

app = typer.Typer(
    help="⛓️  EthLift: Ethereum developer utils. Diff local Solidity against verified on-chain source.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"EthLift v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution details to stderr."),
):
    """EthLift: compare a working copy with what is deployed on-chain."""
    _configure_logging(verbose)


def _fail(exc: Exception) -> NoReturn:
    message = " ".join(str(exc).splitlines())
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _check_kind(config_kind: str) -> str:
    if config_kind not in CONFIG_KINDS:
        raise typer.BadParameter(f"Config kind must be one of: {', '.join(CONFIG_KINDS)}")
    return config_kind


@app.command("diff")
def diff(
    etherscan_token: str = typer.Option(
        ...,
        "--etherscan-token",
        "--etherscan_token",
        "-e",
        envvar="ETHERSCAN_API_KEY",
        help="Etherscan API token.",
    ),
    source_code_path: str = typer.Option(
        ..., "--source-code-path", "--source_code_path", "-s", help="Source code folder path."
    ),
    contract_address: str = typer.Option(
        ..., "--contract-address", "--contract_address", "-a", help="Contract address."
    ),
    file_path: str = typer.Option(
        ..., "--file-path", "--file_path", "-f", help="Smart contract .sol file path."
    ),
    chain_id: int = typer.Option(
        DEFAULT_CHAIN_ID, "--chain-id", "--chain_id", "-n", help="Network id for the contract address."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config-path", "--config_path", "-c", help="Config file path for your project."
    ),
    config_kind: str = typer.Option(
        "auto", "--config-kind", help="Remapping convention: auto, brownie, or foundry."
    ),
    profile: str = typer.Option(FOUNDRY_PROFILE, "--profile", help="Foundry profile to read."),
    color: bool = typer.Option(True, "--color/--no-color", help="Colorize the diff."),
):
    """Diff a local .sol file against its Etherscan-verified source.

    Example:
      ethlift diff -e $KEY -s contracts -a 0x... -f contracts/Vault.sol
    """
    _check_kind(config_kind)
    try:
        chain = Chain.from_id(chain_id)
        project = build_project_config(
            source_code_path,
            Path.cwd(),
            config_path=config_path,
            kind=config_kind,
            profile=profile,
        )
        orchestrator = DiffOrchestrator(project, etherscan_token)
        orchestrator.run(file_path, ContractIdentity(chain.id, contract_address), color=color)
    except EthLiftError as exc:
        _fail(exc)


@app.command("remappings")
def remappings(
    source_code_path: str = typer.Option(
        ".", "--source-code-path", "--source_code_path", "-s", help="Source code folder path."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config-path", "--config_path", "-c", help="Config file path for your project."
    ),
    config_kind: str = typer.Option(
        "auto", "--config-kind", help="Remapping convention: auto, brownie, or foundry."
    ),
    profile: str = typer.Option(FOUNDRY_PROFILE, "--profile", help="Foundry profile to read."),
):
    """Print the resolved remappings, one ``alias=path`` per line."""
    _check_kind(config_kind)
    try:
        project = build_project_config(
            source_code_path,
            Path.cwd(),
            config_path=config_path,
            kind=config_kind,
            profile=profile,
        )
    except EthLiftError as exc:
        _fail(exc)

    if not project.remappings:
        typer.echo("No remappings configured.")
        raise typer.Exit(code=0)
    for entry in project.remappings:
        typer.echo(str(entry))


@app.command("port-config")
def port_config(
    config_path: Optional[str] = typer.Option(
        None, "--config-path", "--config_path", "-c", help=f"Brownie config (default: ./{LEGACY_CONFIG_FILENAME})."
    ),
    src: str = typer.Option("contracts", "--src", help="Source folder for the generated profile."),
    write: bool = typer.Option(False, "--write", "-w", help=f"Write ./{NATIVE_CONFIG_FILENAME} instead of printing."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
):
    """Convert Brownie remappings into a foundry.toml profile."""
    path = Path(config_path) if config_path else Path.cwd() / LEGACY_CONFIG_FILENAME
    try:
        entries = translate_legacy_remappings(load_legacy_remappings(path))
    except EthLiftError as exc:
        _fail(exc)

    document = render_native_config(entries, src=src)
    if not write:
        typer.echo(document, nl=False)
        return

    target = Path.cwd() / NATIVE_CONFIG_FILENAME
    if target.exists() and not force:
        typer.echo(f"Error: {target} already exists (use --force to overwrite).", err=True)
        raise typer.Exit(code=1)
    target.write_text(document, encoding="utf-8")
    typer.echo(f"Wrote {len(entries)} remapping(s) to {target}")


if __name__ == "__main__":
    app()
