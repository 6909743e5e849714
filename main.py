#!/usr/bin/env python3
"""
Trait Scout CLI entrypoint
"""

import asyncio
import json
import sys
from dataclasses import replace
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from loguru import logger

from trait_scout import TraitScout, ScanStatus, TraitScoutError, EnumerationStrategy
from trait_scout.config import config
from trait_scout.models import CollectionReport
from trait_scout.utils import validate_ethereum_address

app = typer.Typer(help="Trait Scout - NFT ownership, trait and claim statistics")
console = Console()


def setup_logging(verbose: bool):
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else config.log_level)


def require_address(address: str) -> str:
    is_valid, checksum = validate_ethereum_address(address)
    if not is_valid:
        raise typer.BadParameter(f"Invalid wallet address: {address}")
    return checksum


def render_report(report: CollectionReport):
    """Print tokens, trait counts, missing traits and claim counters"""
    result = report.result

    if result.status == ScanStatus.NOT_CONNECTED:
        console.print("[yellow]Wallet Not Connected. Please connect your wallet.[/yellow]")
        return
    if result.status == ScanStatus.WRONG_NETWORK:
        console.print(f"[yellow]Please switch to chain {config.chain_id} and try again.[/yellow]")
        return

    if report.claims is not None:
        console.print(f"\n[bold]Valid Claims:[/bold] {report.claims.valid_claims}")
        console.print(f"[bold]Collected Claims:[/bold] {report.claims.collected_claims}")

    if result.is_empty:
        console.print("\n[bold yellow]No NFTs found[/bold yellow]")
    else:
        console.print(f"\n[bold green]Found {len(result)} NFTs[/bold green]")
        table = Table(title=f"NFTs for {result.address}")
        table.add_column("Token ID", style="yellow")
        table.add_column("Trait", style="magenta")
        table.add_column("Registered", style="cyan")
        table.add_column("Image", style="white")
        for token in result.tokens:
            table.add_row(
                str(token.token_id),
                token.trait,
                "Yes" if token.is_registered else "No",
                token.image_url,
            )
        console.print(table)

    if report.traits.tally:
        trait_table = Table(title="Trait Count")
        trait_table.add_column("Trait", style="magenta")
        trait_table.add_column("Count", style="white")
        for trait, count in sorted(report.traits.tally.items()):
            trait_table.add_row(trait, str(count))
        console.print(trait_table)

    if report.traits.is_complete:
        console.print("\n[bold green]You have all traits needed for a complete collection![/bold green]")
    else:
        console.print(f"\n[bold]Traits still needed:[/bold] {', '.join(report.traits.missing)}")


@app.command()
def scan(
    address: str = typer.Argument(..., help="Wallet address"),
    max_token_id: Optional[int] = typer.Option(None, "--max-token-id", help="Upper bound of the token ID space"),
    strategy: Optional[str] = typer.Option(None, "--strategy", help="Enumeration strategy (range, index)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (JSON)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Find the NFTs a wallet owns and show trait and claim statistics"""
    address = require_address(address)
    setup_logging(verbose)

    scout_config = config
    if max_token_id is not None:
        scout_config = replace(scout_config, max_token_id=max_token_id)
    if strategy is not None:
        scout_config = replace(scout_config, enumeration=EnumerationStrategy.from_string(strategy))

    async def run_scan():
        async with TraitScout(scout_config) as scout:
            await scout.connect_address(address)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task(f"Scanning collection for {address}...", total=None)
                report = await scout.refresh()
                progress.update(task, completed=True)
            return report

    try:
        report = asyncio.run(run_scan())
    except TraitScoutError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    if report is None:
        console.print("[yellow]Scan was superseded before it completed.[/yellow]")
        raise typer.Exit(code=1)

    render_report(report)

    if output:
        with open(output, "w") as f:
            json.dump(report.model_dump(mode="json"), f, indent=2)
        console.print(f"\n[green]Saved to {output}[/green]")


@app.command()
def register(
    token_id: int = typer.Argument(..., help="Token ID to register"),
    trait: str = typer.Argument(..., help="Trait the token is registered with"),
    address: str = typer.Option(..., "--address", "-a", help="Wallet address that owns the token"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Register an NFT with the claim registry"""
    address = require_address(address)
    setup_logging(verbose)

    async def run_register():
        async with TraitScout(config) as scout:
            await scout.connect_address(address, private_key=config.private_key)
            return await scout.register_nft(token_id, trait)

    try:
        receipt = asyncio.run(run_register())
    except TraitScoutError as e:
        console.print(f"[bold red]Registration Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(
        f"[bold green]NFT {token_id} has been successfully registered![/bold green] "
        f"(block {receipt['blockNumber']})"
    )


if __name__ == "__main__":
    app()
