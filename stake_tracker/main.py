"""Stake Tracker CLI."""
import asyncio
from pathlib import Path
from typing import Optional
import click

from .core.config import TrackerConfig, load_config, configure_logging
from .core.forms import StakeValidationError
from .core.tracker import StakeTracker

def get_tracker(ctx: click.Context) -> StakeTracker:
    """Tracker bound to the configuration of the current invocation."""
    config: TrackerConfig = ctx.obj
    return StakeTracker.from_config(config)

@click.group(invoke_without_command=True)
@click.version_option(package_name="stake-tracker")
@click.option('--currency', help='Fiat currency for prices and fees (e.g. eur, usd)')
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), help='Directory holding stakes.json')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging verbosity')
@click.pass_context
def cli(ctx: click.Context, currency: Optional[str], data_dir: Optional[Path], log_level: Optional[str]):
    """Stake Tracker - value your staked crypto positions at live prices."""
    config = load_config(currency=currency, data_dir=data_dir, log_level=log_level)
    configure_logging(config.log_level)
    ctx.obj = config
    if ctx.invoked_subcommand is None:
        ctx.invoke(show)

@cli.command()
@click.pass_context
def show(ctx: click.Context):
    """Show all stakes with current values and the portfolio summary."""
    tracker = get_tracker(ctx)
    click.echo(asyncio.run(tracker.refresh()))

@cli.command()
@click.option('--platform', prompt='Platform', help='Protocol or exchange (e.g. Lido)')
@click.option('--token', 'staked_token', prompt='Staked token', help='Ticker of the staked asset (e.g. ETH)')
@click.option('--asset-id', 'price_asset_id', prompt='CoinGecko id', help='Price lookup id (e.g. ethereum)')
@click.option('--quantity', 'staked_quantity', prompt='Quantity staked', help='Amount of the staked asset')
@click.option('--yield', 'yield_rate', prompt='Yield (%)', help='Advertised reward rate in percent')
@click.option('--yield-kind', type=click.Choice(['APR', 'APY'], case_sensitive=False), default='APR',
              show_default=True, help='How the yield is quoted')
@click.option('--lsd', 'derivative_token', default='', help='Liquid staking token received (e.g. stETH)')
@click.option('--fee', 'fee_paid', default='0', show_default=True, help='Fee already paid')
@click.option('--fee-unit', type=click.Choice(['fiat', 'native'], case_sensitive=False), default='fiat',
              show_default=True, help='Fee in the fiat currency or in the staked token')
@click.option('--lockup', 'lockup_status', default='', help='Whether the funds are locked')
@click.option('--withdrawal', 'withdrawal_terms', default='', help='Withdrawal delay (e.g. 7-14 days)')
@click.option('--wallet', 'wallet_label', default='', help='Wallet holding the position')
@click.option('--notes', default='', help='Free-form notes')
@click.pass_context
def add(ctx: click.Context, **form):
    """Add a stake to the ledger."""
    tracker = get_tracker(ctx)
    try:
        view = asyncio.run(tracker.add_stake(form))
    except StakeValidationError as e:
        click.echo("Stake not added:", err=True)
        for field, message in e.errors.items():
            click.echo(f"  {field}: {message}", err=True)
        ctx.exit(1)
    click.echo(f"Added {form['staked_token'].strip().upper()} stake on {form['platform'].strip()}.\n")
    click.echo(view)

@cli.command()
@click.argument('position', type=int)
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@click.pass_context
def delete(ctx: click.Context, position: int, yes: bool):
    """Delete the stake shown at POSITION (1-based, as in the table)."""
    tracker = get_tracker(ctx)
    confirm = (lambda message: True) if yes else click.confirm
    try:
        view = asyncio.run(tracker.delete_stake(position - 1, confirm))
    except IndexError as e:
        click.echo(str(e), err=True)
        ctx.exit(1)
    if view is None:
        click.echo("Nothing deleted.")
        return
    click.echo(view)

@cli.command()
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@click.pass_context
def clear(ctx: click.Context, yes: bool):
    """Delete every stake. This cannot be undone."""
    tracker = get_tracker(ctx)
    confirm = (lambda message: True) if yes else click.confirm
    view = asyncio.run(tracker.clear_all(confirm))
    if view is None:
        click.echo("Nothing deleted.")
        return
    click.echo(view)

@cli.command()
@click.pass_context
def prices(ctx: click.Context):
    """Fetch current prices for every asset in the ledger."""
    tracker = get_tracker(ctx)
    records = tracker.store.load()
    ids = tracker.resolver.normalize_ids(r.price_asset_id for r in records)
    if not ids:
        click.echo("No assets in the ledger to price.")
        return

    quotes = asyncio.run(tracker.resolver.fetch_prices(ids))
    code = ctx.obj.currency.upper()
    click.echo(f"\n{'Asset id':<30}{'Price':>16}")
    click.echo("-" * 46)
    for asset_id in ids:
        if asset_id in quotes:
            click.echo(f"{asset_id:<30}{quotes[asset_id]:>12.4f} {code}")
        else:
            click.echo(f"{asset_id:<30}{'not found':>16}")

@cli.command('config')
@click.pass_context
def show_config(ctx: click.Context):
    """Show the effective configuration."""
    config: TrackerConfig = ctx.obj
    for key, value in config.model_dump().items():
        if key == "api_key" and value:
            value = "***"
        click.echo(f"{key}: {value}")
    click.echo(f"store_path: {config.store_path}")

if __name__ == "__main__":
    cli()
