"""
GDA CLI - Command Line Interface for the Gradual Dutch Auction engine

Main entry point for all CLI commands.
"""

import click

from gda import __version__
from gda.core.config import load_config
from gda.utils.logger import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, help="Data directory (default: GDA_DATA_DIR or ./data)")
@click.option("--env-file", default=None, help="Optional .env file with GDA_* settings")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, data_dir, env_file):
    """Gradual Dutch Auction - pricing and settlement engine"""
    config = load_config(env_file, data_dir=data_dir)
    if debug:
        config.log_level = "DEBUG"
    setup_logging(level=config.log_level, log_dir=str(config.log_dir), log_to_file=config.log_to_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _fail(ctx, message: str):
    click.echo(f"❌ {message}")
    ctx.exit(1)


# =============================================================================
# Price Commands
# =============================================================================


@cli.group()
def price():
    """Quote prices offline, without an engine"""
    pass


def _quote(ctx, params, quantity_sold: int, quantity: int, elapsed: int):
    from gda.core.auction import AuctionState
    from gda.core.errors import AuctionError
    from gda.core.math import format_wad
    from gda.core.pricing import evaluate

    params = params.with_start_time(0)
    try:
        quote = evaluate(params, AuctionState(quantity_sold=quantity_sold), quantity, elapsed)
    except AuctionError as exc:
        _fail(ctx, f"{type(exc).__name__}: {exc}")
        return

    click.echo(f"Price ({params.kind})")
    click.echo("-" * 40)
    click.echo(f"  Sold so far: {quantity_sold}")
    click.echo(f"  Quantity:    {quantity}")
    click.echo(f"  Elapsed:     {elapsed}")
    click.echo(f"  Price:       {format_wad(quote)}")
    click.echo(f"  Price (wei): {quote}")


def _build(ctx, model, **fields):
    from pydantic import ValidationError
    from gda.core.errors import DomainError
    from gda.core.math import to_wad

    try:
        values = {
            name: to_wad(value) if isinstance(value, str) else value
            for name, value in fields.items()
        }
        return model(**values)
    except (ValidationError, DomainError) as exc:
        _fail(ctx, f"Invalid parameters: {exc}")


@price.command("continuous")
@click.option("--initial-price", required=True, help="Price of the first unit (decimal)")
@click.option("--decay", default="0", help="Decay constant per time unit (decimal)")
@click.option("--emission-rate", required=True, help="Units emitted per time unit (decimal)")
@click.option("--sold", default=0, type=int, help="Units already sold")
@click.option("--quantity", default=1, type=int, help="Units to buy")
@click.option("--elapsed", default=0, type=int, help="Time units since start")
@click.pass_context
def price_continuous(ctx, initial_price, decay, emission_rate, sold, quantity, elapsed):
    """Quote a continuous GDA batch"""
    from gda.core.auction import ContinuousGDAParams

    params = _build(
        ctx,
        ContinuousGDAParams,
        initial_price=initial_price,
        decay_constant=decay,
        emission_rate=emission_rate,
    )
    _quote(ctx, params, sold, quantity, elapsed)


@price.command("discrete")
@click.option("--initial-price", required=True, help="Price of the first unit (decimal)")
@click.option("--scale-factor", required=True, help="Per-unit price multiplier (decimal, >= 1)")
@click.option("--decay", default="0", help="Decay constant per time unit (decimal)")
@click.option("--sold", default=0, type=int, help="Units already sold")
@click.option("--quantity", default=1, type=int, help="Units to buy")
@click.option("--elapsed", default=0, type=int, help="Time units since start")
@click.pass_context
def price_discrete(ctx, initial_price, scale_factor, decay, sold, quantity, elapsed):
    """Quote a discrete GDA batch"""
    from gda.core.auction import DiscreteGDAParams

    params = _build(
        ctx,
        DiscreteGDAParams,
        initial_price=initial_price,
        scale_factor=scale_factor,
        decay_constant=decay,
    )
    _quote(ctx, params, sold, quantity, elapsed)


@price.command("dutch")
@click.option("--starting-price", required=True, help="Price at step zero (decimal)")
@click.option("--discount-rate", required=True, help="Discount per step (decimal)")
@click.option("--duration", default=0, type=int, help="Scheduled number of steps")
@click.option("--elapsed", default=0, type=int, help="Steps since start")
@click.pass_context
def price_dutch(ctx, starting_price, discount_rate, duration, elapsed):
    """Quote a linear Dutch auction"""
    from gda.core.auction import LinearDutchParams

    params = _build(
        ctx,
        LinearDutchParams,
        token_id=0,
        starting_price=starting_price,
        discount_rate_per_step=discount_rate,
        duration_steps=duration,
    )
    _quote(ctx, params, 0, 1, elapsed)


# =============================================================================
# Demo Command
# =============================================================================


def _demo_continuous(engine, ledger, clock):
    from gda.core.assets import FungibleMintableSupply
    from gda.core.auction import ContinuousGDAParams
    from gda.core.math import format_wad, to_wad

    click.echo("🌊 Continuous GDA: 1000 per unit, decay 0.5, 10 units/step")
    supply = FungibleMintableSupply()
    params = ContinuousGDAParams(
        initial_price=to_wad(1000),
        decay_constant=to_wad("0.5"),
        emission_rate=to_wad(10),
    )
    engine.initialize("continuous-demo", params, seller="alice", asset=supply)

    for step, quantity in ((0, 1), (3, 5), (10, 20)):
        clock.set(step)
        quote = engine.purchase_price("continuous-demo", quantity)
        result = engine.purchase_tokens(
            "continuous-demo", quantity, recipient="bob", max_payment=quote + to_wad(1), buyer="bob"
        )
        click.echo(
            f"  ✓ t={step}: bought {quantity} for {format_wad(result.actual_price, 4)} "
            f"(refund {format_wad(result.refund, 4)})"
        )
    click.echo(f"  ✓ Bob holds {supply.balance_of('bob')} units")
    click.echo()


def _demo_discrete(engine, ledger, clock):
    from gda.core.assets import SequentialTokenSupply
    from gda.core.auction import DiscreteGDAParams
    from gda.core.math import format_wad, to_wad

    click.echo("🖼️  Discrete GDA: 10 per token, x1.1 per sale")
    supply = SequentialTokenSupply()
    params = DiscreteGDAParams(initial_price=to_wad(10), scale_factor=to_wad("1.1"))
    engine.initialize("discrete-demo", params, seller="alice", asset=supply)

    for _ in range(3):
        quote = engine.purchase_price("discrete-demo", 1)
        engine.purchase_tokens("discrete-demo", 1, recipient="bob", max_payment=quote, buyer="bob")
        click.echo(f"  ✓ Token bought for {format_wad(quote, 4)}")
    quote = engine.purchase_price("discrete-demo", 2)
    click.echo(f"  ✓ Next 2 tokens would cost {format_wad(quote, 4)}")
    click.echo(f"  ✓ Bob owns tokens {supply.registry.tokens_of('bob')}")
    click.echo()


def _demo_dutch(engine, ledger, clock):
    from gda.core.assets import InMemoryUniqueAssetRegistry
    from gda.core.auction import LinearDutchParams
    from gda.core.errors import AlreadySold
    from gda.core.math import format_wad, to_wad

    click.echo("🔨 Linear Dutch: token #7 from 500, -1 per step over 30 steps")
    registry = InMemoryUniqueAssetRegistry()
    registry.mint("alice", 7)
    registry.set_approval_for_all("alice", engine.address)
    params = LinearDutchParams(
        token_id=7,
        starting_price=to_wad(500),
        discount_rate_per_step=to_wad(1),
        duration_steps=30,
        start_time=clock.now(),
    )
    engine.initialize("dutch-demo", params, seller="alice", asset=registry)

    clock.advance(30)
    quote = engine.purchase_price("dutch-demo", 1)
    click.echo(f"  ✓ After 30 steps: {format_wad(quote)}")
    engine.buy("dutch-demo", quote, "bob")
    click.echo(f"  ✓ Bob bought token #7, owner is now {registry.owner_of(7)}")
    try:
        engine.buy("dutch-demo", quote, "carol")
    except AlreadySold:
        click.echo("  ✓ Second bid rejected: already sold")
    click.echo()


DEMO_SCENARIOS = {
    "continuous": _demo_continuous,
    "discrete": _demo_discrete,
    "dutch": _demo_dutch,
}


@cli.command("demo")
@click.option(
    "--scenario",
    default="all",
    type=click.Choice(["all"] + sorted(DEMO_SCENARIOS)),
    help="Demo scenario to run",
)
def demo(scenario):
    """Run an in-memory demo of the auction engine"""
    from gda.core.assets import InMemoryLedger, ManualClock
    from gda.core.config import EngineConfig
    from gda.core.math import format_wad, to_wad
    from gda.core.settlement import SettlementEngine

    click.echo("=" * 60)
    click.echo("  GRADUAL DUTCH AUCTION - DEMO")
    click.echo("=" * 60)
    click.echo()

    click.echo("📦 Initializing components...")
    clock = ManualClock()
    ledger = InMemoryLedger()
    engine = SettlementEngine(ledger, clock, EngineConfig(persist=False))
    ledger.mint("bob", to_wad(1_000_000))
    ledger.approve("bob", engine.address, to_wad(1_000_000))
    click.echo(f"  ✓ Bob balance: {format_wad(ledger.balance_of('bob'))}")
    click.echo()

    names = sorted(DEMO_SCENARIOS) if scenario == "all" else [scenario]
    for name in names:
        DEMO_SCENARIOS[name](engine, ledger, clock)

    click.echo("📊 Final Statistics:")
    click.echo(f"  Engine: {engine.stats()}")
    click.echo(f"  Alice received: {format_wad(ledger.balance_of('alice'), 4)}")
    click.echo(f"  Bob balance: {format_wad(ledger.balance_of('bob'), 4)}")
    click.echo()
    click.echo("✅ Demo complete!")


# =============================================================================
# Auction Commands
# =============================================================================


@cli.group()
def auctions():
    """Inspect persisted auctions"""
    pass


def _open_storage(ctx):
    from gda.core.storage import StorageManager

    config = ctx.obj["config"]
    if not config.db_path.exists():
        return None
    return StorageManager(config.data_dir, config.db_name)


@auctions.command("list")
@click.pass_context
def auctions_list(ctx):
    """List persisted auctions"""
    storage = _open_storage(ctx)
    stored = storage.list_auctions() if storage else []
    if not stored:
        click.echo("No auctions found.")
        return

    for auction in stored:
        status = auction.state.status.name
        click.echo(
            f"  {auction.auction_id}: {auction.params.kind} seller={auction.seller} "
            f"sold={auction.state.quantity_sold} [{status}]"
        )


@auctions.command("show")
@click.argument("auction_id")
@click.pass_context
def auctions_show(ctx, auction_id):
    """Show one persisted auction"""
    from gda.core.auction import parameters_to_json

    storage = _open_storage(ctx)
    auction = storage.load_auction(auction_id) if storage else None
    if auction is None:
        _fail(ctx, f"Auction '{auction_id}' not found")
        return

    click.echo(f"Auction {auction.auction_id}")
    click.echo("-" * 40)
    click.echo(f"  Kind:   {auction.params.kind}")
    click.echo(f"  Seller: {auction.seller}")
    click.echo(f"  Sold:   {auction.state.quantity_sold}")
    click.echo(f"  Status: {auction.state.status.name}")
    click.echo(f"  Params: {parameters_to_json(auction.params)}")


if __name__ == "__main__":
    cli()
