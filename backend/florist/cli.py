"""
FlowerCost CLI.

Operator commands over one session. Without ``--account`` the local cache
is used (seeded from the sample shop on first run); with it, the remote
store configured by DATABASE_URL.

Usage:
    flowercost catalog
    flowercost orders --account 3f0c...
    flowercost pos-summary sample-order-spring
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from florist.repositories.local import load_sample_data
from florist.services.coordinator import PersistenceCoordinator
from florist.session import SessionContext, open_store
from shared.config.constants import Collections
from shared.config.logging import get_logger, setup_logging
from shared.config.settings import get_settings

app = typer.Typer(
    name="flowercost",
    help="FlowerCost florist pricing and order tools",
    add_completion=False,
)
console = Console()
logger = get_logger(__name__)

T = TypeVar("T")

AccountOption = typer.Option(None, "--account", "-a", help="Account id (remote store); omit for local mode")


@app.callback()
def main() -> None:
    """Configure logging and refuse to run production with unsafe settings."""
    setup_logging()

    settings = get_settings()
    problems = settings.validate_production_settings()
    for problem in problems:
        logger.error("Configuration error", problem=problem)
    if problems:
        console.print(f"[red]✗ Production configuration errors: {'; '.join(problems)}[/red]")
        raise typer.Exit(1)


def _run(account: Optional[str], body: Callable[[PersistenceCoordinator], Awaitable[T]]) -> T:
    """Open the session's store, load it and run ``body`` against the coordinator."""
    settings = get_settings()

    async def _session() -> T:
        context = SessionContext(account)
        coordinator = PersistenceCoordinator(
            context,
            open_store(context, settings),
            low_margin_threshold=settings.low_margin_threshold,
        )
        loaded = await coordinator.load_all()
        if not loaded.success:
            console.print(f"[red]✗ Could not load data: {loaded.error_message}[/red]")
            raise typer.Exit(1)
        return await body(coordinator)

    return asyncio.run(_session())


def _money(value) -> str:
    return f"${value:,.2f}"


# =============================================================================
# Catalog Commands
# =============================================================================


@app.command()
def catalog(account: Optional[str] = AccountOption):
    """List product templates with retail prices."""

    async def body(coordinator: PersistenceCoordinator) -> None:
        markup = coordinator.markup.as_table()
        table = Table(title="Product Templates")
        table.add_column("Name", style="cyan")
        table.add_column("Category")
        table.add_column("Wholesale", justify="right")
        table.add_column("Retail", justify="right")
        table.add_column("Stock", justify="right")

        for template in coordinator.templates:
            stock = "-" if template.inventory_count is None else str(template.inventory_count)
            table.add_row(
                template.name,
                template.category,
                _money(template.wholesale_cost),
                _money(template.wholesale_cost * markup[template.category]),
                stock,
            )
        console.print(table)

    _run(account, body)


@app.command("low-stock")
def low_stock(account: Optional[str] = AccountOption):
    """List tracked products at or below their low-stock threshold."""

    async def body(coordinator: PersistenceCoordinator) -> None:
        templates = coordinator.low_stock().value or []
        if not templates:
            console.print("[green]✓ No products are low on stock[/green]")
            return

        table = Table(title="Low Stock")
        table.add_column("Name", style="cyan")
        table.add_column("Category")
        table.add_column("Stock", justify="right")
        table.add_column("Threshold", justify="right")
        for template in templates:
            threshold = template.low_stock_threshold
            table.add_row(
                template.name,
                template.category,
                str(template.inventory_count),
                "-" if threshold is None else str(threshold),
            )
        console.print(table)

    _run(account, body)


# =============================================================================
# Recipe Commands
# =============================================================================


@app.command()
def recipes(account: Optional[str] = AccountOption):
    """Show recipe cost analysis against each recipe's reference price."""

    async def body(coordinator: PersistenceCoordinator) -> None:
        table = Table(title="Arrangement Recipes")
        table.add_column("Recipe", style="cyan")
        table.add_column("Wholesale", justify="right")
        table.add_column("Retail", justify="right")
        table.add_column("Profit", justify="right")
        table.add_column("Reference", justify="right")
        table.add_column("Delta", justify="right")
        table.add_column("Missing")

        for recipe in coordinator.recipes:
            analysis = coordinator.analyze_recipe(recipe.id).value
            if not analysis.complete:
                table.add_row(
                    recipe.name, "-", "-", "-", _money(recipe.reference_price), "-",
                    f"[yellow]{', '.join(analysis.missing_ingredients)}[/yellow]",
                )
                continue
            table.add_row(
                recipe.name,
                _money(analysis.total_wholesale),
                _money(analysis.total_retail),
                _money(analysis.profit),
                _money(analysis.reference_price),
                _money(analysis.profit_delta),
                "",
            )
        console.print(table)

    _run(account, body)


# =============================================================================
# Order Commands
# =============================================================================


@app.command()
def orders(account: Optional[str] = AccountOption):
    """List saved orders, newest first."""

    async def body(coordinator: PersistenceCoordinator) -> None:
        table = Table(title="Saved Orders")
        table.add_column("ID", style="dim")
        table.add_column("Date")
        table.add_column("Name", style="cyan")
        table.add_column("Staff")
        table.add_column("Retail", justify="right")
        table.add_column("Profit", justify="right")

        for order in coordinator.orders:
            table.add_row(
                order.id,
                order.created_at.strftime("%Y-%m-%d"),
                order.name,
                order.staff_name or "-",
                _money(order.total_retail),
                _money(order.profit),
            )
        console.print(table)

    _run(account, body)


@app.command("pos-summary")
def pos_summary(
    order_id: str = typer.Argument(..., help="Order ID"),
    account: Optional[str] = AccountOption,
):
    """Print the copy-paste POS summary for an order."""

    async def body(coordinator: PersistenceCoordinator) -> None:
        result = coordinator.pos_summary(order_id)
        if not result.success:
            console.print(f"[red]✗ {result.error_message}[/red]")
            raise typer.Exit(1)
        # Plain print: the summary is pasted verbatim into the POS
        typer.echo(result.value)

    _run(account, body)


@app.command()
def analytics(account: Optional[str] = AccountOption):
    """Profit analytics over the order history."""

    async def body(coordinator: PersistenceCoordinator) -> None:
        summary = coordinator.analytics().value

        table = Table(title="Profit Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Orders", str(summary.order_count))
        table.add_row("Revenue", _money(summary.total_revenue))
        table.add_row("Costs", _money(summary.total_cost))
        table.add_row("Profit", _money(summary.total_profit))
        table.add_row("Average margin", f"{summary.average_margin}%")
        table.add_row("Average order", _money(summary.average_order_value))
        if summary.best_order is not None:
            table.add_row("Best order", f"{summary.best_order.name} ({_money(summary.best_order.profit)})")
            table.add_row("Worst order", f"{summary.worst_order.name} ({_money(summary.worst_order.profit)})")
        table.add_row("Low-margin orders", str(len(summary.low_margin_orders)))
        console.print(table)

        if summary.top_products_by_profit:
            products = Table(title="Top Products")
            products.add_column("Product", style="cyan")
            products.add_column("Category")
            products.add_column("Qty", justify="right")
            products.add_column("Est. profit", justify="right")
            for perf in summary.top_products_by_profit:
                products.add_row(perf.name, perf.category, str(perf.total_quantity), _money(perf.estimated_profit))
            console.print(products)

    _run(account, body)


# =============================================================================
# Data Commands
# =============================================================================


@app.command()
def seed(account: str = typer.Option(..., "--account", "-a", help="Account id to seed")):
    """Copy the bundled sample shop into an account of the remote store."""

    async def body(coordinator: PersistenceCoordinator) -> None:
        if coordinator.templates or coordinator.orders or coordinator.recipes:
            console.print("[yellow]Account already has data; nothing seeded[/yellow]")
            return

        sample = load_sample_data()
        await coordinator.save_markup(sample[Collections.MARKUP_SETTINGS])
        await coordinator.save_pos_settings(sample[Collections.POS_SETTINGS])

        for template in sample[Collections.PRODUCT_TEMPLATES]:
            fields = {k: template[k] for k in ("name", "wholesale_cost", "category", "inventory_count", "low_stock_threshold")}
            result = await coordinator.create_template(fields)
            if not result.success:
                console.print(f"[red]✗ {template['name']}: {result.error_message}[/red]")

        for recipe in sample[Collections.RECIPES]:
            fields = {k: recipe[k] for k in ("name", "description", "reference_price", "ingredients", "photo", "url")}
            result = await coordinator.create_recipe(fields)
            if not result.success:
                console.print(f"[red]✗ {recipe['name']}: {result.error_message}[/red]")

        console.print(
            f"[green]✓ Seeded {len(coordinator.templates)} products and {len(coordinator.recipes)} recipes[/green]"
        )

    _run(account, body)


if __name__ == "__main__":
    app()
