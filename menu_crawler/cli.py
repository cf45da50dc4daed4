"""
CLI commands for running menu crawlers
"""

import asyncio
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from menu_crawler.core.config import Settings, get_settings
from menu_crawler.core.logging import log, setup_logging
from menu_crawler.output import write_products_json
from menu_crawler.sites import build_registry

app = typer.Typer(help="Cafe menu crawlers")
console = Console()

TEST_OPTION = typer.Option(False, "--test", "-t", help="Test mode: few products, one category")
MAX_PRODUCTS_OPTION = typer.Option(None, "--max-products", help="Products per page in test mode")
MAX_REQUESTS_OPTION = typer.Option(None, "--max-requests", help="Requests per crawl in test mode")
OUTPUT_DIR_OPTION = typer.Option(None, "--output-dir", help="Directory for JSON output")
LOG_LEVEL_OPTION = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR")


def configure(
    test: bool = False,
    max_products: Optional[int] = None,
    max_requests: Optional[int] = None,
    output_dir: Optional[Path] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """Push CLI flags into the CRAWLER_* environment and reload settings"""
    if test:
        os.environ["CRAWLER_TEST_MODE"] = "true"
    if max_products is not None:
        os.environ["CRAWLER_MAX_PRODUCTS"] = str(max_products)
    if max_requests is not None:
        os.environ["CRAWLER_MAX_REQUESTS"] = str(max_requests)
    if output_dir is not None:
        os.environ["CRAWLER_OUTPUT_DIR"] = str(output_dir)
    if log_level is not None:
        os.environ["CRAWLER_LOG_LEVEL"] = log_level

    get_settings.cache_clear()
    settings = get_settings()
    setup_logging(settings.log_level)

    if settings.test_mode:
        log.info(f"Test mode: max {settings.max_products} products, {settings.max_requests} requests")
    return settings


@app.command("list")
def list_crawlers():
    """List registered crawlers"""
    registry = build_registry(get_settings())

    table = Table(title="Available Crawlers")
    table.add_column("Brand", style="cyan")
    table.add_column("Strategy", style="green")
    table.add_column("Pagination", style="yellow")

    for brand in registry.list_brands():
        definition = registry.get(brand).definition
        table.add_row(brand, definition.strategy.value, definition.pagination.value)

    console.print(table)


@app.command()
def run(
    brand: str = typer.Argument(..., help="Brand to crawl"),
    test: bool = TEST_OPTION,
    max_products: Optional[int] = MAX_PRODUCTS_OPTION,
    max_requests: Optional[int] = MAX_REQUESTS_OPTION,
    output_dir: Optional[Path] = OUTPUT_DIR_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION,
):
    """Run one brand's crawler"""
    settings = configure(test, max_products, max_requests, output_dir, log_level)
    registry = build_registry(settings)

    if not registry.has(brand):
        console.print(f"❌ Unknown crawler: {brand}", style="red")
        console.print(f"Available: {', '.join(registry.list_brands())}")
        raise typer.Exit(code=1)

    try:
        records = asyncio.run(registry.run(brand))
    except Exception as e:
        log.exception(f"Crawler '{brand}' failed: {e}")
        raise typer.Exit(code=1)

    write_products_json(records, brand, settings.output_dir)
    console.print(f"✅ {brand}: {len(records)} products", style="green")


@app.command("run-all")
def run_all(
    parallel: bool = typer.Option(False, "--parallel", "-p", help="Run brands concurrently"),
    test: bool = TEST_OPTION,
    max_products: Optional[int] = MAX_PRODUCTS_OPTION,
    max_requests: Optional[int] = MAX_REQUESTS_OPTION,
    output_dir: Optional[Path] = OUTPUT_DIR_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION,
):
    """Run every registered crawler"""
    settings = configure(test, max_products, max_requests, output_dir, log_level)
    registry = build_registry(settings)

    results = asyncio.run(registry.run_all(sequential=not parallel))

    table = Table(title="Crawl Summary")
    table.add_column("Brand", style="cyan")
    table.add_column("Products", justify="right")
    table.add_column("Status")

    for result in results:
        if result.ok:
            write_products_json(result.records, result.brand, settings.output_dir)
            table.add_row(result.brand, str(len(result.records)), "[green]ok[/green]")
        else:
            table.add_row(result.brand, "-", f"[red]{result.error}[/red]")

    console.print(table)


if __name__ == "__main__":
    app()
