from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from newsscraper.cli.common import EXIT_EMPTY, EXIT_FAILED, exit_code_for, to_json
from newsscraper.core.config import ScraperSettings, load_settings
from newsscraper.core.errors import ScrapeError
from newsscraper.infra.logging import init_logging
from newsscraper.scrape.runner import NewsScraper
from newsscraper.scrape.selectors import build_registry

app = typer.Typer(help="newsscraper CLI: scrape list pages, extract articles, serve the API")

_CONFIG_OPTION = typer.Option(None, "--config", exists=True, dir_okay=False, readable=True)


def _echo(s: str) -> None:
    typer.echo(s)


def _settings(config: Optional[Path], **overrides) -> ScraperSettings:
    try:
        return load_settings(config, overrides)
    except ValueError as e:
        typer.secho(f"Invalid configuration: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=EXIT_FAILED)


def _scraper(settings: ScraperSettings) -> NewsScraper:
    try:
        return NewsScraper(settings)
    except ValueError as e:
        typer.secho(f"Invalid selectors: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=EXIT_FAILED)


def _fail(e: ScrapeError) -> None:
    code = exit_code_for(e)
    color = typer.colors.YELLOW if code == EXIT_EMPTY else typer.colors.RED
    typer.secho(e.message, fg=color, err=True)
    raise typer.Exit(code=code)


@app.command()
def scrape(
    url: str = typer.Argument(..., help="List page URL"),
    max_articles: Optional[int] = typer.Option(None, "--max-articles", min=1),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", min=1),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=1),
    deadline: Optional[float] = typer.Option(None, "--deadline", min=1, help="Total seconds"),
    selectors_file: Optional[Path] = typer.Option(None, "--selectors", dir_okay=False),
    stats: bool = typer.Option(False, "--stats/--no-stats", help="Include run counters"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Discover article links on a list page and print the extracted records as JSON."""
    init_logging()
    settings = _settings(
        config,
        max_articles=max_articles,
        concurrency=concurrency,
        timeout=timeout,
        request_deadline=deadline,
        selectors_file=str(selectors_file) if selectors_file else None,
    )
    scraper = _scraper(settings)
    try:
        result = scraper.scrape(url)
    except ScrapeError as e:
        _fail(e)
    finally:
        scraper.close()
    _echo(to_json(result.to_dict() if stats else {"news": result.to_dict()["news"]}))


@app.command()
def article(
    url: str = typer.Argument(..., help="Article URL"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Generic single-article extraction (no per-site selectors)."""
    init_logging()
    scraper = _scraper(_settings(config))
    try:
        summary = scraper.extract_single(url)
    except ScrapeError as e:
        _fail(e)
    finally:
        scraper.close()
    _echo(to_json(summary.to_dict()))


@app.command()
def selectors(
    host: str = typer.Argument("default", help="Hostname to look up"),
    selectors_file: Optional[Path] = typer.Option(None, "--selectors", dir_okay=False),
) -> None:
    """Print the selector profile used for HOST."""
    try:
        registry = build_registry(selectors_file)
    except ValueError as e:
        typer.secho(f"Invalid selectors: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=EXIT_FAILED)
    _echo(to_json(registry.profile_for(host).to_dict()))


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port", min=1, max=65535),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Run the HTTP API (development server)."""
    from newsscraper.api.app import create_app

    init_logging()
    settings = _settings(config, host=host, port=port)
    create_app(settings).run(host=settings.host, port=settings.port)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
