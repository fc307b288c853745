"""CLI entry point for the Stock Price API."""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from data_pipeline.alpha_vantage_client import AlphaVantageClient
from data_providers.alpha_vantage import AlphaVantagePriceProvider
from data_providers.base import Interval, ProviderError
from stock_service.cache import MemoizingCache
from stock_service.config_manager import ConfigError, ConfigManager, StockServiceConfig
from stock_service.facade import StockFacade

logger = logging.getLogger("stock_service.cli")

INTERVAL_CHOICES = [interval.value.lower() for interval in Interval]


@dataclass
class AppContext:
    manager: ConfigManager
    config: StockServiceConfig


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def build_context(args: argparse.Namespace) -> AppContext:
    manager_kwargs: Dict[str, Path] = {}
    if args.defaults:
        manager_kwargs["default_path"] = Path(args.defaults)
    if args.settings:
        manager_kwargs["user_path"] = Path(args.settings)
    manager = ConfigManager(**manager_kwargs)
    config = manager.load(force_reload=True)
    return AppContext(manager=manager, config=config)


def build_facade(config: StockServiceConfig) -> StockFacade:
    settings = config.alpha_vantage
    client = AlphaVantageClient(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout_seconds,
        max_retries=settings.max_retries,
        backoff_seconds=settings.backoff_seconds,
    )
    return StockFacade(AlphaVantagePriceProvider(client), MemoizingCache())


def handle_fetch(args: argparse.Namespace, ctx: AppContext) -> int:
    facade = build_facade(ctx.config)
    interval = Interval(args.interval.upper())
    try:
        result = facade.get(interval, args.symbol)
    except ProviderError as exc:
        logger.error("Failed to fetch %s prices for %s: %s", interval.value, args.symbol, exc)
        return 1

    if args.json:
        print(json.dumps(result.as_dict(), indent=2, sort_keys=True))
        return 0

    series = result.to_series()
    if series.empty:
        logger.warning("No %s prices returned for %s", interval.value, args.symbol)
        return 0

    print(f"{result.symbol} {interval.value} ({len(series)} points)")
    print(series.tail(args.limit).to_string())
    return 0


def handle_serve(args: argparse.Namespace, ctx: AppContext) -> int:
    import uvicorn

    from stock_api.app import create_app
    from stock_api.config import DEFAULTS_PATH_ENV, SETTINGS_PATH_ENV
    from stock_api.dependencies import reset_dependencies

    # The app resolves settings through stock_api.config, so point it at the CLI's files.
    os.environ[DEFAULTS_PATH_ENV] = str(ctx.manager.default_path.resolve())
    os.environ[SETTINGS_PATH_ENV] = str(ctx.manager.user_path.resolve())
    reset_dependencies()

    host = args.host or ctx.config.server.host
    port = args.port or ctx.config.server.port
    logger.info("Starting Stock Price API on http://%s:%s", host, port)
    logger.info("Try: http://%s:%s/stock/daily?symbol=AAPL", host, port)
    # Reload mode needs an import string; the reloaded worker re-reads the paths above.
    app = "stock_api.app:app" if args.reload else create_app(ctx.config)
    uvicorn.run(app, host=host, port=port, reload=args.reload)
    return 0


def handle_show_config(_args: argparse.Namespace, ctx: AppContext) -> int:
    print(json.dumps(ctx.manager.to_dict(mask_secrets=True), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stock Price API CLI")
    parser.add_argument("--settings", type=Path, help="Path to user settings override JSON")
    parser.add_argument("--defaults", type=Path, help="Path to alternate default settings JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", help="Bind address (default: server.host from settings)")
    serve.add_argument("--port", type=int, help="Bind port (default: server.port from settings)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    serve.set_defaults(handler=handle_serve)

    fetch = subparsers.add_parser("fetch", help="Fetch one price series from the provider")
    fetch.add_argument("symbol", help="Ticker symbol, e.g. AAPL")
    fetch.add_argument("--interval", choices=INTERVAL_CHOICES, default="daily", help="Series granularity (default: daily)")
    fetch.add_argument("--limit", type=int, default=10, help="Most recent points to print (default: 10)")
    fetch.add_argument("--json", action="store_true", help="Print the full series as JSON")
    fetch.set_defaults(handler=handle_fetch)

    show_config = subparsers.add_parser("show-config", help="Print the resolved configuration")
    show_config.set_defaults(handler=handle_show_config)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if not hasattr(args, "handler"):
        parser.print_help()
        return 0

    try:
        ctx = build_context(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    return args.handler(args, ctx)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
