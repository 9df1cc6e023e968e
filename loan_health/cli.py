"""Command-line interface for the Aave loan health engine."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .oracles import CoinGeckoOracle
from .services import LoanHealthService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="aave-loan-health",
        description="Aave loan health and carry metrics for a wallet",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    check_parser = sub.add_parser("check", help="Fetch loans and log their metrics")
    check_parser.add_argument(
        "wallet",
        nargs="?",
        default=None,
        help="Wallet address (default: every wallet in the config)",
    )
    check_parser.add_argument(
        "--loan",
        default=None,
        help="Only log the loan with this id",
    )

    prices_parser = sub.add_parser("prices", help="Fetch and log USD prices")
    prices_parser.add_argument("symbols", nargs="+", help="Tickers, e.g. ETH USDC")

    return parser


async def _check(config: AppConfig, args: argparse.Namespace) -> int:
    wallets = [args.wallet] if args.wallet else [w.address for w in config.wallets]
    if not wallets:
        logger.error("No wallet given and none configured")
        return 1

    service = LoanHealthService(config)
    exit_code = 0
    for wallet in wallets:
        try:
            await service.refresh(wallet)
        except Exception as e:
            logger.error("Failed to refresh %s: %s", wallet, e)
            exit_code = 1
            continue
        service.log_snapshot(args.loan)
    return exit_code


async def _prices(config: AppConfig, args: argparse.Namespace) -> int:
    oracle = CoinGeckoOracle(config.price_oracle.coingecko)
    prices = await oracle.fetch_prices(args.symbols)
    for symbol in args.symbols:
        price = prices.get(symbol.upper())
        if price is None:
            logger.warning("%s: no price", symbol.upper())
        else:
            logger.info("%s: $%.4f", symbol.upper(), price)
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "check":
        return await _check(config, args)
    if args.command == "prices":
        return await _prices(config, args)
    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
