"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ETHEREUM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

DEFAULT_GATEWAY_URL = (
    "https://gateway-arbitrum.network.thegraph.com/api/{api_key}"
    "/subgraphs/id/{subgraph_id}"
)
DEFAULT_COINGECKO_URL = "https://api.coingecko.com/api/v3/simple/price"

DEFAULT_COINGECKO_IDS: dict[str, str] = {
    "ETH": "ethereum",
    "WETH": "weth",
    "WBTC": "wrapped-bitcoin",
    "USDC": "usd-coin",
    "USDT": "tether",
    "DAI": "dai",
    "LDO": "lido-dao",
    "LINK": "chainlink",
    "AAVE": "aave",
    "CRV": "curve-dao-token",
    "MKR": "maker",
    "UNI": "uniswap",
    "SNX": "havven",
    "BAL": "balancer",
}

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ThresholdsConfig:
    alert_health_factor: float = 1.5
    alert_ltv_ratio: float = 0.7
    deploy_rate: float = 0.0


@dataclass(frozen=True)
class WalletConfig:
    label: str = ""
    address: str = ""


@dataclass(frozen=True)
class MarketConfig:
    name: str = ""
    subgraph_id: str = ""
    fallback_endpoints: tuple[str, ...] = ()


DEFAULT_MARKETS: tuple[MarketConfig, ...] = (
    MarketConfig(
        name="proto_mainnet_v3",
        subgraph_id="Cd2gEDVeqnjBn1hSeqFMitw8Q1iiyV9FYUZkLNRcL87g",
        fallback_endpoints=(
            "https://api.thegraph.com/subgraphs/name/aave/protocol-v3",
        ),
    ),
    MarketConfig(
        name="proto_lido_v3",
        subgraph_id="5vxMbXRhG1oQr55MWC5j6qg78waWujx1wjeuEWDA6j3",
    ),
)


@dataclass(frozen=True)
class SubgraphConfig:
    api_key: str = ""
    gateway_url: str = DEFAULT_GATEWAY_URL
    timeout: int = 30
    page_size: int = 200


@dataclass(frozen=True)
class CoinGeckoConfig:
    url: str = DEFAULT_COINGECKO_URL
    api_key: str = ""
    ids: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COINGECKO_IDS))


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "coingecko"
    coingecko: CoinGeckoConfig = field(default_factory=CoinGeckoConfig)
    token_aliases: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AppConfig:
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    wallets: tuple[WalletConfig, ...] = ()
    subgraph: SubgraphConfig = field(default_factory=SubgraphConfig)
    markets: tuple[MarketConfig, ...] = DEFAULT_MARKETS
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_thresholds(raw: dict[str, Any]) -> ThresholdsConfig:
    return ThresholdsConfig(
        alert_health_factor=float(raw.get("alert_health_factor", 1.5)),
        alert_ltv_ratio=float(raw.get("alert_ltv_ratio", 0.7)),
        deploy_rate=float(raw.get("deploy_rate", 0.0)),
    )


def _build_wallets(raw: list[dict[str, Any]]) -> tuple[WalletConfig, ...]:
    return tuple(
        WalletConfig(label=w.get("label", ""), address=str(w.get("address", "")).strip())
        for w in raw
    )


def _build_subgraph(raw: dict[str, Any]) -> SubgraphConfig:
    return SubgraphConfig(
        api_key=raw.get("api_key", ""),
        gateway_url=raw.get("gateway_url", DEFAULT_GATEWAY_URL),
        timeout=int(raw.get("timeout", 30)),
        page_size=int(raw.get("page_size", 200)),
    )


def _build_markets(raw: list[dict[str, Any]] | None) -> tuple[MarketConfig, ...]:
    if raw is None:
        return DEFAULT_MARKETS
    return tuple(
        MarketConfig(
            name=m.get("name", ""),
            subgraph_id=m.get("subgraph_id", ""),
            fallback_endpoints=tuple(m.get("fallback_endpoints", [])),
        )
        for m in raw
    )


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    cg_raw = raw.get("coingecko", {})
    ids = cg_raw.get("ids")
    return PriceOracleConfig(
        provider=raw.get("provider", "coingecko"),
        coingecko=CoinGeckoConfig(
            url=cg_raw.get("url", DEFAULT_COINGECKO_URL),
            api_key=cg_raw.get("api_key", ""),
            ids=(
                {k.upper(): v for k, v in ids.items()}
                if ids is not None
                else dict(DEFAULT_COINGECKO_IDS)
            ),
        ),
        token_aliases={
            k.upper(): v.upper() for k, v in raw.get("token_aliases", {}).items()
        },
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        thresholds=_build_thresholds(raw.get("thresholds", {})),
        wallets=_build_wallets(raw.get("wallets", [])),
        subgraph=_build_subgraph(raw.get("subgraph", {})),
        markets=_build_markets(raw.get("markets")),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def is_valid_wallet(address: str) -> bool:
    return bool(ETHEREUM_ADDRESS_RE.match(address))


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.markets:
        raise ValueError("At least one market must be configured")

    names = [m.name for m in cfg.markets]
    for market in cfg.markets:
        if not market.name:
            raise ValueError("Every market needs a name")
        if names.count(market.name) > 1:
            raise ValueError(f"Duplicate market name '{market.name}'")

    for wallet in cfg.wallets:
        if not wallet.address:
            raise ValueError(f"Wallet '{wallet.label}' has no address")
        if not is_valid_wallet(wallet.address):
            raise ValueError(
                f"Wallet '{wallet.label}' has an invalid address '{wallet.address}'"
            )
