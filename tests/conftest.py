"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from loan_health.config import (
    AppConfig,
    CoinGeckoConfig,
    MarketConfig,
    PriceOracleConfig,
    SubgraphConfig,
    ThresholdsConfig,
    WalletConfig,
)
from loan_health.models import AssetPosition, LoanPosition

WALLET = "0x1111111111111111111111111111111111111111"
WETH_ADDRESS = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
USDC_ADDRESS = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WBTC_ADDRESS = "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599"


def make_asset(
    symbol: str = "WETH",
    amount: float = 10.0,
    usd_price: float = 3000.0,
    collateral_enabled: bool = True,
    max_ltv: float = 0.80,
    liq_threshold: float = 0.825,
    supply_rate: float = 0.02,
    borrow_rate: float = 0.0,
    address: str = WETH_ADDRESS,
) -> AssetPosition:
    return AssetPosition(
        symbol=symbol,
        address=address,
        amount=amount,
        usd_price=usd_price,
        collateral_enabled=collateral_enabled,
        max_ltv=max_ltv,
        liq_threshold=liq_threshold,
        supply_rate=supply_rate,
        borrow_rate=borrow_rate,
    )


def make_loan(
    borrowed: AssetPosition,
    supplied: tuple[AssetPosition, ...] = (),
    loan_id: str = "proto_mainnet_v3-0xdebt-0",
    market_name: str = "proto_mainnet_v3",
) -> LoanPosition:
    return LoanPosition(
        loan_id=loan_id,
        market_name=market_name,
        borrowed=borrowed,
        supplied=supplied,
        total_supplied_usd=sum(a.usd_value for a in supplied),
        total_borrowed_usd=borrowed.usd_value,
    )


def make_reserve(
    symbol: str,
    decimals: int,
    address: str,
    deposit: str = "0",
    debt: str = "0",
    collateral: bool = True,
    ltv_bps: str = "8000",
    lt_bps: str = "8250",
    liquidity_rate: str = "0",
    borrow_rate: str = "0",
    market: str | None = "proto_mainnet_v3",
) -> dict:
    record = {
        "currentATokenBalance": deposit,
        "currentTotalDebt": debt,
        "usageAsCollateralEnabledOnUser": collateral,
        "reserve": {
            "symbol": symbol,
            "decimals": decimals,
            "underlyingAsset": address,
            "baseLTVasCollateral": ltv_bps,
            "reserveLiquidationThreshold": lt_bps,
            "liquidityRate": liquidity_rate,
            "variableBorrowRate": borrow_rate,
        },
    }
    if market is not None:
        record["marketName"] = market
    return record


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def weth_collateral() -> AssetPosition:
    return make_asset()


@pytest.fixture()
def usdc_debt() -> AssetPosition:
    return make_asset(
        symbol="USDC",
        amount=15000.0,
        usd_price=1.0,
        collateral_enabled=False,
        max_ltv=0.75,
        liq_threshold=0.78,
        supply_rate=0.04,
        borrow_rate=0.05,
        address=USDC_ADDRESS,
    )


@pytest.fixture()
def scenario_a_loan(
    weth_collateral: AssetPosition, usdc_debt: AssetPosition
) -> LoanPosition:
    """10 WETH @ $3,000 backing a $15,000 USDC debt."""
    return make_loan(usdc_debt, (weth_collateral,))


# ---------------------------------------------------------------------------
# Raw subgraph data
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_prices() -> dict[str, float]:
    return {"WETH": 3000.0, "USDC": 1.0, "WBTC": 60000.0}


@pytest.fixture()
def sample_reserves() -> list[dict]:
    """Mainnet: WETH + WBTC collateral, USDC + WETH debt. Lido: deposits only."""
    return [
        make_reserve(
            "WETH", 18, WETH_ADDRESS,
            deposit="10000000000000000000",  # 10 WETH
            debt="1000000000000000000",  # 1 WETH
            liquidity_rate="20000000000000000000000000",  # 2%
            borrow_rate="30000000000000000000000000",  # 3%
        ),
        make_reserve(
            "USDC", 6, USDC_ADDRESS,
            debt="15000000000",  # 15,000 USDC
            collateral=False,
            ltv_bps="7500",
            lt_bps="7800",
            borrow_rate="50000000000000000000000000",  # 5%
        ),
        make_reserve(
            "WBTC", 8, WBTC_ADDRESS,
            deposit="50000000",  # 0.5 WBTC
            ltv_bps="7300",
            lt_bps="7800",
        ),
        make_reserve(
            "WETH", 18, WETH_ADDRESS,
            deposit="2000000000000000000",
            market="proto_lido_v3",
        ),
    ]


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_markets() -> tuple[MarketConfig, ...]:
    return (
        MarketConfig(
            name="proto_mainnet_v3",
            subgraph_id="SUBGRAPH_MAIN",
            fallback_endpoints=("https://fallback.example.com/main",),
        ),
        MarketConfig(name="proto_lido_v3", subgraph_id="SUBGRAPH_LIDO"),
    )


@pytest.fixture()
def sample_app_config(sample_markets: tuple[MarketConfig, ...]) -> AppConfig:
    return AppConfig(
        thresholds=ThresholdsConfig(),
        wallets=(WalletConfig(label="test-wallet", address=WALLET),),
        subgraph=SubgraphConfig(
            api_key="graph-key",
            gateway_url="https://gateway.example.com/{api_key}/{subgraph_id}",
            timeout=5,
        ),
        markets=sample_markets,
        price_oracle=PriceOracleConfig(
            coingecko=CoinGeckoConfig(
                url="https://coingecko.example.com/simple/price",
                ids={"WETH": "weth", "USDC": "usd-coin", "WBTC": "wrapped-bitcoin"},
            ),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    thresholds:
      alert_health_factor: 1.4
      alert_ltv_ratio: 0.65
      deploy_rate: 0.03
    wallets:
      - label: test-wallet
        address: "0x1111111111111111111111111111111111111111"
    subgraph:
      api_key: "graph-key"
      timeout: 10
      page_size: 100
    markets:
      - name: proto_mainnet_v3
        subgraph_id: "SUB1"
        fallback_endpoints: ["https://fallback.example.com"]
      - name: proto_lido_v3
        subgraph_id: "SUB2"
    price_oracle:
      provider: coingecko
      coingecko:
        url: "https://coingecko.example.com"
        api_key: "cg-key"
        ids: {eth: ethereum, USDC: usd-coin}
      token_aliases: {wsteth: eth}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
