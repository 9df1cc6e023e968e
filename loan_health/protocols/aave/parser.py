"""Pure parsing functions for Aave user reserves — no I/O."""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from ...models import AssetPosition, LoanPosition
from .units import base_units_to_decimal, bps_to_fraction, ray_to_fraction

MARKET_KEY = "marketName"


def resolve_price(
    token_symbol: str,
    prices: Mapping[str, float],
    token_aliases: Mapping[str, str] | None = None,
) -> float:
    """Resolve the price for a token, falling back to aliases."""
    price = prices.get(token_symbol, 0.0)
    if price == 0.0 and token_aliases and token_symbol in token_aliases:
        price = prices.get(token_aliases[token_symbol], 0.0)
    return price


def _reserve_meta(record: Mapping[str, Any]) -> Mapping[str, Any]:
    reserve = record.get("reserve")
    return reserve if isinstance(reserve, Mapping) else {}


def to_asset_position(
    record: Mapping[str, Any],
    amount: float,
    prices: Mapping[str, float],
    token_aliases: Mapping[str, str] | None = None,
) -> AssetPosition:
    """Build an AssetPosition for one side (supplied or borrowed) of a reserve."""
    reserve = _reserve_meta(record)
    symbol = str(reserve.get("symbol") or "").upper()

    return AssetPosition(
        symbol=symbol,
        address=str(reserve.get("underlyingAsset") or "").lower(),
        amount=amount,
        usd_price=resolve_price(symbol, prices, token_aliases),
        collateral_enabled=bool(record.get("usageAsCollateralEnabledOnUser", False)),
        max_ltv=bps_to_fraction(reserve.get("baseLTVasCollateral")),
        liq_threshold=bps_to_fraction(reserve.get("reserveLiquidationThreshold")),
        supply_rate=ray_to_fraction(reserve.get("liquidityRate")),
        borrow_rate=ray_to_fraction(reserve.get("variableBorrowRate")),
    )


def group_by_market(
    records: Iterable[Mapping[str, Any]],
) -> dict[str, list[Mapping[str, Any]]]:
    """Group reserve records by market tag, keeping first-appearance order."""
    groups: dict[str, list[Mapping[str, Any]]] = {}
    for record in records:
        groups.setdefault(str(record.get(MARKET_KEY, "")), []).append(record)
    return groups


def build_market_loans(
    market_name: str,
    records: list[Mapping[str, Any]],
    prices: Mapping[str, float],
    token_aliases: Mapping[str, str] | None = None,
) -> list[LoanPosition]:
    """Build one LoanPosition per positive debt within a single market."""
    supplied: list[AssetPosition] = []
    borrowed: list[AssetPosition] = []

    for record in records:
        decimals = _reserve_meta(record).get("decimals", 0)

        deposit = base_units_to_decimal(record.get("currentATokenBalance"), decimals)
        asset = to_asset_position(record, deposit, prices, token_aliases)
        if asset.amount > 0:
            supplied.append(asset)

        debt = base_units_to_decimal(record.get("currentTotalDebt"), decimals)
        asset = to_asset_position(record, debt, prices, token_aliases)
        if asset.amount > 0:
            borrowed.append(asset)

    collateral = tuple(a for a in supplied if a.collateral_enabled)
    collateral_usd = sum(a.usd_value for a in collateral)

    return [
        LoanPosition(
            loan_id=f"{market_name}-{debt_asset.address}-{index}",
            market_name=market_name,
            borrowed=debt_asset,
            supplied=collateral,
            total_supplied_usd=collateral_usd,
            total_borrowed_usd=debt_asset.usd_value,
        )
        for index, debt_asset in enumerate(borrowed)
    ]


def build_loan_positions(
    records: Iterable[Mapping[str, Any]],
    prices: Mapping[str, float],
    token_aliases: Mapping[str, str] | None = None,
) -> list[LoanPosition]:
    """Turn market-tagged user reserves into loan positions for one wallet.

    A market with deposits but no debt yields no loans.
    """
    loans: list[LoanPosition] = []
    for market_name, market_records in group_by_market(records).items():
        loans.extend(
            build_market_loans(market_name, market_records, prices, token_aliases)
        )
    return loans
