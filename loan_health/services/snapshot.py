"""Wallet refresh orchestration — acquisition in, immutable snapshot out."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..analytics.health import classify_health
from ..analytics.loan_metrics import compute_loan_metrics
from ..analytics.portfolio import summarize_portfolio
from ..config import AppConfig, is_valid_wallet
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.reserve_source import ReserveSource
from ..models import LoanMetrics, LoanPosition, PortfolioSummary, WalletSnapshot
from ..oracles.coingecko import CoinGeckoOracle
from ..protocols.aave.parser import build_loan_positions, resolve_price
from ..sources.aave_subgraph import AaveSubgraphSource

logger = logging.getLogger(__name__)


class LoanHealthService:
    """Builds wallet snapshots and serves metrics for the current one."""

    def __init__(
        self,
        config: AppConfig,
        source: ReserveSource | None = None,
        oracle: PriceOracle | None = None,
    ) -> None:
        self._config = config
        self._thresholds = config.thresholds
        self._token_aliases = dict(config.price_oracle.token_aliases)
        self._source: ReserveSource = source or AaveSubgraphSource(
            config.subgraph, config.markets
        )
        self._oracle: PriceOracle = oracle or CoinGeckoOracle(
            config.price_oracle.coingecko
        )
        self._snapshot: WalletSnapshot | None = None

    @property
    def snapshot(self) -> WalletSnapshot | None:
        return self._snapshot

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    @staticmethod
    def validate_wallet(address: str) -> str:
        """Return the trimmed address or raise ValueError."""
        normalized = address.strip()
        if not is_valid_wallet(normalized):
            raise ValueError(f"Not a valid Ethereum wallet address: '{address}'")
        return normalized

    async def refresh(self, wallet_address: str) -> WalletSnapshot:
        """Fetch reserves and prices and replace the current snapshot.

        The snapshot is swapped in only once every step has succeeded; on
        any error the previous snapshot is left untouched and the error
        propagates.
        """
        wallet = self.validate_wallet(wallet_address)

        reserves = await self._source.fetch_user_reserves(wallet)
        symbols = sorted(
            {
                str((r.get("reserve") or {}).get("symbol") or "").upper()
                for r in reserves
            }
            - {""}
        )
        # Aliased tickers resolve through their target ticker's price.
        wanted = sorted(
            set(symbols)
            | {self._token_aliases[s] for s in symbols if s in self._token_aliases}
        )
        prices = await self._oracle.fetch_prices(wanted)

        missing = [
            s for s in symbols
            if resolve_price(s, prices, self._token_aliases) == 0.0
        ]
        if missing:
            logger.warning("No USD price for %s; valued at $0", ", ".join(missing))

        loans = build_loan_positions(reserves, prices, self._token_aliases)
        snapshot = WalletSnapshot(
            wallet=wallet,
            loans=tuple(loans),
            last_updated=datetime.now(timezone.utc),
        )
        self._snapshot = snapshot
        logger.info("Found %d active loan position(s) for %s", len(loans), wallet)
        return snapshot

    # ------------------------------------------------------------------
    # Reads over the current snapshot
    # ------------------------------------------------------------------

    def select_loan(self, loan_id: str | None = None) -> LoanPosition | None:
        """The loan with ``loan_id``, else the first loan, else None."""
        if self._snapshot is None or not self._snapshot.loans:
            return None
        for loan in self._snapshot.loans:
            if loan.loan_id == loan_id:
                return loan
        return self._snapshot.loans[0]

    def _metrics_for(self, loan: LoanPosition | None) -> LoanMetrics:
        return compute_loan_metrics(
            loan,
            thresholds=self._thresholds,
        )

    def metrics(self, loan_id: str | None = None) -> LoanMetrics:
        """Metrics for the selected loan; the neutral record if none."""
        return self._metrics_for(self.select_loan(loan_id))

    def all_metrics(self) -> list[LoanMetrics]:
        if self._snapshot is None:
            return []
        return [self._metrics_for(loan) for loan in self._snapshot.loans]

    def portfolio(self) -> PortfolioSummary | None:
        return summarize_portfolio(self.all_metrics())

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def log_snapshot(self, loan_id: str | None = None) -> None:
        """Write a loan-by-loan summary of the current snapshot to the log."""
        snapshot = self._snapshot
        if snapshot is None:
            logger.info("No snapshot loaded")
            return

        logger.info("=" * 60)
        logger.info("WALLET %s (updated %s)", snapshot.wallet, snapshot.last_updated.isoformat())
        logger.info("=" * 60)

        if not snapshot.loans:
            logger.info("  No active loan positions found.")
            return

        selected = [self.select_loan(loan_id)] if loan_id else list(snapshot.loans)
        for loan in selected:
            m = self._metrics_for(loan)
            logger.info(
                "  %s · %s · borrowed %.4f %s",
                loan.loan_id, loan.market_name, loan.borrowed.amount, loan.borrowed.symbol,
            )
            for asset in loan.supplied:
                logger.info(
                    "    - %s: %.6f x $%.2f = $%.2f",
                    asset.symbol, asset.amount, asset.usd_price, asset.usd_value,
                )
            logger.info("    Collateral:      $%.2f", m.collateral_usd)
            logger.info("    Debt:            $%.2f", m.debt)
            logger.info("    LTV:             %.2f%% (max %.2f%%)", m.ltv * 100, m.ltv_max * 100)
            logger.info(
                "    Health Factor:   %.4f [%s]",
                m.health_factor, classify_health(m.health_factor).value,
            )
            logger.info(
                "    Liq. price:      $%.4f %s (drop %.1f%%)",
                m.liq_price, m.primary_symbol or "-",
                min(1.0, max(0.0, m.price_drop_to_liq)) * 100,
            )
            logger.info("    Net APY/equity:  %.2f%%", m.net_apy_on_equity * 100)
            if m.alert_hf:
                logger.warning("    Health factor below %.2f", self._thresholds.alert_health_factor)
            if m.alert_ltv:
                logger.warning(
                    "    LTV above %.0f%% of liquidation threshold",
                    self._thresholds.alert_ltv_ratio * 100,
                )

        summary = self.portfolio()
        if summary is not None:
            logger.info("-" * 60)
            logger.info("  Loans:            %d", summary.loan_count)
            logger.info("  Total debt:       $%.2f", summary.total_debt)
            logger.info("  Total collateral: $%.2f", summary.total_collateral)
            logger.info("  Net worth:        $%.2f", summary.total_net_worth)
            logger.info("  Avg HF:           %.4f", summary.average_health_factor)
            logger.info("  Net APY:          %.2f%%", summary.portfolio_net_apy * 100)
        logger.info("=" * 60)
