"""Text rendering helpers for report summaries."""

from __future__ import annotations

from ledger.application.period_metrics import Breakeven, PeriodMetrics
from ledger.application.reporting.metrics import fmt_count, fmt_money, fmt_pct, fmt_ratio


def report_overall_comment(metrics: PeriodMetrics, currency: str) -> str:
    if metrics.gross_profit > 0:
        state = "profitable"
    elif metrics.gross_profit < 0:
        state = "loss-making"
    else:
        state = "at breakeven"

    return (
        f"Sales {fmt_money(metrics.total_sales, currency)} from {fmt_count(metrics.total_orders_input)} orders "
        f"({fmt_count(metrics.total_units_sold_input)} units), {state} with gross profit "
        f"{fmt_money(metrics.gross_profit, currency)}. "
        f"Ad spend {fmt_money(metrics.total_ad_spend, currency)}, ROAS {fmt_ratio(metrics.roas)}, "
        f"ROI {fmt_pct(metrics.roi)}, CPO {fmt_money(metrics.cpo, currency, digits=2)}."
    )


def breakeven_comment(breakeven: Breakeven, currency: str) -> str:
    if not breakeven.is_achievable:
        return "Breakeven not achievable: unit margin is zero or negative."
    if breakeven.gap_sales <= 0:
        return f"Investment covered; breakeven at {fmt_count(breakeven.units)} units."
    return (
        f"Breakeven at {fmt_count(breakeven.units)} units; "
        f"{fmt_money(breakeven.gap_sales, currency)} ({fmt_pct(breakeven.gap_percent)}) of sales still needed."
    )
