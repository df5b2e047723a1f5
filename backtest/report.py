"""Strategy ranking, comparison narrative and plain-text report rendering."""

from __future__ import annotations

from collections.abc import Sequence

from backtest.contracts import StrategyReport

DCA_STRATEGY_ID = "dca"
PANIC_STRATEGY_ID = "panic_sell"

NO_COMPARISON_MESSAGE = "No comparable strategies to compare."
DCA_WINS_TEMPLATE = (
    "The DCA strategy beat the panic-selling strategy by {diff:.2f}%p.\n"
    "Cut down on impulsive trades and build the habit of sticking to your rules."
)
PANIC_WINS_TEMPLATE = (
    "In this scenario the stop-loss strategy came out ahead.\n"
    "Over the long run, rule-based investing is still the steadier path."
)


def rank_reports(reports: Sequence[StrategyReport]) -> list[StrategyReport]:
    """Sort reports by total return, best first.

    The sort is stable, so equal returns keep their registration order.
    """
    return sorted(reports, key=lambda r: r.total_return_pct, reverse=True)


def _find_report(reports: Sequence[StrategyReport], strategy_id: str) -> StrategyReport | None:
    for report in reports:
        if report.strategy_id == strategy_id:
            return report
    return None


def summary_comment(reports: Sequence[StrategyReport]) -> str:
    """Compare the DCA and panic-sell results in a short narrative.

    Args:
        reports: Reports from one run

    Returns:
        One of two fixed messages depending on which habit did better, or
        ``NO_COMPARISON_MESSAGE`` if either strategy is missing
    """
    dca = _find_report(reports, DCA_STRATEGY_ID)
    panic = _find_report(reports, PANIC_STRATEGY_ID)
    if dca is None or panic is None:
        return NO_COMPARISON_MESSAGE

    diff = dca.total_return_pct - panic.total_return_pct
    if diff > 0:
        return DCA_WINS_TEMPLATE.format(diff=diff)
    return PANIC_WINS_TEMPLATE


def format_currency(amount: int) -> str:
    """Format amount with thousands separators."""
    return f"{amount:,}"


def format_percentage(pct: float, precision: int = 2) -> str:
    """Format percentage with sign."""
    sign = "+" if pct > 0 else ""
    return f"{sign}{pct:.{precision}f}%"


def render_summary(reports: Sequence[StrategyReport], stock_name: str) -> str:
    """Render the per-strategy summary block.

    Args:
        reports: Reports in registration order
        stock_name: Instrument display name

    Returns:
        Multi-line summary text
    """
    lines = ["=== Habit Backtest Report ===", f"Instrument: {stock_name}"]
    if not reports:
        return "\n".join(lines)

    lines.append(f"Initial cash: {format_currency(reports[0].initial_cash)}")
    lines.append("")
    for report in reports:
        lines.append(f"[{report.name}]")
        lines.append(
            f"Final equity: {format_currency(report.final_equity)} | "
            f"Return: {report.total_return_pct:.2f}%"
        )
        lines.append(
            f"MDD: {report.max_drawdown_pct:.2f}% | Buys: {report.buy_count} | "
            f"Sells: {report.sell_count} | Shares: {report.final_shares} @ "
            f"{format_currency(report.avg_cost)}"
        )
        lines.append("")
    return "\n".join(lines).rstrip("\n")


def render_ranking(reports: Sequence[StrategyReport]) -> str:
    """Render the ranking line followed by the winner."""
    ranked = rank_reports(reports)
    if not ranked:
        return "Ranking: (no results)"

    entries = [
        f"{pos}. {r.name}({format_percentage(r.total_return_pct, precision=0)})"
        for pos, r in enumerate(ranked, start=1)
    ]
    return f"Ranking: {' '.join(entries)}\nWinner: {ranked[0].name}"
