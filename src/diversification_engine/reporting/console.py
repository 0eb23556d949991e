"""
Output Module
=============
Plain-text console report for a PortfolioAnalysis.

Include:
- print_analysis_summary: full report (scores, regions, opportunities, projection)
- print_opportunities: ranked opportunity table
"""

from typing import Sequence

from diversification_engine.models.portfolio import PortfolioAnalysis, RebalancingOpportunity

RISK_ICONS = {"LOW": "🟢", "MEDIUM": "🟡", "HIGH": "🔴"}


def print_opportunities(opportunities: Sequence[RebalancingOpportunity], hidden_count: int = 0) -> None:
    """Ranked opportunity table, with a "+N more" line when the list was capped."""
    if not opportunities:
        print("  No rebalancing move clears the materiality threshold.")
        return

    print(f"  {'#':<3} {'From':<10} {'To':<10} {'Delta':>7} {'Amount':>12} {'Savings/yr':>12}  Priority")
    for i, opp in enumerate(opportunities, 1):
        print(
            f"  {i:<3} {opp.from_token:<10} {opp.to_token:<10} "
            f"{opp.inflation_delta:>6.1f}% ${opp.suggested_amount:>11,.2f} "
            f"${opp.annual_savings:>11,.2f}  {opp.priority.value}"
        )
    if hidden_count > 0:
        print(f"  +{hidden_count} more")


def print_analysis_summary(analysis: PortfolioAnalysis) -> None:
    """
    Print the analysis in report form.

    Sections: overview, regional exposure, gaps, opportunities, projection,
    advice.
    """
    print("\n" + "=" * 70)
    print("              📊 PORTFOLIO DIVERSIFICATION REPORT")
    print("=" * 70)

    # === OVERVIEW ===
    risk_icon = RISK_ICONS.get(analysis.concentration_risk.value, "")
    print("\n📈 OVERVIEW")
    print("-" * 70)
    print(f"  Total value:              ${analysis.total_value:>14,.2f}")
    print(f"  Tokens / regions:         {analysis.token_count:>6} / {analysis.region_count}")
    print(f"  Diversification score:    {analysis.diversification_score:>6}/100 "
          f"({analysis.diversification_rating.value})")
    print(f"  Concentration risk:       {risk_icon} {analysis.concentration_risk.value} "
          f"(HHI {analysis.hhi:.3f})")
    print(f"  Weighted inflation risk:  {analysis.weighted_inflation_risk:>6.2f}%")
    if analysis.chains:
        print(f"  Chains:                   {', '.join(str(c) for c in sorted(analysis.chains))}")

    # === REGIONS ===
    if analysis.regional_exposure:
        print("\n🌍 REGIONAL EXPOSURE")
        print("-" * 70)
        for exposure in analysis.regional_exposure:
            bar = "█" * int(round(exposure.percentage / 5))
            print(f"  {exposure.region:<10} {exposure.percentage:>6.1f}%  {bar:<20} "
                  f"inflation {exposure.inflation_rate:.1f}%  [{', '.join(exposure.tokens)}]")

    # === GAPS ===
    print("\n🔎 GAPS")
    print("-" * 70)
    print(f"  Over-exposed:   {', '.join(analysis.over_exposed_regions) or '-'}")
    print(f"  Under-exposed:  {', '.join(analysis.under_exposed_regions) or '-'}")
    print(f"  Missing:        {', '.join(analysis.missing_regions) or '-'}")

    # === OPPORTUNITIES ===
    print("\n🔄 REBALANCING OPPORTUNITIES")
    print("-" * 70)
    hidden = max(0, analysis.total_opportunity_count - len(analysis.rebalancing_opportunities))
    print_opportunities(analysis.rebalancing_opportunities, hidden)

    # === PROJECTION ===
    projection = analysis.projection
    print(f"\n⏳ PROJECTION ({projection.timeframe})")
    print("-" * 70)
    print(f"  Current path:    ${projection.current_path_value:>14,.2f}  "
          f"(loses ${projection.purchasing_power_lost:,.2f})")
    print(f"  Optimized path:  ${projection.optimized_path_value:>14,.2f}")
    print(f"  Difference:      ${projection.difference:>14,.2f}")

    # === YIELD ===
    ys = analysis.yield_summary
    if ys.total_annual_yield or ys.total_inflation_cost:
        print("\n💰 YIELD VS INFLATION")
        print("-" * 70)
        print(f"  Annual yield:           ${ys.total_annual_yield:>12,.2f}  ({ys.avg_yield_rate:.2f}%)")
        print(f"  Annual inflation cost:  ${ys.total_inflation_cost:>12,.2f}")
        sign = "✅" if ys.is_net_positive else "⚠️"
        print(f"  Net:                    ${ys.net_annual_gain:>12,.2f}  {sign}")

    # === ADVICE ===
    print("\n💡 ADVICE")
    print("-" * 70)
    if analysis.goal_analysis is not None:
        print(f"  {analysis.goal_analysis.title}: {analysis.goal_analysis.description}")
    if analysis.recommended_action is not None:
        action = analysis.recommended_action
        print(f"  Recommended action: {action.kind}  {getattr(action, 'reasoning', '')}")
    for tip in analysis.diversification_tips:
        print(f"  • {tip}")

    print("=" * 70)
