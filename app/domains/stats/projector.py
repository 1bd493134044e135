"""
File: app/domains/stats/projector.py
Description: 排名与格式化投影 (Ranking & Formatting Projector)

职责：
1. 小组按 GMV 降序排列，GMV 相同按 group_id 升序 (确定性)
2. 组员按 GMV 降序排列，GMV 相同按 user_id 升序
3. 展示层取整：金额保留 2 位，比率/占比保留 2 位 (ROUND_HALF_UP)
4. 国家 -> 货币符号 (未配置的国家显式回落为 "$")

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from app.domains.stats.constants import (
    CURRENCY_SYMBOLS,
    DEFAULT_CURRENCY_SYMBOL,
    PeriodMode,
)
from app.domains.stats.schemas import (
    AggregationResult,
    GlobalSummary,
    GroupSummary,
    MemberSummary,
    OperationStatsResponse,
)

TWO_PLACES = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def currency_symbol(country_name: str | None) -> str:
    """国家名称 (中文或英文) -> 货币符号；未配置时回落为美元符号"""
    if not country_name:
        return DEFAULT_CURRENCY_SYMBOL
    return CURRENCY_SYMBOLS.get(country_name.strip(), DEFAULT_CURRENCY_SYMBOL)


def rank_members(members: Iterable[MemberSummary]) -> tuple[MemberSummary, ...]:
    return tuple(sorted(members, key=lambda m: (-m.revenue, m.user_id)))


def rank_groups(groups: Iterable[GroupSummary]) -> list[GroupSummary]:
    return sorted(groups, key=lambda g: (-g.revenue, g.group_id))


def _format_member(member: MemberSummary) -> MemberSummary:
    return member.model_copy(
        update={
            "revenue": round_money(member.revenue),
            "normal_rate": round_rate(member.normal_rate),
        }
    )


def _format_group(group: GroupSummary) -> GroupSummary:
    return group.model_copy(
        update={
            "revenue": round_money(group.revenue),
            "normal_rate": round_rate(group.normal_rate),
            "currency_symbol": currency_symbol(group.country_name),
            "members": tuple(_format_member(m) for m in rank_members(group.members)),
        }
    )


def _summary_currency(country: str | None, groups: list[GroupSummary]) -> str:
    # 未指定国家时，仅当所有小组同属一个国家才沿用该国货币
    if country:
        return currency_symbol(country)
    countries = {g.country_name for g in groups if g.country_name}
    if len(countries) == 1:
        return currency_symbol(countries.pop())
    return DEFAULT_CURRENCY_SYMBOL


def _format_summary(summary: GlobalSummary, symbol: str) -> GlobalSummary:
    reasons = {
        category: count.model_copy(
            update={"percentage": round_rate(count.percentage)}
        )
        for category, count in summary.violation_reasons.items()
    }
    return summary.model_copy(
        update={
            "total_revenue": round_money(summary.total_revenue),
            "normal_rate": round_rate(summary.normal_rate),
            "currency_symbol": symbol,
            "violation_reasons": reasons,
        }
    )


def project(
    result: AggregationResult,
    *,
    time_type: PeriodMode,
    period_key: int,
    country: str | None = None,
) -> OperationStatsResponse:
    """生成对外输出结构：summary + 排序后的小组 (含排序后的组员)"""
    ranked = rank_groups(result.groups.values())
    groups = [_format_group(g) for g in ranked]
    return OperationStatsResponse(
        time_type=time_type,
        period_key=period_key,
        summary=_format_summary(result.summary, _summary_currency(country, groups)),
        groups=groups,
    )
