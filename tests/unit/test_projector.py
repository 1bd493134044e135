"""
File: tests/unit/test_projector.py
Description: 排名与格式化投影单元测试

Author: jinmozhe
Created: 2026-03-02
"""

from decimal import Decimal

import pytest

from app.domains.stats.aggregator import aggregate
from app.domains.stats.constants import DEFAULT_CURRENCY_SYMBOL, PeriodMode
from app.domains.stats.projector import (
    currency_symbol,
    project,
    rank_groups,
    round_money,
    round_rate,
)
from app.domains.stats.schemas import GroupSummary


@pytest.mark.parametrize(
    ("country", "symbol"),
    [("英国", "£"), ("Germany", "€"), ("泰国", "฿"), (" 美国 ", "$")],
)
def test_currency_symbol_mapping(country: str, symbol: str) -> None:
    assert currency_symbol(country) == symbol


@pytest.mark.parametrize("country", [None, "", "火星", "Atlantis"])
def test_unmapped_country_defaults_to_dollar(country) -> None:
    assert currency_symbol(country) == DEFAULT_CURRENCY_SYMBOL == "$"


def test_rounding_is_half_up() -> None:
    assert round_money(Decimal("1.005")) == Decimal("1.01")
    assert round_rate(Decimal("66.66666")) == Decimal("66.67")
    assert round_rate(Decimal("2.345")) == Decimal("2.35")


def test_group_ties_break_by_group_id() -> None:
    groups = [
        GroupSummary(group_id=3, revenue=Decimal("10")),
        GroupSummary(group_id=1, revenue=Decimal("10")),
        GroupSummary(group_id=2, revenue=Decimal("20")),
    ]

    first = rank_groups(groups)
    second = rank_groups(reversed(groups))

    assert [g.group_id for g in first] == [2, 1, 3]
    assert [g.group_id for g in second] == [2, 1, 3]


def test_member_ties_break_by_user_id(make_record) -> None:
    records = [
        make_record(owner_user_id=9, revenue=Decimal("10")),
        make_record(owner_user_id=4, revenue=Decimal("10")),
        make_record(owner_user_id=5, revenue=Decimal("30")),
    ]

    response = project(aggregate(records), time_type=PeriodMode.DAY, period_key=1)

    assert [m.user_id for m in response.groups[0].members] == [5, 4, 9]


def test_project_rounds_and_labels_currency(make_record) -> None:
    records = [
        make_record(group_id=1, group_name="UK", country="英国", revenue=Decimal("1.005")),
        make_record(group_id=2, group_name="US", country="美国", revenue=Decimal("2")),
    ]

    response = project(
        aggregate(records), time_type=PeriodMode.MONTH, period_key=202603
    )

    assert response.time_type is PeriodMode.MONTH
    assert response.period_key == 202603
    symbols = {g.group_name: g.currency_symbol for g in response.groups}
    assert symbols == {"UK": "£", "US": "$"}
    assert response.groups[1].revenue == Decimal("1.01")
    # 多国家混合时汇总货币回落为 $
    assert response.summary.currency_symbol == "$"


def test_summary_currency_follows_single_country(make_record) -> None:
    records = [make_record(country="英国"), make_record(country="英国")]
    response = project(aggregate(records), time_type=PeriodMode.DAY, period_key=1)
    assert response.summary.currency_symbol == "£"


def test_summary_currency_follows_query_country(make_record) -> None:
    response = project(
        aggregate([make_record(country="泰国")]),
        time_type=PeriodMode.DAY,
        period_key=1,
        country="泰国",
    )
    assert response.summary.currency_symbol == "฿"


def test_project_empty_result() -> None:
    response = project(aggregate([]), time_type=PeriodMode.DAY, period_key=20260301)

    assert response.groups == []
    assert response.summary.total_revenue == Decimal("0.00")
    assert response.summary.currency_symbol == "$"
