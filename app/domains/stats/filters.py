"""
File: app/domains/stats/filters.py
Description: 商业数据多条件筛选

在范围过滤之后执行，各条件为 AND 关系，未设置的条件不参与筛选：
- 账号名称: 忽略大小写的子串匹配
- 国家 / 账号状态 / 小组名称: 精确匹配
- 组员: owner_user_id 匹配
- 违规原因分类: account_category(record) 匹配 (与汇总分类计数同一口径)

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Iterable

from app.domains.stats.classifier import account_category
from app.domains.stats.projector import currency_symbol
from app.domains.stats.schemas import (
    AccountPeriodRecord,
    BusinessDataFilter,
    BusinessDataItem,
)


def matches(record: AccountPeriodRecord, criteria: BusinessDataFilter) -> bool:
    if criteria.account_name:
        needle = criteria.account_name.strip().lower()
        if needle not in record.account_name.lower():
            return False

    if criteria.country and record.country != criteria.country:
        return False

    if (
        criteria.account_status is not None
        and record.account_status is not criteria.account_status
    ):
        return False

    if criteria.group_name and record.group_name != criteria.group_name:
        return False

    if criteria.member_id is not None and record.owner_user_id != criteria.member_id:
        return False

    if (
        criteria.violation_category is not None
        and account_category(record) is not criteria.violation_category
    ):
        return False

    return True


def apply_filters(
    records: Iterable[AccountPeriodRecord], criteria: BusinessDataFilter
) -> list[AccountPeriodRecord]:
    return [record for record in records if matches(record, criteria)]


def to_item(record: AccountPeriodRecord) -> BusinessDataItem:
    """明细行：附带违规分类与货币符号"""
    return BusinessDataItem(
        **record.model_dump(),
        violation_category=account_category(record),
        currency_symbol=currency_symbol(record.country),
    )
