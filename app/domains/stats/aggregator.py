"""
File: app/domains/stats/aggregator.py
Description: 聚合引擎 (Aggregation Engine)

将已完成范围过滤的账号-周期记录折叠为三级汇总：
全局 (GlobalSummary) -> 小组 (GroupSummary) -> 组员 (MemberSummary)。

规则：
1. 先按 group_id，再按 owner_user_id 分组
2. 组员：GMV/订单求和、账号计数、违规账号计数 (有违规 / 永久封禁)、正常率
3. 小组：组员求和 + 橱窗失效/登录失效计数；组长/国家取首条记录，
   不一致时发出 DataIntegrityWarning 并沿用首次出现的值
4. 全局：小组求和 + 违规分类计数与占比 (count / 违规账号数 * 100)

金额全程 Decimal；比率不在此取整 (由 projector 负责)。
空输入返回全零汇总；group_id 为空的记录归入哨兵小组 UNGROUPED_GROUP_ID。

Author: jinmozhe
Created: 2026-03-02
"""

import warnings
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from app.core.logging import logger
from app.domains.stats.classifier import tally
from app.domains.stats.constants import (
    UNGROUPED_GROUP_ID,
    UNGROUPED_GROUP_NAME,
    VIOLATION_DISPLAY_NAMES,
    VIOLATION_STATUSES,
    AccountStatus,
    ViolationCategory,
)
from app.domains.stats.exceptions import DataIntegrityWarning
from app.domains.stats.schemas import (
    AccountPeriodRecord,
    AggregationResult,
    GlobalSummary,
    GroupSummary,
    MemberSummary,
    ViolationCount,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# 需要在同一小组内保持一致的元数据字段: (汇总字段, 记录字段)
_GROUP_METADATA_FIELDS: tuple[tuple[str, str], ...] = (
    ("group_name", "group_name"),
    ("leader_name", "leader_name"),
    ("country_name", "country"),
)


def normal_rate(accounts: int, violations: int) -> Decimal:
    """(账号数 - 违规数) / 账号数 * 100；无账号时为 100"""
    if accounts == 0:
        return HUNDRED
    return Decimal(accounts - violations) / Decimal(accounts) * HUNDRED


def violation_share(count: int, total_violations: int) -> Decimal:
    """违规分类占比；无违规账号时为 0"""
    if total_violations == 0:
        return ZERO
    return Decimal(count) / Decimal(total_violations) * HUNDRED


# ------------------------------------------------------------------------------
# 请求内的临时累加器 (不外泄，最终冻结为只读汇总)
# ------------------------------------------------------------------------------


@dataclass
class _MemberTally:
    user_id: int
    username: str
    accounts: int = 0
    revenue: Decimal = ZERO
    orders: int = 0
    violations: int = 0

    def add(self, record: AccountPeriodRecord) -> None:
        self.accounts += 1
        self.revenue += record.revenue
        self.orders += record.orders
        if record.account_status in VIOLATION_STATUSES:
            self.violations += 1

    def freeze(self) -> MemberSummary:
        return MemberSummary(
            user_id=self.user_id,
            username=self.username,
            accounts=self.accounts,
            revenue=self.revenue,
            orders=self.orders,
            violations=self.violations,
            normal_rate=normal_rate(self.accounts, self.violations),
        )


@dataclass
class _GroupTally:
    group_id: int
    group_name: str | None
    leader_name: str | None
    country_name: str | None
    shop_expired: int = 0
    login_expired: int = 0
    members: dict[int, _MemberTally] = field(default_factory=dict)
    flagged: set[str] = field(default_factory=set)

    @classmethod
    def open(cls, group_id: int, record: AccountPeriodRecord) -> "_GroupTally":
        group_name = record.group_name or None
        if group_id == UNGROUPED_GROUP_ID and not group_name:
            group_name = UNGROUPED_GROUP_NAME
        return cls(
            group_id=group_id,
            group_name=group_name,
            leader_name=record.leader_name or None,
            country_name=record.country or None,
        )

    def check_metadata(self, record: AccountPeriodRecord) -> None:
        # 哨兵小组汇集的是互不相关的未分组账号
        if self.group_id == UNGROUPED_GROUP_ID:
            return

        for summary_field, record_field in _GROUP_METADATA_FIELDS:
            if summary_field in self.flagged:
                continue
            kept = getattr(self, summary_field)
            seen = getattr(record, record_field) or None
            if seen != kept:
                self.flagged.add(summary_field)
                logger.bind(
                    group_id=self.group_id,
                    field=summary_field,
                    kept=kept,
                    seen=seen,
                    account_id=record.account_id,
                ).warning("group_metadata_inconsistent")
                warnings.warn(
                    f"group {self.group_id}: inconsistent {summary_field} "
                    f"({kept!r} vs {seen!r}), keeping first-seen value",
                    DataIntegrityWarning,
                    stacklevel=3,
                )

    def add(self, record: AccountPeriodRecord) -> None:
        member = self.members.get(record.owner_user_id)
        if member is None:
            member = _MemberTally(
                user_id=record.owner_user_id, username=record.owner_username
            )
            self.members[record.owner_user_id] = member
        member.add(record)

        if record.account_status is AccountStatus.SHOP_EXPIRED:
            self.shop_expired += 1
        elif record.account_status is AccountStatus.LOGIN_EXPIRED:
            self.login_expired += 1

    def freeze(self) -> GroupSummary:
        members = tuple(member.freeze() for member in self.members.values())
        accounts = sum(m.accounts for m in members)
        violations = sum(m.violations for m in members)
        return GroupSummary(
            group_id=self.group_id,
            group_name=self.group_name,
            leader_name=self.leader_name,
            country_name=self.country_name,
            accounts=accounts,
            revenue=sum((m.revenue for m in members), ZERO),
            orders=sum(m.orders for m in members),
            violations=violations,
            shop_expired=self.shop_expired,
            login_expired=self.login_expired,
            normal_rate=normal_rate(accounts, violations),
            members=members,
        )


# ------------------------------------------------------------------------------
# 对外入口
# ------------------------------------------------------------------------------


def _violation_breakdown(
    records: list[AccountPeriodRecord], violation_accounts: int
) -> dict[ViolationCategory, ViolationCount]:
    counts = tally(records)
    breakdown: dict[ViolationCategory, ViolationCount] = {}
    for category in ViolationCategory:
        count = counts[category]
        # no_violation 不参与违规占比
        percentage = (
            ZERO
            if category is ViolationCategory.NO_VIOLATION
            else violation_share(count, violation_accounts)
        )
        breakdown[category] = ViolationCount(
            count=count,
            percentage=percentage,
            display_name=VIOLATION_DISPLAY_NAMES[category],
        )
    return breakdown


def aggregate(records: Iterable[AccountPeriodRecord]) -> AggregationResult:
    """
    折叠记录为全局汇总 + 按 group_id 索引的小组汇总 (保持首次出现顺序)。
    """
    snapshot = list(records)
    tallies: dict[int, _GroupTally] = {}

    for record in snapshot:
        group_id = (
            record.group_id if record.group_id is not None else UNGROUPED_GROUP_ID
        )
        group = tallies.get(group_id)
        if group is None:
            group = _GroupTally.open(group_id, record)
            tallies[group_id] = group
        else:
            group.check_metadata(record)
        group.add(record)

    groups = {group_id: group.freeze() for group_id, group in tallies.items()}

    total_accounts = sum(g.accounts for g in groups.values())
    violation_accounts = sum(g.violations for g in groups.values())

    summary = GlobalSummary(
        total_accounts=total_accounts,
        total_revenue=sum((g.revenue for g in groups.values()), ZERO),
        total_orders=sum(g.orders for g in groups.values()),
        violation_accounts=violation_accounts,
        shop_expired_accounts=sum(g.shop_expired for g in groups.values()),
        login_expired_accounts=sum(g.login_expired for g in groups.values()),
        normal_rate=normal_rate(total_accounts, violation_accounts),
        violation_reasons=_violation_breakdown(snapshot, violation_accounts),
    )

    logger.bind(
        records=len(snapshot),
        groups=len(groups),
        violation_accounts=violation_accounts,
    ).debug("stats_aggregated")

    return AggregationResult(summary=summary, groups=groups)
