"""
File: app/domains/stats/repository.py
Description: 运营统计数据访问层

将 账号 + 周期经营数据 + 归属用户 + 小组 联表展开为 AccountPeriodRecord。
- 日度数据来自 account_daily_stat.day_period
- 月度数据来自 account_monthly_stat.month_period (支持多月对比)
- 用户未分配小组时 group 字段为空 (LEFT JOIN)

本层只读，不做聚合；范围规则由服务层决定，本层只拼装对应的查询条件。

Author: jinmozhe
Created: 2026-03-02
"""

from pydantic import ValidationError
from sqlalchemy import Select, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import logger
from app.db.models.organization import OpsGroup, OpsUser
from app.db.models.tiktok_account import (
    AccountDailyStat,
    AccountMonthlyStat,
    TikTokAccount,
)
from app.domains.stats.constants import PeriodMode
from app.domains.stats.schemas import AccountPeriodRecord, PeriodInfo, ResolvedPeriod

_STAT_MODELS = {
    PeriodMode.DAY: (AccountDailyStat, AccountDailyStat.day_period),
    PeriodMode.MONTH: (AccountMonthlyStat, AccountMonthlyStat.month_period),
}


class AccountPeriodRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _records_stmt(
        self, mode: PeriodMode, period_keys: list[int], country: str | None
    ) -> Select:
        stat, period_column = _STAT_MODELS[mode]
        stmt = (
            select(
                TikTokAccount.id.label("account_id"),
                TikTokAccount.tiktok_name.label("account_name"),
                TikTokAccount.country.label("country"),
                OpsUser.group_id.label("group_id"),
                OpsGroup.name.label("group_name"),
                OpsGroup.leader_name.label("leader_name"),
                TikTokAccount.owner_user_id.label("owner_user_id"),
                OpsUser.username.label("owner_username"),
                stat.revenue.label("revenue"),
                stat.orders.label("orders"),
                stat.views.label("views"),
                stat.clicks.label("clicks"),
                TikTokAccount.account_status.label("account_status"),
                TikTokAccount.last_violation_reason.label("violation_reason"),
                period_column.label("period_key"),
            )
            .select_from(stat)
            .join(TikTokAccount, TikTokAccount.id == stat.account_id)
            .join(OpsUser, OpsUser.id == TikTokAccount.owner_user_id)
            .outerjoin(OpsGroup, OpsGroup.id == OpsUser.group_id)
            .where(period_column.in_(period_keys))
        )
        if country:
            stmt = stmt.where(TikTokAccount.country == country)
        # 按账号ID排序，保证同一份数据的聚合输入顺序稳定
        return stmt.order_by(TikTokAccount.id, desc(period_column))

    async def _fetch_records(self, stmt: Select) -> list[AccountPeriodRecord]:
        """无法通过输入契约校验的脏数据跳过并告警，不中断整次统计"""
        result = await self.session.execute(stmt)

        records: list[AccountPeriodRecord] = []
        for row in result.mappings():
            try:
                records.append(AccountPeriodRecord.model_validate(dict(row)))
            except ValidationError as exc:
                logger.bind(
                    account_id=row["account_id"],
                    period_key=row["period_key"],
                    errors=exc.errors(include_url=False, include_input=False),
                ).warning("stats_record_rejected")
        return records

    async def list_records(
        self, period: ResolvedPeriod, country: str | None = None
    ) -> list[AccountPeriodRecord]:
        """获取指定周期的全部账号记录 (可按国家预筛)"""
        return await self._fetch_records(
            self._records_stmt(period.mode, [period.period_key], country)
        )

    async def list_monthly_records(
        self, month_periods: list[int]
    ) -> list[AccountPeriodRecord]:
        """获取多个月份的账号记录 (月度历史对比)"""
        if not month_periods:
            return []
        return await self._fetch_records(
            self._records_stmt(PeriodMode.MONTH, month_periods, None)
        )

    async def list_periods(
        self,
        mode: PeriodMode,
        limit: int = 60,
        *,
        owner_user_id: int | None = None,
        group_name: str | None = None,
    ) -> list[PeriodInfo]:
        """
        有数据的周期列表 (新 -> 旧)。
        owner_user_id / group_name 用于按调用方范围统计账号数。
        """
        stat, period_column = _STAT_MODELS[mode]
        stmt = select(
            period_column.label("period_key"),
            func.count(func.distinct(stat.account_id)).label("account_count"),
        ).select_from(stat)

        if owner_user_id is not None or group_name is not None:
            stmt = stmt.join(TikTokAccount, TikTokAccount.id == stat.account_id)
        if owner_user_id is not None:
            stmt = stmt.where(TikTokAccount.owner_user_id == owner_user_id)
        if group_name is not None:
            stmt = (
                stmt.join(OpsUser, OpsUser.id == TikTokAccount.owner_user_id)
                .join(OpsGroup, OpsGroup.id == OpsUser.group_id)
                .where(OpsGroup.name == group_name)
            )

        stmt = stmt.group_by(period_column).order_by(desc(period_column)).limit(limit)
        result = await self.session.execute(stmt)
        return [PeriodInfo.model_validate(dict(row)) for row in result.mappings()]

    async def first_group_name(self, mode: PeriodMode) -> str | None:
        """账号ID最小的已分组账号所属小组 (组长范围兜底)"""
        stat, _ = _STAT_MODELS[mode]
        stmt = (
            select(OpsGroup.name)
            .select_from(stat)
            .join(TikTokAccount, TikTokAccount.id == stat.account_id)
            .join(OpsUser, OpsUser.id == TikTokAccount.owner_user_id)
            .join(OpsGroup, OpsGroup.id == OpsUser.group_id)
            .order_by(TikTokAccount.id)
            .limit(1)
        )
        return await self.session.scalar(stmt)
