"""
File: app/domains/stats/service.py
Description: 运营统计领域服务层

编排一次统计请求：
1. 解析周期 (默认日期 + 未来日期校验)
2. Repository 取数 (可按国家预筛)
3. 范围过滤 (按调用方角色)
4. 聚合 -> 投影 / 明细筛选 / 违规分类 / 月度对比

组长所属小组不存在 (ScopeNotFound) 时返回空汇总，不向前端报错。

Author: jinmozhe
Created: 2026-03-02
"""

from decimal import Decimal
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.logging import logger
from app.domains.stats.aggregator import ZERO, aggregate
from app.domains.stats.constants import (
    VIOLATION_DISPLAY_NAMES,
    CallerRole,
    ViolationCategory,
)
from app.domains.stats.exceptions import ScopeNotFound
from app.domains.stats.filters import apply_filters, to_item
from app.domains.stats.period import (
    default_period_date,
    ensure_not_future,
    parse_period_date,
    resolve_period,
    today_in,
)
from app.domains.stats.projector import (
    currency_symbol,
    project,
    round_money,
    round_rate,
)
from app.domains.stats.repository import AccountPeriodRepository
from app.domains.stats.schemas import (
    AccountPeriodRecord,
    BusinessDataQuery,
    BusinessDataResponse,
    BusinessDataStats,
    CallerContext,
    MonthlyHistoryItem,
    MonthlyHistoryQuery,
    MonthlyHistoryResponse,
    MonthlyPeriodTotal,
    OperationStatsQuery,
    OperationStatsResponse,
    PeriodInfo,
    PeriodListQuery,
    ResolvedPeriod,
    StatsPeriodQuery,
    ViolationCategoryItem,
    ViolationStatsQuery,
    ViolationStatsResponse,
    ViolationStatsSummary,
)
from app.domains.stats.scope import filter_by_scope


class StatsService:
    """
    运营统计业务逻辑类
    """

    def __init__(
        self,
        repo: AccountPeriodRepository,
        *,
        tz: ZoneInfo | None = None,
        allow_fallback: bool | None = None,
    ):
        self.repo = repo
        self.tz = tz or settings.stats_tz
        self.allow_fallback = (
            settings.LEADER_SCOPE_FALLBACK if allow_fallback is None else allow_fallback
        )

    # --------------------------------------------------------------------------
    # 内部编排
    # --------------------------------------------------------------------------

    def _resolve(
        self, query: StatsPeriodQuery, *, prefer_yesterday: bool
    ) -> ResolvedPeriod:
        today = today_in(self.tz)
        if query.date:
            selected = parse_period_date(query.time_type, query.date)
            ensure_not_future(query.time_type, selected, today)
        else:
            selected = default_period_date(
                query.time_type, today, prefer_yesterday=prefer_yesterday
            )
        return resolve_period(query.time_type, selected)

    async def _scoped_records(
        self,
        period: ResolvedPeriod,
        caller: CallerContext,
        country: str | None = None,
    ) -> list[AccountPeriodRecord]:
        return self._scope(await self.repo.list_records(period, country), caller)

    def _scope(
        self, records: list[AccountPeriodRecord], caller: CallerContext
    ) -> list[AccountPeriodRecord]:
        try:
            return filter_by_scope(records, caller, allow_fallback=self.allow_fallback)
        except ScopeNotFound:
            return []

    # --------------------------------------------------------------------------
    # 对外用例
    # --------------------------------------------------------------------------

    async def get_operation_stats(
        self, query: OperationStatsQuery, caller: CallerContext
    ) -> OperationStatsResponse:
        """运营看板：全局汇总 + 小组/组员排名 (按日默认今天)"""
        period = self._resolve(query, prefer_yesterday=False)
        records = await self._scoped_records(period, caller, query.country)

        response = project(
            aggregate(records),
            time_type=period.mode,
            period_key=period.period_key,
            country=query.country,
        )
        logger.bind(
            period_key=period.period_key,
            records=len(records),
            groups=len(response.groups),
        ).info("operation_stats_served")
        return response

    async def get_business_data(
        self, query: BusinessDataQuery, caller: CallerContext
    ) -> BusinessDataResponse:
        """商业数据：范围过滤后再做多条件筛选 (按日默认昨天)"""
        period = self._resolve(query, prefer_yesterday=True)
        records = apply_filters(
            await self._scoped_records(period, caller), query
        )

        summary = aggregate(records).summary
        stats = BusinessDataStats(
            total_accounts=summary.total_accounts,
            total_revenue=round_money(summary.total_revenue),
            total_orders=summary.total_orders,
            violation_accounts=summary.violation_accounts,
        )
        ranked = sorted(records, key=lambda r: (-r.revenue, r.account_id))
        return BusinessDataResponse(
            time_type=period.mode,
            period_key=period.period_key,
            stats=stats,
            items=[to_item(r) for r in ranked],
        )

    async def get_violation_stats(
        self, query: ViolationStatsQuery, caller: CallerContext
    ) -> ViolationStatsResponse:
        """违规统计：违规率 + 各违规分类 (不含无违规，按数量降序)"""
        period = self._resolve(query, prefer_yesterday=False)
        records = await self._scoped_records(period, caller, query.country)
        summary = aggregate(records).summary

        total = summary.total_accounts
        violated = summary.violation_accounts
        rate = (
            round_rate(Decimal(violated) * 100 / Decimal(total)) if total else ZERO
        )

        categories = [
            ViolationCategoryItem(
                category_key=category,
                category_name=VIOLATION_DISPLAY_NAMES[category],
                count=count.count,
                percentage=round_rate(count.percentage),
            )
            for category, count in summary.violation_reasons.items()
            if category is not ViolationCategory.NO_VIOLATION
        ]
        # sorted 稳定：数量相同时保持分类枚举顺序
        categories.sort(key=lambda item: -item.count)

        return ViolationStatsResponse(
            time_type=period.mode,
            period_key=period.period_key,
            summary=ViolationStatsSummary(
                total_accounts=total,
                violated_accounts=violated,
                normal_accounts=total - violated,
                violation_rate=rate,
            ),
            categories=categories,
        )

    async def list_periods(
        self, query: PeriodListQuery, caller: CallerContext
    ) -> list[PeriodInfo]:
        """
        可用周期 (新 -> 旧)，账号数按调用方范围统计。
        组长小组无数据时与其它接口一致：默认返回空列表，开启兜底时退回第一个小组。
        """
        mode, limit = query.time_type, query.limit

        if caller.role is CallerRole.ADMIN:
            return await self.repo.list_periods(mode, limit)

        if caller.role is CallerRole.MEMBER:
            return await self.repo.list_periods(
                mode, limit, owner_user_id=caller.user_id
            )

        periods = (
            await self.repo.list_periods(mode, limit, group_name=caller.group_name)
            if caller.group_name
            else []
        )
        if periods or not self.allow_fallback:
            return periods

        fallback_name = await self.repo.first_group_name(mode)
        logger.bind(
            group_name=caller.group_name, fallback_group=fallback_name
        ).warning("stats_scope_fallback")
        if fallback_name is None:
            return []
        return await self.repo.list_periods(mode, limit, group_name=fallback_name)

    async def get_monthly_history(
        self, query: MonthlyHistoryQuery, caller: CallerContext
    ) -> MonthlyHistoryResponse:
        """月度历史对比：多个月份的账号级经营数据 + 每月合计"""
        records = self._scope(
            await self.repo.list_monthly_records(query.month_periods), caller
        )

        by_month: dict[int, list[AccountPeriodRecord]] = {
            key: [] for key in query.month_periods
        }
        for record in records:
            if record.period_key in by_month:
                by_month[record.period_key].append(record)

        totals: list[MonthlyPeriodTotal] = []
        items: list[MonthlyHistoryItem] = []
        for month_period, month_records in by_month.items():
            totals.append(
                MonthlyPeriodTotal(
                    month_period=month_period,
                    accounts=len(month_records),
                    revenue=round_money(sum((r.revenue for r in month_records), ZERO)),
                    orders=sum(r.orders for r in month_records),
                    views=sum(r.views for r in month_records),
                    clicks=sum(r.clicks for r in month_records),
                )
            )
            ranked = sorted(month_records, key=lambda r: (-r.revenue, r.account_id))
            items.extend(
                MonthlyHistoryItem(
                    account_id=r.account_id,
                    account_name=r.account_name,
                    country=r.country,
                    group_name=r.group_name,
                    owner_user_id=r.owner_user_id,
                    owner_username=r.owner_username,
                    month_period=month_period,
                    revenue=round_money(r.revenue),
                    orders=r.orders,
                    views=r.views,
                    clicks=r.clicks,
                    currency_symbol=currency_symbol(r.country),
                )
                for r in ranked
            )

        logger.bind(
            month_periods=query.month_periods, records=len(records)
        ).info("monthly_history_served")
        return MonthlyHistoryResponse(
            month_periods=query.month_periods, totals=totals, items=items
        )
