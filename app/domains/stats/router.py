"""
File: app/domains/stats/router.py
Description: 运营统计 HTTP 接口 (POST 模式)

接口清单 (挂载于 /api/v1/stats)：
- POST /operation-stats   运营看板 (全局 + 小组 + 组员)
- POST /business-data     商业数据明细 + 统计卡片
- POST /violation-stats   违规统计
- POST /periods           可用统计周期 (账号数按角色范围统计)
- POST /monthly-history   月度历史对比 (多个月份的账号级数据)

所有接口按 JWT 中的角色自动裁剪数据范围。

Author: jinmozhe
Created: 2026-03-02
"""

from fastapi import APIRouter, Request

from app.api.deps import CurrentCaller
from app.core.response import ResponseModel
from app.domains.stats.constants import StatsMsg
from app.domains.stats.dependencies import StatsServiceDep
from app.domains.stats.schemas import (
    BusinessDataQuery,
    BusinessDataResponse,
    MonthlyHistoryQuery,
    MonthlyHistoryResponse,
    OperationStatsQuery,
    OperationStatsResponse,
    PeriodInfo,
    PeriodListQuery,
    ViolationStatsQuery,
    ViolationStatsResponse,
)

router = APIRouter(tags=["stats"])


@router.post(
    "/operation-stats",
    response_model=ResponseModel[OperationStatsResponse],
    summary="运营统计看板",
)
async def get_operation_stats(
    request: Request,
    service: StatsServiceDep,
    caller: CurrentCaller,
    query: OperationStatsQuery,
) -> ResponseModel[OperationStatsResponse]:
    """
    全局汇总 + 按 GMV 排序的小组与组员。

    - **time_type**: day / month
    - **date**: 为空时按日默认今天，按月默认本月
    - **Empty State**: 组长所属小组无数据时返回全零汇总
    """
    data = await service.get_operation_stats(query, caller)
    return ResponseModel.for_request(
        request, data=data, message=StatsMsg.OPERATION_STATS_SUCCESS
    )


@router.post(
    "/business-data",
    response_model=ResponseModel[BusinessDataResponse],
    summary="商业数据明细",
)
async def get_business_data(
    request: Request,
    service: StatsServiceDep,
    caller: CurrentCaller,
    query: BusinessDataQuery,
) -> ResponseModel[BusinessDataResponse]:
    """
    账号级明细 (按 GMV 降序) 与统计卡片。按日默认昨天。
    """
    data = await service.get_business_data(query, caller)
    return ResponseModel.for_request(
        request, data=data, message=StatsMsg.BUSINESS_DATA_SUCCESS
    )


@router.post(
    "/violation-stats",
    response_model=ResponseModel[ViolationStatsResponse],
    summary="违规统计",
)
async def get_violation_stats(
    request: Request,
    service: StatsServiceDep,
    caller: CurrentCaller,
    query: ViolationStatsQuery,
) -> ResponseModel[ViolationStatsResponse]:
    data = await service.get_violation_stats(query, caller)
    return ResponseModel.for_request(
        request, data=data, message=StatsMsg.VIOLATION_STATS_SUCCESS
    )


@router.post(
    "/periods",
    response_model=ResponseModel[list[PeriodInfo]],
    summary="可用统计周期",
)
async def list_periods(
    request: Request,
    service: StatsServiceDep,
    caller: CurrentCaller,
    query: PeriodListQuery,
) -> ResponseModel[list[PeriodInfo]]:
    """有数据的周期键 (新 -> 旧)，供前端日期选择器使用；account_count 仅统计可见账号"""
    data = await service.list_periods(query, caller)
    return ResponseModel.for_request(
        request, data=data, message=StatsMsg.PERIODS_SUCCESS
    )


@router.post(
    "/monthly-history",
    response_model=ResponseModel[MonthlyHistoryResponse],
    summary="月度历史对比",
)
async def get_monthly_history(
    request: Request,
    service: StatsServiceDep,
    caller: CurrentCaller,
    query: MonthlyHistoryQuery,
) -> ResponseModel[MonthlyHistoryResponse]:
    """
    所选月份的账号级 GMV / 订单 / 浏览 / 点击，附每月合计。

    - **month_periods**: YYYYMM 列表 (1-24 个，重复值自动去重)
    """
    data = await service.get_monthly_history(query, caller)
    return ResponseModel.for_request(
        request, data=data, message=StatsMsg.MONTHLY_HISTORY_SUCCESS
    )
