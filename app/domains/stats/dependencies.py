"""
File: app/domains/stats/dependencies.py
Description: 运营统计领域依赖注入定义
Author: jinmozhe
Created: 2026-03-02
"""

from typing import Annotated

from fastapi import Depends

from app.api.deps import DBSession
from app.domains.stats.repository import AccountPeriodRepository
from app.domains.stats.service import StatsService


async def get_stats_repository(session: DBSession) -> AccountPeriodRepository:
    """初始化 Repository 实例 (测试中可整体替换为内存数据源)"""
    return AccountPeriodRepository(session)


async def get_stats_service(
    repo: Annotated[AccountPeriodRepository, Depends(get_stats_repository)],
) -> StatsService:
    """初始化 Service 实例"""
    return StatsService(repo)


# --- 强制标准：定义类型别名供 Router 使用 ---
StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]
