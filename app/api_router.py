"""
File: app/api_router.py
Description: 根 API 路由聚合层

本模块负责：
1. 聚合所有业务领域的 Router (当前仅 stats)
2. 统一设置路由前缀 (如 /stats)
3. 统一设置标签 (Tags) 用于 OpenAPI 文档分组

Author: jinmozhe
Created: 2025-12-05
Updated: 2026-03-02 (Stats Domain)
"""

from fastapi import APIRouter

from app.domains.stats.router import router as stats_router

# 创建根 API 路由
api_router = APIRouter()

# ------------------------------------------------------------------------------
# 注册领域路由
# ------------------------------------------------------------------------------

# 1. 运营统计模块 (Stats Domain)
# 包含：运营看板、商业数据、违规统计、可用周期
api_router.include_router(stats_router, prefix="/stats", tags=["运营统计"])
