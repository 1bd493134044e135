"""
File: app/db/models/__init__.py
Description: ORM 模型注册表

导入所有业务模型，确保 Base.metadata 完整 (建表 / 迁移脚本依赖此处)。
每新增一个 Model 文件，必须在此处导入。

Author: jinmozhe
Created: 2025-11-25
Updated: 2026-03-02 (Console models)
"""

from app.db.models.base import Base, IntIdModel, TimestampMixin
from app.db.models.organization import OpsGroup, OpsUser
from app.db.models.tiktok_account import (
    AccountDailyStat,
    AccountMonthlyStat,
    TikTokAccount,
)

__all__ = [
    # 基类
    "Base",
    "IntIdModel",
    "TimestampMixin",
    # 业务模型
    "OpsGroup",
    "OpsUser",
    "TikTokAccount",
    "AccountDailyStat",
    "AccountMonthlyStat",
]
