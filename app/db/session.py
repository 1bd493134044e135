"""
File: app/db/session.py
Description: 数据库会话管理 (Async SQLAlchemy)

本模块负责：
1. 创建全局唯一的 AsyncEngine (基于 postgresql+asyncpg)
2. 配置连接池参数与 asyncpg 连接参数 (SSL、语句超时)，从 Settings 读取
3. 创建 AsyncSession 工厂 (AsyncSessionLocal)
4. 集成 orjson 用于 JSON 字段序列化
5. 提供引擎关闭函数用于优雅退出

统计接口只读，不在此开启事务自动提交。

Author: jinmozhe
Created: 2025-11-24
Updated: 2026-03-02 (asyncpg server settings)
"""

from typing import Any

import orjson
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings


def _orjson_serializer(obj: Any) -> str:
    # orjson 返回 bytes，SQLAlchemy 需要 str
    return orjson.dumps(obj).decode("utf-8")


def _orjson_deserializer(obj: str | bytes) -> Any:
    return orjson.loads(obj)


def _connect_args() -> dict[str, Any]:
    """asyncpg 连接参数：SSL 开关 + 服务端语句超时"""
    return {
        "ssl": settings.DB_SSL,
        "server_settings": {
            "statement_timeout": str(settings.DB_STATEMENT_TIMEOUT_MS),
            "application_name": settings.PROJECT_NAME,
        },
    }


# 1. 创建异步引擎 (创建时不连接数据库，首次取连接时才建立)
engine: AsyncEngine = create_async_engine(
    str(settings.SQLALCHEMY_DATABASE_URI),
    echo=settings.is_debug,
    pool_pre_ping=settings.DB_POOL_PRE_PING,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    json_serializer=_orjson_serializer,
    json_deserializer=_orjson_deserializer,
    connect_args=_connect_args(),
)

# 2. 创建异步会话工厂
# expire_on_commit=False: 避免 commit 后访问属性触发隐式 IO
AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def close_engine() -> None:
    """
    关闭数据库引擎，释放连接池资源。
    应在应用 lifespan 退出阶段调用。
    """
    await engine.dispose()
