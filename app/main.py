"""
File: app/main.py
Description: FastAPI 应用入口与工厂函数

本模块负责：
1. 创建 FastAPI 应用实例 (设置默认响应类为 ORJSONResponse)
2. 管理应用生命周期 (lifespan): 启动日志、关闭数据库连接
3. 组装全局组件：中间件、异常处理器、路由
4. 提供健康检查接口 (/health，原始 JSON，不走统一信封)

Author: jinmozhe
Created: 2025-12-05
Updated: 2026-03-02 (Stats console, raw health check)
"""

import asyncio
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

# ------------------------------------------------------------------------------
# [Fix for Windows] asyncpg 在 Windows 下必须使用 SelectorEventLoop
# 必须在任何 asyncio 循环启动前执行 (放在顶部)
# ------------------------------------------------------------------------------
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from app.api_router import api_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.logging import logger, setup_logging
from app.core.middleware import register_middlewares
from app.core.response import ResponseModel
from app.db.session import close_engine

# 文档路径前缀 (不暴露默认的 /docs)
DOCS_PREFIX = "/pinjie"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    应用生命周期管理器。
    """
    # 1. 启动时：初始化日志系统
    setup_logging()
    logger.bind(
        environment=settings.ENVIRONMENT,
        stats_timezone=settings.STATS_TIMEZONE,
        leader_scope_fallback=settings.LEADER_SCOPE_FALLBACK,
    ).info("Application startup")

    yield

    # 2. 关闭时：释放数据库连接池
    await close_engine()


def create_app() -> FastAPI:
    """应用工厂函数"""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{DOCS_PREFIX}/openapi.json",
        docs_url=f"{DOCS_PREFIX}/docs",
        redoc_url=None,
        # 强制默认响应类为 ORJSONResponse
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # 1. 注册中间件 (CORS, RequestID, Logging)
    register_middlewares(app)

    # 2. 注册异常处理器
    register_exception_handlers(app)

    # 3. 挂载 API 路由
    app.include_router(api_router, prefix=settings.API_V1_STR)

    # 4. 挂载健康检查
    @app.get("/health", tags=["health"], summary="健康检查")
    async def health_check() -> dict[str, str]:
        """
        健康检查接口。
        供 K8s Probe / 负载均衡器使用，返回原始 JSON。
        """
        return {"status": "ok"}

    # 5. 根路由
    @app.get(
        "/",
        tags=["root"],
        summary="系统入口",
        response_model=ResponseModel[dict[str, str]],
    )
    async def root():
        """
        系统根路径：欢迎信息 + 文档与健康检查地址。
        """
        return ResponseModel.success(
            message=f"Welcome to {settings.PROJECT_NAME}",
            data={
                "status": "running",
                "docs_url": f"{DOCS_PREFIX}/docs",
                "health_url": "/health",
            },
        )

    return app


# 暴露给 Uvicorn 运行的应用实例
app = create_app()

if __name__ == "__main__":
    # 本地调试入口
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
