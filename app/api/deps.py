"""
File: app/api/deps.py
Description: 全局依赖注入定义 (DB Session + Authentication)

本模块负责：
1. 数据库会话管理 (get_db / DBSession)
2. JWT 鉴权与调用方身份提取 (get_caller_context / CurrentCaller)

调用方身份完全来自已验签的 JWT 声明，不查库、不读取任何全局状态。

Author: jinmozhe
Created: 2025-12-05
Updated: 2026-03-02 (Caller context from role claims)
"""

from collections.abc import AsyncGenerator, AsyncIterator
from typing import Annotated

from fastapi import Depends, Header
from jose import ExpiredSignatureError, JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.error_code import SystemErrorCode
from app.core.exceptions import AppException, UnauthorizedException
from app.core.logging import logger
from app.core.security import decode_access_token
from app.db.session import AsyncSessionLocal
from app.domains.stats.constants import CallerRole, StatsErrorCode
from app.domains.stats.schemas import CallerContext

# ------------------------------------------------------------------------------
# 1. Database Dependencies
# ------------------------------------------------------------------------------


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    获取异步数据库会话依赖。
    使用 async with 确保请求结束时自动关闭 session。
    """
    async with AsyncSessionLocal() as session:
        yield session


# 数据库会话依赖类型别名
DBSession = Annotated[AsyncSession, Depends(get_db)]


# ------------------------------------------------------------------------------
# 2. Authentication Dependencies (JWT 鉴权)
# ------------------------------------------------------------------------------


async def get_token_from_header(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """
    从 Authorization Header 提取 Bearer Token。
    格式要求: Authorization: Bearer <token>
    """
    if not authorization:
        raise UnauthorizedException(message="Missing Authorization Header")

    scheme, _, param = authorization.partition(" ")
    if scheme.lower() != "bearer" or not param:
        raise UnauthorizedException(message="Invalid Authentication Scheme")

    return param


async def get_caller_context(
    token: Annotated[str, Depends(get_token_from_header)],
) -> AsyncIterator[CallerContext]:
    """
    解析 JWT 并构造调用方身份。

    流程:
    1. 校验 JWT 签名、有效期与类型
    2. 提取 sub (user_id) / role / username / group_name
    3. 角色不在 admin / leader / member 之内时拒绝
    """
    # 1. JWT 解析与验签
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise AppException(SystemErrorCode.TOKEN_EXPIRED) from None
    except JWTError:
        # 使用 from None 截断异常链，避免暴露底层 jose 异常细节
        raise UnauthorizedException(message="Invalid Token") from None

    user_id = payload.get("sub")
    if user_id is None:
        raise UnauthorizedException(message="Invalid Token: missing sub")

    role = payload.get("role")
    # 声明值可能是任意 JSON 类型 (如列表)，先校验类型再做集合判断
    if not isinstance(role, str) or role not in {r.value for r in CallerRole}:
        raise AppException(StatsErrorCode.INVALID_ROLE, data={"role": role})

    # 2. 构造调用方身份
    try:
        caller = CallerContext(
            role=role,
            user_id=user_id,
            username=payload.get("username") or "",
            group_name=payload.get("group_name") or None,
        )
    except ValidationError:
        raise UnauthorizedException(message="Invalid Token: malformed claims") from None

    # 3. 调用方身份写入日志上下文 (同一请求内后续日志行都会携带)
    with logger.contextualize(caller_role=caller.role.value, caller_id=caller.user_id):
        yield caller


# 已登录调用方依赖
# 用法: async def endpoint(caller: CurrentCaller): ...
CurrentCaller = Annotated[CallerContext, Depends(get_caller_context)]

