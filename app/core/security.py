"""
File: app/core/security.py
Description: 安全工具模块 (JWT)

本模块负责：
1. JWT 签发: 生成携带角色声明 (role / group_name) 的 Access Token
2. JWT 解析: 校验签名、有效期与 Token 类型

登录与密码校验由外部认证服务负责，本服务只消费已签发的 Token。

Author: jinmozhe
Created: 2025-12-05
Updated: 2026-03-02 (Role claims, drop password hashing)
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.core.config import settings

ACCESS_TOKEN_TYPE = "access"


def _secret_key() -> str:
    # 静态检查器需要确定 secret_key 为 str
    secret_key = settings.SECRET_KEY
    if secret_key is None:
        raise ValueError("SECRET_KEY configuration is missing.")
    return secret_key


def create_access_token(
    subject: str | Any,
    *,
    role: str,
    username: str = "",
    group_name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    生成 JWT Access Token。

    Args:
        subject: 主体标识 (用户ID)
        role: 角色 (admin / leader / member)
        username: 用户名 (日志展示用)
        group_name: 所属小组名称 (组长/组员必填，管理员可空)
        expires_delta: 自定义过期时间差 (默认 ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        str: 编码后的 JWT 字符串
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    to_encode: dict[str, Any] = {
        "exp": expire,
        "sub": str(subject),
        "type": ACCESS_TOKEN_TYPE,
        "role": role,
        "username": username,
    }
    if group_name is not None:
        to_encode["group_name"] = group_name

    return jwt.encode(to_encode, _secret_key(), algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    解析并校验 Access Token，返回 claims。

    Raises:
        JWTError: 签名错误、已过期或 Token 类型不是 access
    """
    payload = jwt.decode(token, _secret_key(), algorithms=[settings.ALGORITHM])
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise JWTError("Unexpected token type")
    return payload
