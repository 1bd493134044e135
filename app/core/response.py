"""
File: app/core/response.py
Description: 统一响应信封（Unified Response Envelope）模型与辅助函数

所有 HTTP 接口 (健康检查除外) 必须遵循此契约返回数据：
{code, message, data, request_id, timestamp}

Author: jinmozhe
Created: 2025-11-24
Updated: 2026-03-02 (Add for_request helper)
"""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar, cast

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ResponseBase(BaseModel):
    """
    响应基类
    """

    model_config = ConfigDict(from_attributes=True)

    code: str = Field(default="success", description="业务状态码")
    message: str = Field(default="Success", description="响应消息")
    request_id: str | None = Field(default=None, description="请求追踪ID")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="响应生成时间",
    )


class ResponseModel(ResponseBase, Generic[T]):
    """
    统一响应信封
    """

    data: T | None = Field(default=None, description="业务数据")

    @classmethod
    def success(
        cls,
        data: T | None = None,
        message: str = "Success",
        request_id: str | None = None,
    ) -> "ResponseModel[T]":
        """
        构造成功响应
        """
        # 强制将 Pydantic 模型转换为 JSON 安全的字典 (Decimal -> float 等序列化规则在此生效)
        if hasattr(data, "model_dump"):
            data = cast(Any, data).model_dump(mode="json")

        return cls(
            code="success",
            message=message,
            data=data,
            request_id=request_id,
        )

    @classmethod
    def for_request(
        cls,
        request: Request,
        data: T | None = None,
        message: str = "Success",
    ) -> "ResponseModel[T]":
        """
        构造成功响应，并自动携带中间件注入的 request_id
        """
        return cls.success(
            data=data,
            message=message,
            request_id=getattr(request.state, "request_id", None),
        )

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        data: Any = None,
        request_id: str | None = None,
    ) -> "ResponseModel[Any]":
        """
        构造失败响应
        """
        return cls(
            code=code,
            message=message,
            data=data,
            request_id=request_id,
        )
