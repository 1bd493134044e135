"""
File: app/core/exceptions.py
Description: 业务异常类与全局异常处理器

1. 业务异常基类（AppException）接受 BaseErrorCode 枚举
2. 鉴权失败的快捷子类 (UnauthorizedException)
3. 全局异常处理器自动将异常映射为：语义化 HTTP 状态码 + 字符串业务码
4. 使用 ResponseModel.fail() 构造统一的失败响应信封

Author: jinmozhe
Created: 2025-11-24
Updated: 2026-03-02 (Auth shortcut exceptions)
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.error_code import BaseErrorCode, SystemErrorCode
from app.core.logging import logger
from app.core.response import ResponseModel

# ------------------------------------------------------------------------------
# 1. 自定义业务异常类
# ------------------------------------------------------------------------------


class AppException(Exception):
    """
    应用基础异常类。

    用法示例:
        raise AppException(StatsErrorCode.INVALID_PERIOD)
        raise AppException(SystemErrorCode.UNAUTHORIZED, message="Invalid Token")
    """

    def __init__(
        self,
        error: BaseErrorCode,
        message: str = "",
        data: Any = None,
    ):
        self.error = error
        self.http_status = error.http_status
        self.code = error.code
        self.message = message or error.msg
        self.data = data
        super().__init__(self.message)


class UnauthorizedException(AppException):
    """身份认证失败 (401)"""

    def __init__(self, message: str = "", data: Any = None):
        super().__init__(SystemErrorCode.UNAUTHORIZED, message=message, data=data)


# ------------------------------------------------------------------------------
# 2. 辅助函数
# ------------------------------------------------------------------------------


def _get_request_id(request: Request) -> str:
    """尝试从 request.state 获取 request_id，如果不存在则返回 'unknown'"""
    return str(getattr(request.state, "request_id", "unknown"))


# ------------------------------------------------------------------------------
# 3. 全局异常处理器 (Handlers)
# ------------------------------------------------------------------------------


async def app_exception_handler(request: Request, exc: AppException) -> ORJSONResponse:
    """
    处理自定义业务异常 (AppException)
    直接映射为定义好的 HTTP 状态码和 Code
    """
    request_id = _get_request_id(request)

    logger.bind(
        request_id=request_id,
        code=exc.code,
        http_status=exc.http_status,
        message=exc.message,
    ).warning("Business exception occurred")

    response_model = ResponseModel.fail(
        code=exc.code,
        message=exc.message,
        data=exc.data,
        request_id=request_id,
    )

    return ORJSONResponse(
        status_code=exc.http_status,
        content=response_model.model_dump(mode="json"),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    """
    处理 Pydantic 校验异常 (FastAPI 默认抛出 422)
    映射目标: HTTP 400 Bad Request / Code: system.invalid_params
    """
    request_id = _get_request_id(request)

    errors = exc.errors()
    first_error = errors[0] if errors else {}

    # loc 示例: ('body', 'time_type')
    loc = first_error.get("loc", [])
    field_name = str(loc[-1]) if loc else "unknown"
    msg = first_error.get("msg", "Invalid parameter")

    readable_message = f"{field_name}: {msg}"

    logger.bind(
        request_id=request_id,
        detail=readable_message,
    ).warning("Request validation failed")

    # 原始错误中可能包含不可序列化的 ctx (如 ValueError 实例)，只保留关键字段
    safe_errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]

    response_model = ResponseModel.fail(
        code=SystemErrorCode.INVALID_PARAMS.code,
        message=readable_message,
        data={"errors": safe_errors},
        request_id=request_id,
    )

    return ORJSONResponse(
        status_code=SystemErrorCode.INVALID_PARAMS.http_status,
        content=response_model.model_dump(mode="json"),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> ORJSONResponse:
    """
    处理框架层面的 HTTP 异常 (如 404 Not Found, 405 Method Not Allowed)
    """
    request_id = _get_request_id(request)

    code_str = (
        SystemErrorCode.NOT_FOUND.code
        if exc.status_code == 404
        else "system.http_error"
    )

    logger.bind(
        request_id=request_id,
        status_code=exc.status_code,
        detail=str(exc.detail),
    ).warning("Framework HTTP exception occurred")

    response_model = ResponseModel.fail(
        code=code_str,
        message=str(exc.detail),
        request_id=request_id,
    )

    return ORJSONResponse(
        status_code=exc.status_code,
        content=response_model.model_dump(mode="json"),
    )


async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> ORJSONResponse:
    """
    处理数据库异常 (连接失败、语句超时等)
    屏蔽 SQL 细节，返回 system.db_error
    """
    request_id = _get_request_id(request)

    logger.opt(exception=exc).bind(request_id=request_id).error(
        "Database exception occurred"
    )

    response_model = ResponseModel.fail(
        code=SystemErrorCode.DB_ERROR.code,
        message=SystemErrorCode.DB_ERROR.msg,
        request_id=request_id,
    )

    return ORJSONResponse(
        status_code=SystemErrorCode.DB_ERROR.http_status,
        content=response_model.model_dump(mode="json"),
    )


async def general_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """
    处理所有未捕获的异常 (500 Internal Server Error)
    屏蔽内部细节，返回通用系统错误
    """
    request_id = _get_request_id(request)

    logger.opt(exception=exc).bind(request_id=request_id).error(
        "Unhandled system exception occurred"
    )

    response_model = ResponseModel.fail(
        code=SystemErrorCode.INTERNAL_ERROR.code,
        message=SystemErrorCode.INTERNAL_ERROR.msg,
        request_id=request_id,
    )

    return ORJSONResponse(
        status_code=SystemErrorCode.INTERNAL_ERROR.http_status,
        content=response_model.model_dump(mode="json"),
    )


# ------------------------------------------------------------------------------
# 4. 异常处理器注册函数
# ------------------------------------------------------------------------------


def register_exception_handlers(app: FastAPI) -> None:
    """
    统一注册所有异常处理器。
    应在 main.py 中调用。
    """
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore

    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore

    app.add_exception_handler(SQLAlchemyError, database_exception_handler)  # type: ignore

    app.add_exception_handler(Exception, general_exception_handler)
