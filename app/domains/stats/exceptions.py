"""
File: app/domains/stats/exceptions.py
Description: 运营统计领域异常与告警

1. InvalidPeriod: 统计周期无法解析 / 晚于今天 (400)
2. ScopeNotFound: 组长所属小组在候选数据中不存在 (领域内部信号，服务层捕获后返回空汇总，不映射 HTTP 错误码)
3. DataIntegrityWarning: 同一小组元数据不一致 (告警，不中断聚合)

Author: jinmozhe
Created: 2026-03-02
"""

from typing import Any

from app.core.exceptions import AppException
from app.domains.stats.constants import StatsErrorCode


class InvalidPeriod(AppException):
    """统计周期无效"""

    def __init__(self, message: str = "", data: Any = None):
        super().__init__(StatsErrorCode.INVALID_PERIOD, message=message, data=data)


class ScopeNotFound(Exception):
    """调用方声明的数据范围在候选集中不存在"""

    def __init__(self, group_name: str | None):
        super().__init__(f"scope not found: group_name={group_name!r}")
        self.group_name = group_name


class DataIntegrityWarning(UserWarning):
    """输入数据不一致 (如同一 group_id 的组长姓名不同)"""
