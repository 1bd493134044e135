"""
File: app/domains/stats/scope.py
Description: 数据范围过滤 (Scope Filter)

按调用方角色裁剪候选记录：
- admin: 全量
- leader: 仅本小组 (group_name 相等)
- member: 仅本人名下账号 (owner_user_id 相等)

组长所属小组在候选集中不存在时，默认抛出 ScopeNotFound；
仅在显式开启 allow_fallback 时沿用旧版 "退回第一个小组" 的行为。

Author: jinmozhe
Created: 2026-03-02
"""

from collections.abc import Iterable

from app.core.logging import logger
from app.domains.stats.constants import CallerRole
from app.domains.stats.exceptions import ScopeNotFound
from app.domains.stats.schemas import AccountPeriodRecord, CallerContext


def _first_group_name(records: list[AccountPeriodRecord]) -> str | None:
    for record in records:
        if record.group_name:
            return record.group_name
    return None


def filter_by_scope(
    records: Iterable[AccountPeriodRecord],
    caller: CallerContext,
    *,
    allow_fallback: bool = False,
) -> list[AccountPeriodRecord]:
    """
    返回调用方有权查看的记录 (保持输入顺序)。

    Raises:
        ScopeNotFound: 组长的小组在非空候选集中不存在且未开启兜底
    """
    candidates = list(records)

    if caller.role is CallerRole.ADMIN:
        return candidates

    if caller.role is CallerRole.MEMBER:
        return [r for r in candidates if r.owner_user_id == caller.user_id]

    # 以下为组长
    if not candidates:
        return []

    group_name = caller.group_name
    scoped = (
        [r for r in candidates if r.group_name == group_name] if group_name else []
    )
    if scoped:
        return scoped

    if not allow_fallback:
        logger.bind(
            caller_id=caller.user_id, group_name=group_name
        ).warning("stats_scope_not_found")
        raise ScopeNotFound(group_name)

    fallback_name = _first_group_name(candidates)
    logger.bind(
        caller_id=caller.user_id,
        group_name=group_name,
        fallback_group=fallback_name,
    ).warning("stats_scope_fallback")

    if fallback_name is None:
        return []
    return [r for r in candidates if r.group_name == fallback_name]
