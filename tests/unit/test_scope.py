"""
File: tests/unit/test_scope.py
Description: 数据范围过滤单元测试

重点验证隔离性：组长/组员视角下不会出现其他小组或其他用户的记录。

Author: jinmozhe
Created: 2026-03-02
"""

import pytest

from app.core.exceptions import AppException
from app.domains.stats.constants import CallerRole
from app.domains.stats.exceptions import ScopeNotFound
from app.domains.stats.schemas import CallerContext
from app.domains.stats.scope import filter_by_scope


@pytest.fixture
def records(make_record):
    return [
        make_record(group_id=1, group_name="A", owner_user_id=1),
        make_record(group_id=1, group_name="A", owner_user_id=2),
        make_record(group_id=2, group_name="B", owner_user_id=3),
        make_record(group_id=2, group_name="B", owner_user_id=3),
        make_record(group_id=None, group_name=None, owner_user_id=4),
    ]


def test_admin_sees_everything(records) -> None:
    caller = CallerContext(role=CallerRole.ADMIN, user_id=99)
    assert filter_by_scope(records, caller) == records


def test_leader_sees_only_own_group(records) -> None:
    caller = CallerContext(role=CallerRole.LEADER, user_id=10, group_name="B")

    scoped = filter_by_scope(records, caller)

    assert len(scoped) == 2
    assert all(r.group_name == "B" for r in scoped)


def test_member_sees_only_own_accounts(records) -> None:
    caller = CallerContext(role=CallerRole.MEMBER, user_id=3, group_name="B")

    scoped = filter_by_scope(records, caller)

    assert len(scoped) == 2
    assert all(r.owner_user_id == 3 for r in scoped)


def test_member_without_accounts_gets_nothing(records) -> None:
    caller = CallerContext(role=CallerRole.MEMBER, user_id=42)
    assert filter_by_scope(records, caller) == []


def test_scope_preserves_input_order(records) -> None:
    caller = CallerContext(role=CallerRole.LEADER, user_id=10, group_name="A")
    scoped = filter_by_scope(records, caller)
    assert [r.account_id for r in scoped] == [records[0].account_id, records[1].account_id]


def test_leader_unknown_group_raises(records) -> None:
    caller = CallerContext(role=CallerRole.LEADER, user_id=10, group_name="X")

    with pytest.raises(ScopeNotFound) as exc_info:
        filter_by_scope(records, caller)

    assert exc_info.value.group_name == "X"
    # 领域内部信号，不携带 HTTP 错误码
    assert not isinstance(exc_info.value, AppException)


def test_leader_without_group_claim_raises(records) -> None:
    caller = CallerContext(role=CallerRole.LEADER, user_id=10)
    with pytest.raises(ScopeNotFound):
        filter_by_scope(records, caller)


def test_leader_on_empty_input_returns_empty() -> None:
    caller = CallerContext(role=CallerRole.LEADER, user_id=10, group_name="X")
    assert filter_by_scope([], caller) == []


def test_leader_fallback_uses_first_group(records) -> None:
    """开启兜底时沿用旧行为：返回候选集中第一个小组的数据"""
    caller = CallerContext(role=CallerRole.LEADER, user_id=10, group_name="X")

    scoped = filter_by_scope(records, caller, allow_fallback=True)

    assert [r.group_name for r in scoped] == ["A", "A"]


def test_leader_fallback_without_named_groups(make_record) -> None:
    caller = CallerContext(role=CallerRole.LEADER, user_id=10, group_name="X")
    ungrouped = [make_record(group_id=None, group_name=None)]

    assert filter_by_scope(ungrouped, caller, allow_fallback=True) == []


@pytest.mark.parametrize("group_name", ["A", "B"])
def test_leader_isolation(records, group_name: str) -> None:
    caller = CallerContext(role=CallerRole.LEADER, user_id=10, group_name=group_name)
    scoped = filter_by_scope(records, caller)
    others = [r for r in records if r.group_name != group_name]

    assert scoped
    assert not any(r in scoped for r in others)
