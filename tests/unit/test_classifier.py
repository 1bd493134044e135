"""
File: tests/unit/test_classifier.py
Description: 违规原因分类单元测试

Author: jinmozhe
Created: 2026-03-02
"""

import pytest

from app.domains.stats.classifier import (
    account_category,
    classify,
    classify_violation_record,
    tally,
)
from app.domains.stats.constants import ViolationCategory


@pytest.mark.parametrize(
    ("reason", "expected"),
    [
        ("非原创内容", ViolationCategory.UNORIGINAL_CONTENT),
        ("视频与内容不符", ViolationCategory.CONTENT_MISMATCH),
        ("未经授权使用", ViolationCategory.UNAUTHORIZED_USE),
        ("关联封号", ViolationCategory.ASSOCIATION_BAN),
        ("其它违规", ViolationCategory.OTHER_VIOLATION),
        ("其他违规", ViolationCategory.OTHER_VIOLATION),
        ("  非原创内容\n", ViolationCategory.UNORIGINAL_CONTENT),
    ],
)
def test_known_phrases(reason: str, expected: ViolationCategory) -> None:
    assert classify(reason) is expected


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_empty_reason_is_no_violation(reason) -> None:
    assert classify(reason) is ViolationCategory.NO_VIOLATION


def test_unknown_phrase_defaults_to_other() -> None:
    # 新出现的违规措辞不会被静默丢弃
    assert classify("涉嫌刷单") is ViolationCategory.OTHER_VIOLATION


def test_violating_record_without_reason_counts_as_other(make_record) -> None:
    record = make_record(account_status="有违规", violation_reason=None)
    assert classify_violation_record(record) is ViolationCategory.OTHER_VIOLATION


def test_tally_covers_every_category(make_record) -> None:
    records = [
        make_record(account_status="有违规", violation_reason="非原创内容"),
        make_record(account_status="永久封禁", violation_reason="关联封号"),
        make_record(account_status="正常"),
        # 非违规状态即使残留原因文本也计入无违规
        make_record(account_status="正常", violation_reason="非原创内容"),
    ]

    counts = tally(records)

    assert set(counts) == set(ViolationCategory)
    assert counts[ViolationCategory.UNORIGINAL_CONTENT] == 1
    assert counts[ViolationCategory.ASSOCIATION_BAN] == 1
    assert counts[ViolationCategory.NO_VIOLATION] == 2
    assert counts[ViolationCategory.CONTENT_MISMATCH] == 0
    assert sum(counts.values()) == len(records)


@pytest.mark.parametrize(
    ("status", "reason", "expected"),
    [
        ("有违规", None, ViolationCategory.OTHER_VIOLATION),
        ("永久封禁", "关联封号", ViolationCategory.ASSOCIATION_BAN),
        ("正常", "非原创内容", ViolationCategory.NO_VIOLATION),
        ("橱窗失效", "视频与内容不符", ViolationCategory.NO_VIOLATION),
    ],
)
def test_account_category_depends_on_status(make_record, status, reason, expected) -> None:
    record = make_record(account_status=status, violation_reason=reason)
    assert account_category(record) is expected
