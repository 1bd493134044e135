"""
File: app/domains/stats/classifier.py
Description: 违规原因分类 (Violation Classifier)

自由文本违规原因 -> 六个固定分类之一：
- 空 / 缺失 / 纯空白 -> no_violation
- 精确命中短语表 (去除首尾空白) -> 对应分类
- 其余非空文本 -> other_violation (新出现的措辞可预期地落入兜底分类)

Author: jinmozhe
Created: 2026-03-02
"""

from collections import Counter
from collections.abc import Iterable

from app.domains.stats.constants import (
    VIOLATION_PHRASES,
    VIOLATION_STATUSES,
    ViolationCategory,
)
from app.domains.stats.schemas import AccountPeriodRecord


def classify(reason: str | None) -> ViolationCategory:
    """将违规原因映射为分类 (全函数、无副作用)"""
    if reason is None:
        return ViolationCategory.NO_VIOLATION

    text = reason.strip()
    if not text:
        return ViolationCategory.NO_VIOLATION

    return VIOLATION_PHRASES.get(text, ViolationCategory.OTHER_VIOLATION)


def classify_violation_record(record: AccountPeriodRecord) -> ViolationCategory:
    """
    对处于违规状态的账号分类。
    违规账号缺少原因时计入 other_violation，保证分类合计等于违规账号数。
    """
    category = classify(record.violation_reason)
    if category is ViolationCategory.NO_VIOLATION:
        return ViolationCategory.OTHER_VIOLATION
    return category


def account_category(record: AccountPeriodRecord) -> ViolationCategory:
    """
    账号级分类：违规状态账号按原因分类，其余账号一律为 no_violation。
    汇总分类计数、明细标签与分类筛选共用此口径。
    """
    if record.account_status in VIOLATION_STATUSES:
        return classify_violation_record(record)
    return ViolationCategory.NO_VIOLATION


def tally(records: Iterable[AccountPeriodRecord]) -> Counter[ViolationCategory]:
    """统计各分类账号数"""
    counts: Counter[ViolationCategory] = Counter(
        {category: 0 for category in ViolationCategory}
    )
    for record in records:
        counts[account_category(record)] += 1
    return counts
