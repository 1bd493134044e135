"""
File: app/domains/stats/period.py
Description: 统计周期解析 (Period Resolver)

职责：
1. resolve_period: (模式, 日期) -> 周期键 + 闭区间窗口 (纯函数，日期由调用方提供)
2. default_period_date: 调用方默认日期策略 (看板默认今天，商业数据默认昨天)
3. parse_period_date / ensure_not_future: 调用方侧的输入解析与校验

周期键格式必须与数据源完全一致：按日 YYYYMMDD，按月 YYYYMM (整数)。

Author: jinmozhe
Created: 2026-03-02
"""

import calendar
import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.domains.stats.constants import PeriodMode
from app.domains.stats.exceptions import InvalidPeriod
from app.domains.stats.schemas import ResolvedPeriod

_DAY_PATTERN = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$")
_MONTH_PATTERN = re.compile(r"^(\d{4})-?(\d{2})$")


def _coerce_mode(mode: PeriodMode | str) -> PeriodMode:
    try:
        return PeriodMode(mode)
    except ValueError:
        raise InvalidPeriod(message=f"不支持的统计模式: {mode}") from None


def day_period_key(day: date) -> int:
    """YYYYMMDD"""
    return day.year * 10000 + day.month * 100 + day.day


def month_period_key(day: date) -> int:
    """YYYYMM"""
    return day.year * 100 + day.month


def resolve_period(mode: PeriodMode | str, explicit_date: date) -> ResolvedPeriod:
    """
    将统计模式与日期解析为周期键及其覆盖的闭区间窗口。

    调用方负责提供默认日期并过滤未来日期，本函数不猜测相邻日期。
    """
    period_mode = _coerce_mode(mode)
    if not isinstance(explicit_date, date):
        raise InvalidPeriod(message="统计日期缺失或类型错误")

    # datetime 是 date 的子类，只取日期部分
    if isinstance(explicit_date, datetime):
        explicit_date = explicit_date.date()

    if period_mode is PeriodMode.DAY:
        return ResolvedPeriod(
            mode=period_mode,
            period_key=day_period_key(explicit_date),
            window_start=explicit_date,
            window_end=explicit_date,
        )

    last_day = calendar.monthrange(explicit_date.year, explicit_date.month)[1]
    return ResolvedPeriod(
        mode=period_mode,
        period_key=month_period_key(explicit_date),
        window_start=explicit_date.replace(day=1),
        window_end=explicit_date.replace(day=last_day),
    )


def today_in(tz: ZoneInfo) -> date:
    """业务时区下的今天"""
    return datetime.now(tz).date()


def default_period_date(
    mode: PeriodMode | str, today: date, *, prefer_yesterday: bool
) -> date:
    """
    调用方默认日期策略。

    - 按日: 商业数据视图默认昨天 (避免展示未结束的当天)，运营看板默认今天
    - 按月: 当前自然月
    """
    period_mode = _coerce_mode(mode)
    if period_mode is PeriodMode.DAY and prefer_yesterday:
        return today - timedelta(days=1)
    return today


def parse_period_date(mode: PeriodMode | str, raw: str) -> date:
    """
    解析前端传入的日期字符串。

    按日: YYYY-MM-DD / YYYYMMDD；按月: YYYYMM / YYYY-MM (返回当月 1 号)。
    """
    period_mode = _coerce_mode(mode)
    text = raw.strip()
    pattern = _DAY_PATTERN if period_mode is PeriodMode.DAY else _MONTH_PATTERN
    matched = pattern.match(text)
    if not matched:
        raise InvalidPeriod(message=f"无法解析的统计日期: {raw!r}")

    parts = [int(part) for part in matched.groups()]
    if period_mode is PeriodMode.MONTH:
        parts.append(1)

    try:
        return date(*parts)
    except ValueError:
        raise InvalidPeriod(message=f"无法解析的统计日期: {raw!r}") from None


def ensure_not_future(mode: PeriodMode | str, selected: date, today: date) -> None:
    """拒绝晚于今天的日期 (按月模式下比较月份)"""
    period_mode = _coerce_mode(mode)
    if period_mode is PeriodMode.MONTH:
        is_future = month_period_key(selected) > month_period_key(today)
    else:
        is_future = selected > today

    if is_future:
        raise InvalidPeriod(message=f"统计日期不能晚于今天: {selected.isoformat()}")
