"""
File: app/db/models/tiktok_account.py
Description: TikTok 账号与经营遥测模型

1. TikTokAccount: 账号主表 (归属用户、国家、当前状态、最近一次违规原因)
2. AccountDailyStat: 日度经营数据 (day_period = YYYYMMDD)
3. AccountMonthlyStat: 月度经营数据 (month_period = YYYYMM)

入库边界约束：同一账号在同一周期只能有一条数据
(uq(account_id, period))，聚合层据此不做去重。

Author: jinmozhe
Created: 2026-03-02
"""

from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import IntIdModel


class TikTokAccount(IntIdModel):
    """TikTok 账号"""

    __tablename__ = "tiktok_account"

    tiktok_name: Mapped[str] = mapped_column(
        String(128), nullable=False, comment="TikTok 账号名称"
    )

    country: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default=text("''"), comment="国家名称"
    )

    owner_user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("ops_user.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="归属用户ID",
    )

    # 爬虫回写的中文状态标签 (正常/登录失效/橱窗失效/永久封禁/有违规)
    account_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        server_default=text("'正常'"),
        comment="账号状态",
    )

    last_violation_reason: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="最近一次违规原因 (自由文本)"
    )


class _PeriodStatColumns:
    """日度/月度经营数据的公共指标列"""

    account_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("tiktok_account.id", ondelete="CASCADE"),
        nullable=False,
        comment="TikTok 账号ID",
    )

    revenue: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, server_default=text("0"), comment="GMV"
    )

    orders: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0"), comment="订单数"
    )

    views: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0"), comment="浏览量"
    )

    clicks: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0"), comment="点击量"
    )


class AccountDailyStat(_PeriodStatColumns, IntIdModel):
    """日度经营数据"""

    __tablename__ = "account_daily_stat"

    __table_args__ = (
        UniqueConstraint("account_id", "day_period", name="uq_account_daily_stat_period"),
        CheckConstraint("revenue >= 0 AND orders >= 0", name="metrics_non_negative"),
        Index("ix_account_daily_stat_day_period", "day_period"),
    )

    day_period: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="日期 YYYYMMDD"
    )


class AccountMonthlyStat(_PeriodStatColumns, IntIdModel):
    """月度经营数据"""

    __tablename__ = "account_monthly_stat"

    __table_args__ = (
        UniqueConstraint(
            "account_id", "month_period", name="uq_account_monthly_stat_period"
        ),
        CheckConstraint("revenue >= 0 AND orders >= 0", name="metrics_non_negative"),
        Index("ix_account_monthly_stat_month_period", "month_period"),
    )

    month_period: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="月份 YYYYMM"
    )
