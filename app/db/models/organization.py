"""
File: app/db/models/organization.py
Description: 组织架构模型 (小组 / 用户)

1. OpsGroup: 运营小组 (组长姓名、所属国家)
2. OpsUser: 控制台用户 (角色 admin/leader/member，可不属于任何小组)

用户的增删改由控制台的用户管理模块负责，本服务只读。

Author: jinmozhe
Created: 2026-03-02
"""

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import IntIdModel


class OpsGroup(IntIdModel):
    """运营小组"""

    __tablename__ = "ops_group"

    # 0 保留给统计侧的 "未分组" 哨兵小组
    __table_args__ = (CheckConstraint("id > 0", name="id_positive"),)

    name: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, comment="小组名称"
    )

    leader_name: Mapped[str | None] = mapped_column(
        String(64), nullable=True, comment="组长姓名"
    )

    country_name: Mapped[str | None] = mapped_column(
        String(32), nullable=True, comment="小组运营国家"
    )


class OpsUser(IntIdModel):
    """控制台用户"""

    __tablename__ = "ops_user"

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'leader', 'member')", name="role_valid"
        ),
    )

    username: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, comment="用户名"
    )

    role: Mapped[str] = mapped_column(
        String(16), nullable=False, default="member", comment="角色"
    )

    group_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("ops_group.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="所属小组ID",
    )
