"""
File: app/domains/stats/schemas.py
Description: 运营统计领域 Pydantic 模型

包含：
1. 输入契约: AccountPeriodRecord (账号-周期遥测记录), CallerContext (调用方身份)
2. 周期: ResolvedPeriod
3. 汇总投影: MemberSummary / GroupSummary / GlobalSummary (只读，不可变)
4. 接口请求/响应: OperationStats / BusinessData / ViolationStats / Periods / MonthlyHistory

规范：
- 金额统一使用 Decimal，JSON 输出时序列化为数字
- 汇总模型 frozen=True，每次请求重新计算，不做原地修改

Author: jinmozhe
Created: 2026-03-02
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from app.domains.stats.constants import (
    ACCOUNT_STATUS_LABELS,
    DEFAULT_CURRENCY_SYMBOL,
    FILTER_ALL,
    AccountStatus,
    CallerRole,
    PeriodMode,
    ViolationCategory,
)

# 金额 / 比率：内部保持 Decimal 精度，JSON 输出为数字
Money = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]
Rate = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


def _parse_account_status(value: Any) -> Any:
    """接受英文枚举值或控制台中文标签"""
    if isinstance(value, str):
        label = value.strip()
        return ACCOUNT_STATUS_LABELS.get(label, label)
    return value


# ==============================================================================
# 1. 输入契约
# ==============================================================================


class AccountPeriodRecord(BaseModel):
    """
    单个 TikTok 账号在单个统计周期内的遥测数据。

    (account_id, period_key) 的唯一性由入库边界 (唯一约束) 保证，聚合层不做去重。
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    account_id: int = Field(..., description="TikTok 账号ID")
    account_name: str = Field(..., description="TikTok 账号名称")
    country: str = Field(default="", description="国家名称")
    group_id: int | None = Field(default=None, description="小组ID (可空，未分组)")
    group_name: str | None = Field(default=None, description="小组名称")
    leader_name: str | None = Field(default=None, description="组长姓名")
    owner_user_id: int = Field(..., description="账号归属用户ID")
    owner_username: str = Field(default="", description="账号归属用户名")

    revenue: Money = Field(default=Decimal("0"), ge=0, description="GMV")
    orders: int = Field(default=0, ge=0, description="订单数")
    views: int = Field(default=0, ge=0, description="浏览量")
    clicks: int = Field(default=0, ge=0, description="点击量")

    account_status: AccountStatus = Field(
        default=AccountStatus.NORMAL, description="账号状态"
    )
    violation_reason: str | None = Field(default=None, description="违规原因 (自由文本)")
    period_key: int = Field(..., description="周期键 YYYYMMDD / YYYYMM")

    @field_validator("account_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        return _parse_account_status(value)


class CallerContext(BaseModel):
    """
    调用方身份 (由已验签的 JWT 声明构造，显式传入范围过滤器)
    """

    model_config = ConfigDict(frozen=True)

    role: CallerRole = Field(..., description="角色")
    user_id: int = Field(..., description="用户ID")
    username: str = Field(default="", description="用户名")
    group_name: str | None = Field(default=None, description="所属小组名称")


class ResolvedPeriod(BaseModel):
    """解析后的统计周期 (闭区间窗口)"""

    model_config = ConfigDict(frozen=True)

    mode: PeriodMode
    period_key: int
    window_start: date
    window_end: date


# ==============================================================================
# 2. 汇总投影
# ==============================================================================


class MemberSummary(BaseModel):
    """组员汇总"""

    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    accounts: int = 0
    revenue: Money = Decimal("0")
    orders: int = 0
    violations: int = 0
    normal_rate: Rate = Decimal("100")


class GroupSummary(BaseModel):
    """小组汇总 (members 在投影阶段按 GMV 排序)"""

    model_config = ConfigDict(frozen=True)

    group_id: int
    group_name: str | None = None
    leader_name: str | None = None
    country_name: str | None = None
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    accounts: int = 0
    revenue: Money = Decimal("0")
    orders: int = 0
    violations: int = 0
    shop_expired: int = 0
    login_expired: int = 0
    normal_rate: Rate = Decimal("100")
    members: tuple[MemberSummary, ...] = ()


class ViolationCount(BaseModel):
    """单个违规分类的计数与占比"""

    model_config = ConfigDict(frozen=True)

    count: int = 0
    percentage: Rate = Decimal("0")
    display_name: str


class GlobalSummary(BaseModel):
    """全局汇总"""

    model_config = ConfigDict(frozen=True)

    total_accounts: int = 0
    total_revenue: Money = Decimal("0")
    total_orders: int = 0
    violation_accounts: int = 0
    shop_expired_accounts: int = 0
    login_expired_accounts: int = 0
    normal_rate: Rate = Decimal("100")
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    violation_reasons: dict[ViolationCategory, ViolationCount] = Field(
        default_factory=dict
    )


class AggregationResult(BaseModel):
    """聚合引擎输出：全局汇总 + 按 group_id 索引的小组汇总 (未排序、未取整)"""

    model_config = ConfigDict(frozen=True)

    summary: GlobalSummary
    groups: dict[int, GroupSummary] = Field(default_factory=dict)


# ==============================================================================
# 3. 接口请求参数
# ==============================================================================


class StatsPeriodQuery(BaseModel):
    """
    周期选择参数 (共享字段)
    date: 按日 YYYY-MM-DD / YYYYMMDD；按月 YYYYMM / YYYY-MM。为空时由接口决定默认值。
    """

    time_type: PeriodMode = Field(default=PeriodMode.DAY, description="统计模式")
    date: str | None = Field(default=None, description="指定日期/月份")


class OperationStatsQuery(StatsPeriodQuery):
    """运营统计查询参数"""

    country: str | None = Field(default=None, description="国家名称 (可选)")

    @field_validator("country", mode="before")
    @classmethod
    def _all_means_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip() in ("", FILTER_ALL):
            return None
        return value


class ViolationStatsQuery(OperationStatsQuery):
    """违规统计查询参数"""

    pass


class BusinessDataFilter(BaseModel):
    """
    商业数据多条件筛选 (空值或 "all" 表示不限)
    """

    account_name: str | None = Field(default=None, description="账号名称 (模糊，忽略大小写)")
    country: str | None = Field(default=None, description="国家")
    account_status: AccountStatus | None = Field(default=None, description="账号状态")
    group_name: str | None = Field(default=None, description="小组名称")
    member_id: int | None = Field(default=None, description="组员用户ID")
    violation_category: ViolationCategory | None = Field(
        default=None, description="违规原因分类"
    )

    @field_validator(
        "account_name",
        "country",
        "account_status",
        "group_name",
        "member_id",
        "violation_category",
        mode="before",
    )
    @classmethod
    def _all_means_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip() in ("", FILTER_ALL):
            return None
        return value

    @field_validator("account_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        return _parse_account_status(value)


class BusinessDataQuery(StatsPeriodQuery, BusinessDataFilter):
    """商业数据查询参数 (周期 + 多条件筛选)"""

    pass


class PeriodListQuery(BaseModel):
    """可用周期查询参数"""

    time_type: PeriodMode = Field(default=PeriodMode.DAY, description="统计模式")
    limit: int = Field(default=60, ge=1, le=366, description="最多返回的周期数")


class MonthlyHistoryQuery(BaseModel):
    """月度历史对比参数 (去重后按新 -> 旧排列)"""

    month_periods: list[int] = Field(
        ..., min_length=1, max_length=24, description="月份周期键列表 YYYYMM"
    )

    @field_validator("month_periods")
    @classmethod
    def _valid_months(cls, value: list[int]) -> list[int]:
        for key in value:
            if not (100001 <= key <= 999912 and 1 <= key % 100 <= 12):
                raise ValueError(f"无效的月份周期键: {key}")
        return sorted(set(value), reverse=True)


# ==============================================================================
# 4. 接口响应
# ==============================================================================


class OperationStatsResponse(BaseModel):
    """运营统计响应 (summary + 按 GMV 排序的小组)"""

    time_type: PeriodMode
    period_key: int
    summary: GlobalSummary
    groups: list[GroupSummary]


class BusinessDataItem(AccountPeriodRecord):
    """商业数据明细行"""

    violation_category: ViolationCategory
    currency_symbol: str


class BusinessDataStats(BaseModel):
    """商业数据统计卡片"""

    total_accounts: int = 0
    total_revenue: Money = Decimal("0")
    total_orders: int = 0
    violation_accounts: int = 0


class BusinessDataResponse(BaseModel):
    """商业数据响应"""

    time_type: PeriodMode
    period_key: int
    stats: BusinessDataStats
    items: list[BusinessDataItem]


class ViolationStatsSummary(BaseModel):
    """违规统计概览"""

    total_accounts: int = 0
    violated_accounts: int = 0
    normal_accounts: int = 0
    violation_rate: Rate = Decimal("0")


class ViolationCategoryItem(BaseModel):
    """违规分类明细"""

    category_key: ViolationCategory
    category_name: str
    count: int
    percentage: Rate


class ViolationStatsResponse(BaseModel):
    """违规统计响应"""

    time_type: PeriodMode
    period_key: int
    summary: ViolationStatsSummary
    categories: list[ViolationCategoryItem]


class PeriodInfo(BaseModel):
    """可用周期"""

    model_config = ConfigDict(from_attributes=True)

    period_key: int = Field(..., description="周期键")
    account_count: int = Field(..., description="该周期有数据的账号数")


class MonthlyHistoryItem(BaseModel):
    """月度历史明细行 (账号 x 月份)"""

    account_id: int
    account_name: str
    country: str
    group_name: str | None = None
    owner_user_id: int
    owner_username: str
    month_period: int
    revenue: Money
    orders: int
    views: int
    clicks: int
    currency_symbol: str


class MonthlyPeriodTotal(BaseModel):
    """单月合计"""

    month_period: int
    accounts: int = 0
    revenue: Money = Decimal("0")
    orders: int = 0
    views: int = 0
    clicks: int = 0


class MonthlyHistoryResponse(BaseModel):
    """月度历史对比响应"""

    month_periods: list[int]
    totals: list[MonthlyPeriodTotal]
    items: list[MonthlyHistoryItem]
