"""
File: app/domains/stats/constants.py
Description: 运营统计领域常量、枚举与错误码定义

包含：
1. StatsErrorCode: 领域专用错误码
2. PeriodMode / CallerRole / AccountStatus / ViolationCategory: 领域枚举
3. 违规原因短语表、账号状态中文标签、国家货币符号表 (静态查找表)

Author: jinmozhe
Created: 2026-03-02
"""

from enum import Enum

from starlette.status import HTTP_400_BAD_REQUEST

from app.core.error_code import BaseErrorCode


class StatsErrorCode(BaseErrorCode):
    """
    运营统计领域错误码定义
    """

    # --- 400 Bad Request ---
    INVALID_PERIOD = (
        HTTP_400_BAD_REQUEST,
        "stats.invalid_period",
        "统计周期无效 (日期无法解析或晚于今天)",
    )

    INVALID_ROLE = (HTTP_400_BAD_REQUEST, "stats.invalid_role", "不支持的业务角色类型")


class StatsMsg:
    """业务文案常量"""

    OPERATION_STATS_SUCCESS = "获取运营统计成功"
    BUSINESS_DATA_SUCCESS = "获取商业数据成功"
    VIOLATION_STATS_SUCCESS = "获取违规统计成功"
    PERIODS_SUCCESS = "获取可用周期成功"
    MONTHLY_HISTORY_SUCCESS = "获取月度历史数据成功"


# ==============================================================================
# 1. 领域枚举
# ==============================================================================


class PeriodMode(str, Enum):
    """统计周期模式"""

    DAY = "day"
    MONTH = "month"


class CallerRole(str, Enum):
    """调用方角色"""

    ADMIN = "admin"
    LEADER = "leader"
    MEMBER = "member"


class AccountStatus(str, Enum):
    """TikTok 账号健康状态"""

    NORMAL = "normal"
    LOGIN_EXPIRED = "login_expired"
    SHOP_EXPIRED = "shop_expired"
    PERMANENTLY_BANNED = "permanently_banned"
    HAS_VIOLATION = "has_violation"


class ViolationCategory(str, Enum):
    """违规原因分类 (封闭集合)"""

    NO_VIOLATION = "no_violation"
    UNORIGINAL_CONTENT = "unoriginal_content"
    CONTENT_MISMATCH = "content_mismatch"
    UNAUTHORIZED_USE = "unauthorized_use"
    ASSOCIATION_BAN = "association_ban"
    OTHER_VIOLATION = "other_violation"


# ==============================================================================
# 2. 静态查找表
# ==============================================================================

# 控制台与爬虫回写使用的中文状态标签
ACCOUNT_STATUS_LABELS: dict[str, AccountStatus] = {
    "正常": AccountStatus.NORMAL,
    "登录失效": AccountStatus.LOGIN_EXPIRED,
    "橱窗失效": AccountStatus.SHOP_EXPIRED,
    "永久封禁": AccountStatus.PERMANENTLY_BANNED,
    "有违规": AccountStatus.HAS_VIOLATION,
}

# 计入 "违规账号" 的状态：有违规 + 永久封禁
VIOLATION_STATUSES: frozenset[AccountStatus] = frozenset(
    {AccountStatus.HAS_VIOLATION, AccountStatus.PERMANENTLY_BANNED}
)

VIOLATION_DISPLAY_NAMES: dict[ViolationCategory, str] = {
    ViolationCategory.NO_VIOLATION: "无违规",
    ViolationCategory.UNORIGINAL_CONTENT: "非原创内容",
    ViolationCategory.CONTENT_MISMATCH: "视频与内容不符",
    ViolationCategory.UNAUTHORIZED_USE: "未经授权使用",
    ViolationCategory.ASSOCIATION_BAN: "关联封号",
    ViolationCategory.OTHER_VIOLATION: "其它违规",
}

# 精确匹配短语表 (去除首尾空白后比对)
# 未命中的非空原因一律归入 other_violation
VIOLATION_PHRASES: dict[str, ViolationCategory] = {
    "非原创内容": ViolationCategory.UNORIGINAL_CONTENT,
    "视频与内容不符": ViolationCategory.CONTENT_MISMATCH,
    "未经授权使用": ViolationCategory.UNAUTHORIZED_USE,
    "关联封号": ViolationCategory.ASSOCIATION_BAN,
    "其它违规": ViolationCategory.OTHER_VIOLATION,
    "其他违规": ViolationCategory.OTHER_VIOLATION,
}

DEFAULT_CURRENCY_SYMBOL = "$"

# 国家名称 (中文/英文) -> 货币符号
CURRENCY_SYMBOLS: dict[str, str] = {
    "美国": "$",
    "USA": "$",
    "United States": "$",
    "墨西哥": "$",
    "Mexico": "$",
    "英国": "£",
    "UK": "£",
    "United Kingdom": "£",
    "德国": "€",
    "Germany": "€",
    "法国": "€",
    "France": "€",
    "西班牙": "€",
    "Spain": "€",
    "意大利": "€",
    "Italy": "€",
    "爱尔兰": "€",
    "Ireland": "€",
    "泰国": "฿",
    "Thailand": "฿",
    "印尼": "Rp",
    "印度尼西亚": "Rp",
    "Indonesia": "Rp",
    "越南": "₫",
    "Vietnam": "₫",
    "马来": "RM",
    "马来西亚": "RM",
    "Malaysia": "RM",
    "菲律宾": "₱",
    "Philippines": "₱",
    "新加坡": "S$",
    "Singapore": "S$",
    "沙特": "﷼",
    "Saudi Arabia": "﷼",
    "日本": "¥",
    "Japan": "¥",
    "中国": "¥",
    "China": "¥",
    "巴西": "R$",
    "Brazil": "R$",
    "韩国": "₩",
    "South Korea": "₩",
    "土耳其": "₺",
    "Turkey": "₺",
    "阿联酋": "AED",
    "United Arab Emirates": "AED",
    "台湾": "NT$",
    "Taiwan": "NT$",
}

# 未分组账号 (group_id 为空) 的哨兵小组
# ops_group.id 由 id_positive 约束保证大于 0，哨兵不会与真实小组冲突
UNGROUPED_GROUP_ID = 0
UNGROUPED_GROUP_NAME = "未分组"

# 筛选条件中表示 "不限" 的取值
FILTER_ALL = "all"
