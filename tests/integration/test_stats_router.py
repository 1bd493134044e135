"""
File: tests/integration/test_stats_router.py
Description: 运营统计 HTTP 接口集成测试

本模块使用 httpx.AsyncClient 对 API 进行端到端测试 (Repository 替换为内存数据源)，验证：
1. 路由挂载与 URL 路径 (/api/v1/stats)
2. 统一响应信封结构 (ResponseModel) 与 X-Request-ID
3. JWT 鉴权与按角色裁剪数据
4. 参数校验与业务错误码

Author: jinmozhe
Created: 2026-03-02
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.core.config import settings
from app.core.security import create_access_token

STATS = f"{settings.API_V1_STR}/stats"


@pytest.fixture
def seeded(fake_repo, make_record):
    fake_repo.records = [
        make_record(
            account_name="a1", group_id=1, group_name="A", owner_user_id=1,
            owner_username="user1", revenue=Decimal("100"), orders=2,
        ),
        make_record(
            account_name="a2", group_id=1, group_name="A", owner_user_id=2,
            owner_username="user2", revenue=Decimal("50"), orders=1,
            account_status="有违规", violation_reason="非原创内容",
        ),
        make_record(
            account_name="b1", group_id=2, group_name="B", leader_name="leader_b",
            owner_user_id=3, owner_username="user3",
            revenue=Decimal("200"), orders=5,
        ),
    ]
    return fake_repo


# ------------------------------------------------------------------------------
# 运营看板
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_operation_stats_admin(client: AsyncClient, seeded, auth_headers) -> None:
    """
    测试：POST /stats/operation-stats (管理员)
    验证：信封结构、金额序列化为数字、小组按 GMV 排序
    """
    response = await client.post(
        f"{STATS}/operation-stats",
        json={"time_type": "day", "date": "2026-03-01"},
        headers=auth_headers(role="admin"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "success"
    assert body["request_id"] is not None
    assert response.headers.get("X-Request-ID") == body["request_id"]

    data = body["data"]
    assert data["period_key"] == 20260301
    assert data["summary"]["total_revenue"] == 350.0
    assert data["summary"]["violation_accounts"] == 1
    assert data["summary"]["currency_symbol"] == "$"
    unoriginal = data["summary"]["violation_reasons"]["unoriginal_content"]
    assert unoriginal == {"count": 1, "percentage": 100.0, "display_name": "非原创内容"}

    assert [g["group_name"] for g in data["groups"]] == ["B", "A"]
    assert [m["user_id"] for m in data["groups"][1]["members"]] == [1, 2]


@pytest.mark.asyncio
async def test_operation_stats_leader_scope(
    client: AsyncClient, seeded, auth_headers
) -> None:
    response = await client.post(
        f"{STATS}/operation-stats",
        json={"date": "2026-03-01"},
        headers=auth_headers(role="leader", user_id=10, group_name="A"),
    )

    data = response.json()["data"]
    assert [g["group_name"] for g in data["groups"]] == ["A"]
    assert data["summary"]["total_revenue"] == 150.0


@pytest.mark.asyncio
async def test_operation_stats_leader_unknown_group_is_empty(
    client: AsyncClient, seeded, auth_headers
) -> None:
    """组长小组在数据中不存在：返回空汇总而不是其他小组的数据"""
    response = await client.post(
        f"{STATS}/operation-stats",
        json={"date": "2026-03-01"},
        headers=auth_headers(role="leader", user_id=10, group_name="X"),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["groups"] == []
    assert data["summary"]["total_accounts"] == 0


@pytest.mark.asyncio
async def test_operation_stats_future_date(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/operation-stats",
        json={"date": "2999-01-01"},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "stats.invalid_period"


@pytest.mark.asyncio
async def test_operation_stats_invalid_time_type(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/operation-stats",
        json={"time_type": "week"},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "system.invalid_params"
    assert body["data"]["errors"][0]["loc"][-1] == "time_type"


# ------------------------------------------------------------------------------
# 鉴权
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_missing_token_is_unauthorized(client: AsyncClient) -> None:
    response = await client.post(f"{STATS}/operation-stats", json={})

    assert response.status_code == 401
    assert response.json()["code"] == "system.unauthorized"


@pytest.mark.asyncio
async def test_garbage_token_is_unauthorized(client: AsyncClient) -> None:
    response = await client.post(
        f"{STATS}/operation-stats",
        json={},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient) -> None:
    token = create_access_token(
        1, role="admin", expires_delta=timedelta(minutes=-1)
    )
    response = await client.post(
        f"{STATS}/operation-stats",
        json={},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401
    assert response.json()["code"] == "system.token_expired"


@pytest.mark.asyncio
async def test_unknown_role_rejected(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/operation-stats",
        json={},
        headers=auth_headers(role="superuser"),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "stats.invalid_role"


@pytest.mark.asyncio
async def test_non_string_role_rejected(client: AsyncClient) -> None:
    token = create_access_token(1, role=["admin"])  # type: ignore[arg-type]
    response = await client.post(
        f"{STATS}/operation-stats",
        json={},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "stats.invalid_role"


# ------------------------------------------------------------------------------
# 商业数据 / 违规统计 / 可用周期
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_business_data_member_view(client: AsyncClient, seeded, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/business-data",
        json={"date": "2026-03-01", "country": "all", "account_status": "all"},
        headers=auth_headers(role="member", user_id=2, group_name="A"),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [item["account_name"] for item in data["items"]] == ["a2"]
    assert data["items"][0]["violation_category"] == "unoriginal_content"
    assert data["items"][0]["account_status"] == "has_violation"
    assert data["stats"] == {
        "total_accounts": 1,
        "total_revenue": 50.0,
        "total_orders": 1,
        "violation_accounts": 1,
    }


@pytest.mark.asyncio
async def test_business_data_name_filter(client: AsyncClient, seeded, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/business-data",
        json={"date": "2026-03-01", "account_name": "A"},
        headers=auth_headers(),
    )

    names = [item["account_name"] for item in response.json()["data"]["items"]]
    assert names == ["a1", "a2"]


@pytest.mark.asyncio
async def test_violation_stats(client: AsyncClient, seeded, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/violation-stats",
        json={"date": "2026-03-01"},
        headers=auth_headers(),
    )

    data = response.json()["data"]
    assert data["summary"]["violated_accounts"] == 1
    assert data["summary"]["normal_accounts"] == 2
    assert data["summary"]["violation_rate"] == 33.33
    assert data["categories"][0]["category_key"] == "unoriginal_content"
    assert "no_violation" not in {c["category_key"] for c in data["categories"]}


@pytest.mark.asyncio
async def test_periods(client: AsyncClient, seeded, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/periods",
        json={"time_type": "day"},
        headers=auth_headers(role="member", user_id=1),
    )

    assert response.status_code == 200
    # 组员只统计本人名下账号
    assert response.json()["data"] == [{"period_key": 20260301, "account_count": 1}]

    admin = await client.post(
        f"{STATS}/periods", json={"time_type": "day"}, headers=auth_headers()
    )
    assert admin.json()["data"] == [{"period_key": 20260301, "account_count": 3}]


# ------------------------------------------------------------------------------
# 月度历史对比
# ------------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_monthly_history_leader_view(
    client: AsyncClient, fake_repo, make_record, auth_headers
) -> None:
    fake_repo.records = [
        make_record(
            group_name="A", owner_user_id=1, period_key=202602,
            revenue=Decimal("12.5"), views=40,
        ),
        make_record(
            group_name="A", owner_user_id=2, period_key=202601, revenue=Decimal("8"),
        ),
        make_record(
            group_id=2, group_name="B", owner_user_id=3, period_key=202602,
            revenue=Decimal("99"),
        ),
    ]

    response = await client.post(
        f"{STATS}/monthly-history",
        json={"month_periods": [202601, 202602]},
        headers=auth_headers(role="leader", user_id=9, group_name="A"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "获取月度历史数据成功"
    data = body["data"]
    assert data["month_periods"] == [202602, 202601]
    assert [t["revenue"] for t in data["totals"]] == [12.5, 8.0]
    assert {item["group_name"] for item in data["items"]} == {"A"}
    assert data["items"][0]["views"] == 40


@pytest.mark.asyncio
async def test_monthly_history_rejects_invalid_month(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        f"{STATS}/monthly-history",
        json={"month_periods": [202600]},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "system.invalid_params"
