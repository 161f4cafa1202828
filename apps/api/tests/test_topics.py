"""Tests for topics and topic groups."""

import pytest
from httpx import AsyncClient

from squeak.db.enums import ProfileRole


@pytest.mark.asyncio
async def test_admin_creates_group_and_topic(client: AsyncClient, admin):
    res = await client.post(
        "/api/topic-groups",
        json={"organizationId": admin.org.id, "label": "Deployment"},
        headers=admin.headers,
    )
    assert res.status_code == 201
    group_id = res.json()["id"]

    res = await client.post(
        "/api/topics",
        json={"organizationId": admin.org.id, "label": "Docker", "topicGroupId": group_id},
        headers=admin.headers,
    )
    assert res.status_code == 201
    assert res.json()["topic_group"] == {"id": group_id, "label": "Deployment"}

    res = await client.get("/api/topics", params={"organizationId": admin.org.id})
    assert res.status_code == 200
    assert [t["label"] for t in res.json()] == ["Docker"]

    res = await client.get("/api/topic-groups", params={"organizationId": admin.org.id})
    assert [g["label"] for g in res.json()] == ["Deployment"]


@pytest.mark.asyncio
async def test_assign_and_clear_topic_group(client: AsyncClient, admin):
    group = await client.post(
        "/api/topic-groups",
        json={"organizationId": admin.org.id, "label": "Billing"},
        headers=admin.headers,
    )
    topic = await client.post(
        "/api/topics",
        json={"organizationId": admin.org.id, "label": "Invoices"},
        headers=admin.headers,
    )
    assert topic.json()["topic_group"] is None
    topic_id = topic.json()["id"]

    res = await client.patch(
        f"/api/topics/{topic_id}",
        json={"organizationId": admin.org.id, "topicGroupId": group.json()["id"]},
        headers=admin.headers,
    )
    assert res.status_code == 200
    assert res.json()["topic_group"]["label"] == "Billing"

    res = await client.patch(
        f"/api/topics/{topic_id}",
        json={"organizationId": admin.org.id, "topicGroupId": None},
        headers=admin.headers,
    )
    assert res.json()["topic_group"] is None


@pytest.mark.asyncio
async def test_group_from_other_org_is_not_found(client: AsyncClient, admin, other_org, create_member):
    other_admin = create_member(other_org, role=ProfileRole.ADMIN)
    foreign = await client.post(
        "/api/topic-groups",
        json={"organizationId": other_org.id, "label": "Theirs"},
        headers=other_admin.headers,
    )

    res = await client.post(
        "/api/topics",
        json={"organizationId": admin.org.id, "label": "Mine", "topicGroupId": foreign.json()["id"]},
        headers=admin.headers,
    )

    assert res.status_code == 404
    assert res.json() == {"error": "Topic group not found"}


@pytest.mark.asyncio
async def test_topic_writes_require_admin(client: AsyncClient, member):
    res = await client.post(
        "/api/topic-groups",
        json={"organizationId": member.org.id, "label": "Nope"},
        headers=member.headers,
    )

    assert res.status_code == 403


@pytest.mark.asyncio
async def test_topic_writes_require_session(client: AsyncClient, test_org):
    res = await client.post("/api/topics", json={"organizationId": test_org.id, "label": "Nope"})

    assert res.status_code == 401
