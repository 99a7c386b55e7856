"""Tests for the agent endpoints."""

import json

import pytest

from src.core.authorization import SUSPENDED_AGENT_MESSAGE
from src.models import AgentStatus, Role
from tests.utils.factories import auth_headers, create_account, create_agent
from tests.utils.fakes import managed

API = "/api/v1/agents"


@pytest.mark.integration
class TestPublicDirectory:
    @pytest.mark.asyncio
    async def test_list_agents(self, client, db):
        await create_agent(db)
        await create_agent(db)
        await create_account(db)

        response = await client.get(API)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["pages"] == 1
        assert {"slug", "job_title", "avatar_url", "status"} <= set(body["items"][0])

    @pytest.mark.asyncio
    async def test_get_by_slug(self, client, db):
        _, agent = await create_agent(db, profile={"slug": "sara-ali", "languages": ["English"]})

        response = await client.get(f"{API}/sara-ali")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == agent.id
        assert body["languages"] == ["English"]

    @pytest.mark.asyncio
    async def test_unknown_slug(self, client):
        response = await client.get(f"{API}/nobody")

        assert response.status_code == 404
        assert response.json() == {"message": "Agent not found"}


@pytest.mark.integration
class TestOwnProfile:
    @pytest.mark.asyncio
    async def test_get_own_profile(self, client, db):
        account, agent = await create_agent(db)

        response = await client.get(f"{API}/profile", headers=auth_headers(account))

        assert response.status_code == 200
        assert response.json()["id"] == agent.id

    @pytest.mark.asyncio
    async def test_get_own_profile_refused_for_users(self, client, db):
        user = await create_account(db)

        response = await client.get(f"{API}/profile", headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json() == {"message": "Access denied. Agents only."}

    @pytest.mark.asyncio
    async def test_update_own_profile(self, client, db, media_store):
        old = managed("images/profiles/old.jpg")
        dropped = managed("images/profiles/p2.jpg")
        account, _ = await create_agent(
            db,
            profile_picture=old,
            profile={
                "avatar_url": old,
                "portfolio": [
                    {"url": managed("images/profiles/p1.jpg"), "kind": "image"},
                    {"url": dropped, "kind": "image"},
                ],
            },
        )

        response = await client.put(
            f"{API}/profile",
            headers=auth_headers(account),
            data={
                "job_title": "Team Lead",
                "specialties": json.dumps(["Off-plan", "Luxury"]),
                "portfolio": json.dumps(
                    [
                        {"url": managed("images/profiles/p1.jpg"), "kind": "image"},
                        {"url": "https://youtu.be/tour", "kind": "video"},
                    ]
                ),
            },
            files={"avatar_file": ("avatar.webp", b"webp", "image/webp")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["job_title"] == "Team Lead"
        assert body["specialties"] == ["Off-plan", "Luxury"]
        assert body["avatar_url"] == media_store.uploaded_urls[0]
        assert [item["kind"] for item in body["portfolio"]] == ["image", "video"]
        assert media_store.deleted_urls == [old, dropped]

    @pytest.mark.asyncio
    async def test_suspended_agent_is_cut_off(self, client, db):
        account, _ = await create_agent(db, status=AgentStatus.SUSPENDED)

        response = await client.put(
            f"{API}/profile", headers=auth_headers(account), data={"bio": "x"}
        )

        assert response.status_code == 403
        assert response.json() == {"message": SUSPENDED_AGENT_MESSAGE}


@pytest.mark.integration
class TestAdminManagement:
    @pytest.mark.asyncio
    async def test_add_agent(self, client, db):
        admin = await create_account(db, role=Role.ADMIN)

        response = await client.post(
            API,
            headers=auth_headers(admin),
            json={
                "name": "Karim Saad",
                "email": "karim@grandgate.ae",
                "phone": "0501112233",
                "password": "secret123",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Agent created successfully"
        assert body["account"]["role"] == "agent"
        assert body["agent"]["slug"] == "karim-saad"
        assert body["agent"]["account_id"] == body["account"]["id"]

    @pytest.mark.asyncio
    async def test_add_agent_missing_fields(self, client, db):
        admin = await create_account(db, role=Role.ADMIN)

        response = await client.post(API, headers=auth_headers(admin), json={"name": "X"})

        assert response.status_code == 400
        assert response.json() == {
            "message": "Please provide all required fields (Name, Email, Phone, Password)"
        }

    @pytest.mark.asyncio
    async def test_add_agent_refused_for_agents(self, client, db):
        account, _ = await create_agent(db)

        response = await client.post(API, headers=auth_headers(account), json={})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_status_toggle_and_explicit(self, client, db):
        admin = await create_account(db, role=Role.ADMIN)
        _, agent = await create_agent(db)

        response = await client.put(f"{API}/{agent.slug}/status", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["status"] == "inactive"
        assert response.json()["message"] == "Agent status updated to inactive"

        response = await client.put(
            f"{API}/{agent.id}/status",
            headers=auth_headers(admin),
            json={"status": "suspended"},
        )
        assert response.status_code == 400
        assert "Cannot change agent status" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_admin_update_is_status_only(self, client, db):
        admin = await create_account(db, role=Role.ADMIN)
        _, agent = await create_agent(db)

        response = await client.put(
            f"{API}/{agent.id}", headers=auth_headers(admin), json={"bio": "new"}
        )
        assert response.status_code == 400

        response = await client.put(
            f"{API}/{agent.id}", headers=auth_headers(admin), json={"status": "suspended"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "suspended"
