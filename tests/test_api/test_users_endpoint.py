"""Tests for the account endpoints."""

import pytest
from sqlalchemy import select

from src.core.authorization import BLOCKED_MESSAGE, INACTIVE_AGENT_MESSAGE
from src.models import Account, AccountStatus, AgentStatus, Role
from tests.utils.factories import (
    DEFAULT_PASSWORD,
    auth_headers,
    create_account,
    create_account_data,
    create_agent,
    create_listing,
)
from tests.utils.fakes import managed

API = "/api/v1/users"


@pytest.mark.integration
class TestSignupAndLogin:
    @pytest.mark.asyncio
    async def test_signup_sets_cookie(self, client):
        response = await client.post(f"{API}/signup", data=create_account_data(name="Jane Doe"))

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Jane Doe"
        assert body["role"] == "user"
        assert "password_hash" not in body
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("token=")
        assert "HttpOnly" in cookie
        assert "samesite=strict" in cookie.lower()

    @pytest.mark.asyncio
    async def test_signup_with_picture_file(self, client, media_store):
        response = await client.post(
            f"{API}/signup",
            data=create_account_data(role="agent"),
            files={"profile_picture_file": ("me.png", b"\x89PNG", "image/png")},
        )

        assert response.status_code == 201
        assert response.json()["role"] == "agent"
        assert response.json()["profile_picture"] == media_store.uploaded_urls[0]

    @pytest.mark.asyncio
    async def test_signup_rejects_unsupported_file(self, client, media_store):
        response = await client.post(
            f"{API}/signup",
            data=create_account_data(),
            files={"profile_picture_file": ("run.exe", b"MZ", "application/octet-stream")},
        )

        assert response.status_code == 400
        assert "Images and PDFs only" in response.json()["message"]
        assert media_store.call_count == 0

    @pytest.mark.asyncio
    async def test_signup_duplicate(self, client, db):
        existing = await create_account(db)

        response = await client.post(
            f"{API}/signup", data=create_account_data(email=existing.email)
        )

        assert response.status_code == 400
        assert response.json() == {"message": "User already exists with this email or phone"}

    @pytest.mark.asyncio
    async def test_signup_missing_field(self, client):
        data = create_account_data()
        del data["phone"]

        response = await client.post(f"{API}/signup", data=data)

        assert response.status_code == 400
        assert "phone" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_login_and_logout(self, client, db):
        account = await create_account(db, phone="0507654321")

        response = await client.post(
            f"{API}/login", json={"login_id": "0507654321", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["id"] == account.id
        assert response.headers["set-cookie"].startswith("token=")

        response = await client.post(f"{API}/logout")
        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, db):
        account = await create_account(db)

        response = await client.post(
            f"{API}/login", json={"login_id": account.email, "password": "nope-nope"}
        )

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid email/phone or password"}

    @pytest.mark.asyncio
    async def test_inactive_agent_cannot_log_in(self, client, db):
        account, _ = await create_agent(db, status=AgentStatus.INACTIVE)

        response = await client.post(
            f"{API}/login", json={"login_id": account.email, "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 403
        assert response.json() == {"message": INACTIVE_AGENT_MESSAGE}


@pytest.mark.integration
class TestProfile:
    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get(f"{API}/profile")

        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized, no token"}

    @pytest.mark.asyncio
    async def test_bad_token(self, client):
        response = await client.get(
            f"{API}/profile", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized, token failed"}

    @pytest.mark.asyncio
    async def test_cookie_token_is_accepted(self, client, db):
        from src.core.security import create_access_token

        account = await create_account(db)
        client.cookies.set("token", create_access_token(account.id))

        response = await client.get(f"{API}/profile")

        assert response.status_code == 200
        assert response.json()["id"] == account.id

    @pytest.mark.asyncio
    async def test_blocked_account_is_cut_off(self, client, db):
        account = await create_account(db, status=AccountStatus.BLOCKED)

        response = await client.get(f"{API}/profile", headers=auth_headers(account))

        assert response.status_code == 403
        assert response.json() == {"message": BLOCKED_MESSAGE}

    @pytest.mark.asyncio
    async def test_agent_profile_merges_agent_fields(self, client, db):
        account, agent = await create_agent(db, profile={"bio": "Marina specialist"})

        response = await client.get(f"{API}/profile", headers=auth_headers(account))

        assert response.status_code == 200
        body = response.json()
        assert body["agent_id"] == agent.id
        assert body["bio"] == "Marina specialist"

    @pytest.mark.asyncio
    async def test_update_replaces_picture(self, client, db, media_store):
        old = managed("images/profiles/old.jpg")
        account = await create_account(db, profile_picture=old)

        response = await client.put(
            f"{API}/profile",
            headers=auth_headers(account),
            data={"name": "Renamed"},
            files={"profile_picture_file": ("new.jpg", b"jpeg-bytes", "image/jpeg")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Renamed"
        assert body["profile_picture"] == media_store.uploaded_urls[0]
        assert media_store.deleted_urls == [old]

    @pytest.mark.asyncio
    async def test_update_padded_taken_email(self, client, db, media_store):
        await create_account(db, email="taken@example.com")
        account = await create_account(db)

        response = await client.put(
            f"{API}/profile",
            headers=auth_headers(account),
            data={"email": "Taken@example.com "},
            files={"profile_picture_file": ("new.jpg", b"jpeg-bytes", "image/jpeg")},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "User already exists with this email or phone"}
        assert media_store.call_count == 0

    @pytest.mark.asyncio
    async def test_update_bad_json_field(self, client, db, media_store):
        account, _ = await create_agent(db)

        response = await client.put(
            f"{API}/profile",
            headers=auth_headers(account),
            data={"languages": "[English"},
            files={"profile_picture_file": ("new.jpg", b"jpeg-bytes", "image/jpeg")},
        )

        assert response.status_code == 400
        assert "languages" in response.json()["message"]
        assert media_store.call_count == 0


@pytest.mark.integration
class TestAdmin:
    @pytest.mark.asyncio
    async def test_list_is_admin_only(self, client, db):
        user = await create_account(db)

        response = await client.get(API, headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized as admin"}

    @pytest.mark.asyncio
    async def test_list_paginates(self, client, db):
        admin = await create_account(db, role=Role.ADMIN)
        for _ in range(3):
            await create_account(db)

        response = await client.get(API, headers=auth_headers(admin), params={"limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["pages"] == 2
        assert body["page"] == 1
        assert len(body["items"]) == 2

    @pytest.mark.asyncio
    async def test_status_toggle_and_role(self, client, db):
        admin = await create_account(db, role=Role.ADMIN)
        user = await create_account(db)

        response = await client.put(f"{API}/{user.id}/status", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json() == {"message": "User status updated to blocked"}

        response = await client.put(
            f"{API}/{user.id}/status", headers=auth_headers(admin), json={"status": "active"}
        )
        assert response.json() == {"message": "User status updated to active"}

        response = await client.put(
            f"{API}/{user.id}/role", headers=auth_headers(admin), json={"role": "agent"}
        )
        assert response.json() == {"message": "User role updated to agent"}

    @pytest.mark.asyncio
    async def test_delete_cascades(self, client, db, media_store):
        admin = await create_account(db, role=Role.ADMIN)
        account, _ = await create_agent(db, profile_picture=managed("images/profiles/a.jpg"))
        await create_listing(db, account, hero_image=managed("images/properties/h.jpg"))

        response = await client.delete(f"{API}/{account.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert (
            await db.execute(select(Account).where(Account.id == account.id))
        ).first() is None
        assert set(media_store.deleted_urls) == {
            managed("images/profiles/a.jpg"),
            managed("images/properties/h.jpg"),
        }

    @pytest.mark.asyncio
    async def test_delete_unknown(self, client, db):
        admin = await create_account(db, role=Role.ADMIN)

        response = await client.delete(f"{API}/missing", headers=auth_headers(admin))

        assert response.status_code == 404
        assert response.json() == {"message": "User not found"}

    @pytest.mark.asyncio
    async def test_stats_for_agents(self, client, db):
        account, _ = await create_agent(db)
        await create_listing(db, account)

        response = await client.get(f"{API}/stats", headers=auth_headers(account))

        assert response.status_code == 200
        assert response.json() == {"listings": 1, "agents": 1, "users": 0}

    @pytest.mark.asyncio
    async def test_stats_refused_for_users(self, client, db):
        user = await create_account(db)

        response = await client.get(f"{API}/stats", headers=auth_headers(user))

        assert response.status_code == 403
