"""Tests for AccountService."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from src.models import Account, AccountStatus, AgentProfile, Listing, Role
from src.schemas.account import AccountUpdate, SignupData
from src.services.account_service import AccountService
from src.utils.constants import config
from src.utils.errors import AuthError, ForbiddenError, NotFoundError, ValidationError
from tests.utils.factories import (
    DEFAULT_PASSWORD,
    create_account,
    create_account_data,
    create_agent,
    create_listing,
    image_attachment,
)
from tests.utils.fakes import managed


@pytest.mark.unit
class TestSignup:
    @pytest.mark.asyncio
    async def test_regular_signup(self, db, reconciler, media_store):
        data = SignupData(**create_account_data(email="Jane@Example.com"))

        account = await AccountService.signup(db, reconciler, data)

        assert account.email == "jane@example.com"
        assert account.role == Role.USER.value
        assert account.status == AccountStatus.ACTIVE.value
        assert account.profile_picture == config.DEFAULT_AVATAR
        assert account.password_hash != DEFAULT_PASSWORD
        assert media_store.call_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested", ["admin", "superuser", None])
    async def test_only_agent_role_is_honoured(self, db, reconciler, requested):
        data = SignupData(**create_account_data(role=requested))

        account = await AccountService.signup(db, reconciler, data)

        assert account.role == Role.USER.value

    @pytest.mark.asyncio
    async def test_agent_signup_creates_profile(self, db, reconciler):
        data = SignupData(**create_account_data(name="Grand Gate", role="agent"))

        account = await AccountService.signup(db, reconciler, data)

        profile = (
            await db.execute(select(AgentProfile).where(AgentProfile.account_id == account.id))
        ).scalar_one()
        assert profile.slug == "grand-gate"
        assert profile.email == account.email
        assert profile.job_title == config.DEFAULT_AGENT_TITLE
        assert profile.status == "active"

    @pytest.mark.asyncio
    async def test_picture_file_is_uploaded(self, db, reconciler, media_store):
        data = SignupData(**create_account_data())

        account = await AccountService.signup(db, reconciler, data, image_attachment("me.jpg"))

        assert media_store.uploaded_urls == [account.profile_picture]
        assert media_store.uploads[0]["folder"] == config.PROFILE_IMAGE_FOLDER

    @pytest.mark.asyncio
    async def test_duplicate_contact_rejected_before_upload(self, db, reconciler, media_store):
        existing = await create_account(db)
        data = SignupData(**create_account_data(phone=existing.phone))

        with pytest.raises(ValidationError, match="already exists"):
            await AccountService.signup(db, reconciler, data, image_attachment())

        assert media_store.call_count == 0


@pytest.mark.unit
class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_login_by_email_any_case(self, db):
        account = await create_account(db, email="jane@example.com")

        found = await AccountService.authenticate(db, "JANE@example.com", DEFAULT_PASSWORD)

        assert found.id == account.id

    @pytest.mark.asyncio
    async def test_login_by_phone(self, db):
        account = await create_account(db, phone="0501234567")

        found = await AccountService.authenticate(db, "0501234567", DEFAULT_PASSWORD)

        assert found.id == account.id

    @pytest.mark.asyncio
    async def test_unknown_login(self, db):
        with pytest.raises(AuthError, match="Invalid email/phone or password"):
            await AccountService.authenticate(db, "nobody@example.com", DEFAULT_PASSWORD)

    @pytest.mark.asyncio
    async def test_wrong_password(self, db):
        account = await create_account(db)

        with pytest.raises(AuthError, match="Invalid email/phone or password"):
            await AccountService.authenticate(db, account.email, "wrong-password")

    @pytest.mark.asyncio
    async def test_blocked_account_cannot_log_in(self, db):
        account = await create_account(db, status=AccountStatus.BLOCKED)

        with pytest.raises(ForbiddenError):
            await AccountService.authenticate(db, account.email, DEFAULT_PASSWORD)


@pytest.mark.unit
class TestProfile:
    @pytest.mark.asyncio
    async def test_user_profile_has_no_agent_fields(self, db):
        account = await create_account(db)

        profile = await AccountService.get_profile(db, account)

        assert profile.id == account.id
        assert profile.agent_id is None

    @pytest.mark.asyncio
    async def test_agent_profile_is_created_when_missing(self, db):
        account = await create_account(db, role=Role.AGENT, name="Sara Ali")

        profile = await AccountService.get_profile(db, account)

        assert profile.slug == "sara-ali"
        assert profile.agent_status == "active"

    @pytest.mark.asyncio
    async def test_replacing_picture_deletes_old_upload(self, db, reconciler, media_store):
        old = managed("images/profiles/old.jpg")
        account = await create_account(db, profile_picture=old)

        updated = await AccountService.update_profile(
            db, reconciler, account, AccountUpdate(), image_attachment("new.jpg")
        )

        assert updated.profile_picture == media_store.uploaded_urls[0]
        assert media_store.deleted_urls == [old]

    @pytest.mark.asyncio
    async def test_default_picture_is_never_deleted(self, db, reconciler, media_store):
        account = await create_account(db)

        await AccountService.update_profile(
            db, reconciler, account, AccountUpdate(), image_attachment()
        )

        assert media_store.deleted == []

    @pytest.mark.asyncio
    async def test_name_only_update_touches_nothing_remote(self, db, reconciler, media_store):
        account = await create_account(db, profile_picture=managed("images/profiles/a.jpg"))

        updated = await AccountService.update_profile(
            db, reconciler, account, AccountUpdate(name="New Name")
        )

        assert updated.name == "New Name"
        assert updated.profile_picture == managed("images/profiles/a.jpg")
        assert media_store.call_count == 0

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected_before_upload(self, db, reconciler, media_store):
        other = await create_account(db)
        account = await create_account(db)

        with pytest.raises(ValidationError, match="already exists"):
            await AccountService.update_profile(
                db, reconciler, account, AccountUpdate(email=other.email), image_attachment()
            )

        assert media_store.call_count == 0

    @pytest.mark.asyncio
    async def test_padded_email_of_another_account_rejected(self, db, reconciler, media_store):
        await create_account(db, email="taken@x.com")
        account = await create_account(db)

        with pytest.raises(ValidationError, match="already exists"):
            await AccountService.update_profile(
                db, reconciler, account, AccountUpdate(email="Taken@x.com "), image_attachment()
            )

        assert media_store.call_count == 0

    @pytest.mark.asyncio
    async def test_email_is_stored_normalized(self, db, reconciler):
        account = await create_account(db)

        updated = await AccountService.update_profile(
            db, reconciler, account, AccountUpdate(email="  New@Example.com ")
        )

        assert updated.email == "new@example.com"

    @pytest.mark.asyncio
    async def test_agent_update_is_mirrored_to_profile(self, db, reconciler, media_store):
        old = managed("images/profiles/old.jpg")
        account, agent = await create_agent(
            db, profile_picture=old, profile={"avatar_url": old}
        )
        data = AccountUpdate(
            name="Omar Haddad",
            bio="Ten years in Dubai Marina",
            languages='["English", "Arabic"]',
            portfolio='[{"url": "https://youtu.be/tour", "kind": "video"}]',
        )

        await AccountService.update_profile(db, reconciler, account, data, image_attachment())

        await db.refresh(agent)
        assert agent.name == "Omar Haddad"
        assert agent.bio == "Ten years in Dubai Marina"
        assert agent.languages == ["English", "Arabic"]
        assert agent.portfolio == [{"url": "https://youtu.be/tour", "kind": "video"}]
        assert agent.avatar_url == account.profile_picture == media_store.uploaded_urls[0]
        assert media_store.deleted_urls == [old]

    @pytest.mark.asyncio
    async def test_malformed_json_rejected_before_upload(self, db, reconciler, media_store):
        account, _ = await create_agent(db)

        with pytest.raises(ValidationError, match="languages"):
            await AccountService.update_profile(
                db, reconciler, account, AccountUpdate(languages="[English"), image_attachment()
            )

        assert media_store.call_count == 0


@pytest.mark.unit
class TestDeleteAccount:
    @pytest.mark.asyncio
    async def test_cascade_removes_rows_then_media(self, db, reconciler, media_store):
        avatar = managed("images/profiles/agent.jpg")
        account, agent = await create_agent(
            db,
            profile_picture=avatar,
            profile={
                "avatar_url": avatar,
                "portfolio": [{"url": managed("images/profiles/p1.jpg"), "kind": "image"}],
            },
        )
        await create_listing(
            db,
            account,
            hero_image=managed("images/properties/hero.jpg"),
            gallery=[managed("images/properties/g1.jpg"), "https://cdn.example.com/x.jpg"],
            brochures=[{"title": "EN", "language": "en", "file_url": managed("files/b.pdf")}],
        )
        other_owner = await create_account(db, role=Role.ADMIN)
        shared = await create_listing(db, other_owner, agent_ids=[agent.id, "someone-else"])

        await AccountService.delete_account(db, reconciler, account.id)

        assert (await db.execute(select(Account).where(Account.id == account.id))).first() is None
        assert (await db.execute(select(AgentProfile))).first() is None
        remaining = (await db.execute(select(Listing))).scalars().all()
        assert [listing.id for listing in remaining] == [shared.id]
        await db.refresh(shared)
        assert shared.agent_ids == ["someone-else"]

        assert media_store.deleted_urls == [
            avatar,
            managed("images/profiles/p1.jpg"),
            managed("images/properties/hero.jpg"),
            managed("images/properties/g1.jpg"),
            managed("files/b.pdf"),
        ]

    @pytest.mark.asyncio
    async def test_delete_failures_do_not_fail_the_request(self, db, reconciler, media_store):
        account = await create_account(db, profile_picture=managed("images/profiles/a.jpg"))
        media_store.fail_deletes = True

        await AccountService.delete_account(db, reconciler, account.id)

        assert len(media_store.deleted) == 1
        assert (await db.execute(select(Account))).first() is None

    @pytest.mark.asyncio
    async def test_unknown_account(self, db, reconciler):
        with pytest.raises(NotFoundError, match="User not found"):
            await AccountService.delete_account(db, reconciler, "missing")


@pytest.mark.unit
class TestAdministration:
    @pytest.mark.asyncio
    async def test_list_excludes_caller_and_filters_role(self, db):
        admin = await create_account(db, role=Role.ADMIN)
        now = datetime.now()
        older = await create_account(db, created_at=now - timedelta(days=1))
        newer = await create_account(db, created_at=now)
        await create_agent(db)

        users, total = await AccountService.list_accounts(db, admin, role="user")

        assert total == 2
        assert [u.id for u in users] == [newer.id, older.id]

        everyone, total = await AccountService.list_accounts(db, admin, skip=0, limit=2)
        assert total == 3
        assert len(everyone) == 2
        assert admin.id not in {a.id for a in everyone}

    @pytest.mark.asyncio
    async def test_status_toggles_without_value(self, db):
        account = await create_account(db)

        blocked = await AccountService.update_status(db, account.id)
        assert blocked.status == "blocked"

        active = await AccountService.update_status(db, account.id)
        assert active.status == "active"

    @pytest.mark.asyncio
    async def test_invalid_status(self, db):
        account = await create_account(db)

        with pytest.raises(ValidationError, match="Invalid status"):
            await AccountService.update_status(db, account.id, "deleted")

    @pytest.mark.asyncio
    async def test_role_change(self, db):
        account = await create_account(db)

        updated = await AccountService.update_role(db, account.id, "agent")
        assert updated.role == "agent"

        with pytest.raises(ValidationError, match="Invalid role"):
            await AccountService.update_role(db, account.id, "owner")

    @pytest.mark.asyncio
    async def test_dashboard_stats_by_role(self, db):
        admin = await create_account(db, role=Role.ADMIN)
        await create_account(db)
        agent_account, _ = await create_agent(db)
        await create_listing(db, admin)
        await create_listing(db, agent_account)
        await create_listing(db, agent_account)

        admin_stats = await AccountService.dashboard_stats(db, admin)
        assert (admin_stats.listings, admin_stats.agents, admin_stats.users) == (3, 1, 1)

        agent_stats = await AccountService.dashboard_stats(db, agent_account)
        assert (agent_stats.listings, agent_stats.agents, agent_stats.users) == (2, 1, 0)

