"""
Authorization rules.

Role checks and the account-state checks applied at login and on every
authenticated request.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.account import Account, AccountStatus, Role
from src.models.agent_profile import AgentProfile, AgentStatus
from src.utils.errors import ForbiddenError

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "Your account has been blocked, contact administration"
INACTIVE_AGENT_MESSAGE = "Contact admin, your account is inactive"
SUSPENDED_AGENT_MESSAGE = "Your account is suspended, contact administration"


def require_role(account: Account, *roles: Role) -> None:
    """
    Raise ForbiddenError unless the account holds one of the roles.
    """
    allowed = {role.value for role in roles}
    if account.role not in allowed:
        logger.warning(
            f"Account {account.id} with role {account.role} denied, needs one of {sorted(allowed)}"
        )
        raise ForbiddenError(f"Not authorized as {' or '.join(sorted(allowed))}")


async def check_account_access(db: AsyncSession, account: Account) -> None:
    """
    Reject blocked accounts and agents whose profile is inactive or suspended.

    A missing agent profile is not an error; it is created lazily later.
    """
    if account.status == AccountStatus.BLOCKED.value:
        raise ForbiddenError(BLOCKED_MESSAGE)

    if account.role != Role.AGENT.value:
        return

    stmt = select(AgentProfile.status).where(AgentProfile.account_id == account.id)
    result = await db.execute(stmt)
    agent_status = result.scalars().first()

    if agent_status == AgentStatus.INACTIVE.value:
        raise ForbiddenError(INACTIVE_AGENT_MESSAGE)
    if agent_status == AgentStatus.SUSPENDED.value:
        raise ForbiddenError(SUSPENDED_AGENT_MESSAGE)
