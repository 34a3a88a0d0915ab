import logging

from sqlalchemy.orm import Session

from agrovision.core.config import Settings
from agrovision.core.permissions import AccessScope, AccountStatus, Role, default_permissions
from agrovision.core.security import get_password_hash
from agrovision.db import models
from agrovision.db.session import Database
from agrovision.users.repository import AccountRepository

logger = logging.getLogger(__name__)


def ensure_admin(db: Session, email: str, password: str, name: str = "Administrador", reset_password: bool = False) -> models.Account:
    """Create the global admin, or bring an existing one back to an active admin state."""
    email = email.strip().lower()
    accounts = AccountRepository(db)
    account = accounts.get_by_email(email)
    if account is None:
        account = models.Account(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=Role.ADMIN.value,
            status=AccountStatus.ACTIVE.value,
            access_scope=AccessScope.GLOBAL.value,
            permissions=default_permissions(Role.ADMIN).model_dump(),
        )
        account = accounts.add(account)
        logger.info("admin account created email=%s", email)
        return account

    account.role = Role.ADMIN.value
    account.status = AccountStatus.ACTIVE.value
    account.access_scope = AccessScope.GLOBAL.value
    account.permissions = default_permissions(Role.ADMIN).model_dump()
    account.failed_login_attempts = 0
    account.locked_until = None
    if reset_password:
        account.password_hash = get_password_hash(password)
    logger.info("admin account refreshed email=%s", email)
    return accounts.save(account)


def seed_initial_data(database: Database, settings: Settings) -> None:
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return
    with database.session() as db:
        if AccountRepository(db).get_by_email(settings.ADMIN_EMAIL):
            return
        ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_NAME)
