"""Credential checks, login throttling and token issuance."""
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from agrovision.auth.schemas import LoginResponse
from agrovision.core.config import Settings
from agrovision.core.errors import AccountLocked, InvalidCredentials, Unauthenticated
from agrovision.core.permissions import AccountStatus
from agrovision.core.security import create_access_token, get_password_hash, token_claims, verify_password
from agrovision.db import models
from agrovision.users.repository import AccountRepository
from agrovision.users.schemas import UserCreate, to_response
from agrovision.users.service import UserService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, settings: Settings) -> None:
        self.db = db
        self.settings = settings
        self.accounts = AccountRepository(db)

    def login(self, email: str, password: str) -> LoginResponse:
        account = self.accounts.get_by_email(email)
        if not account:
            logger.warning("login failed email=%s reason=unknown_account", email)
            raise InvalidCredentials()
        if account.status != AccountStatus.ACTIVE.value:
            logger.warning("login failed account=%s reason=inactive status=%s", account.id, account.status)
            raise InvalidCredentials("Conta inativa ou suspensa", motivo="conta_inativa")

        now = datetime.utcnow()
        if account.locked_until is not None:
            if account.locked_until > now:
                logger.warning("login refused account=%s reason=locked until=%s", account.id, account.locked_until)
                raise AccountLocked(motivo="conta_bloqueada", bloqueadoAte=account.locked_until.isoformat())
            # lockout window elapsed
            account.failed_login_attempts = 0
            account.locked_until = None

        if not verify_password(password, account.password_hash):
            self._register_failure(account, now)
            raise InvalidCredentials()

        account.failed_login_attempts = 0
        account.locked_until = None
        account.last_login_at = now
        self.accounts.save(account)

        token = create_access_token(token_claims(account), self.settings)
        logger.info("login ok account=%s role=%s", account.id, account.role)
        return LoginResponse(
            token=token,
            expiresIn=self.settings.access_token_expires_in,
            user=to_response(account),
        )

    def _register_failure(self, account: models.Account, now: datetime) -> None:
        account.failed_login_attempts = (account.failed_login_attempts or 0) + 1
        if account.failed_login_attempts >= self.settings.LOGIN_MAX_ATTEMPTS:
            account.locked_until = now + timedelta(minutes=self.settings.LOGIN_LOCKOUT_MINUTES)
            logger.warning(
                "account locked account=%s attempts=%s until=%s",
                account.id,
                account.failed_login_attempts,
                account.locked_until,
            )
        else:
            logger.warning("login failed account=%s attempts=%s", account.id, account.failed_login_attempts)
        self.accounts.save(account)

    def register(self, actor: models.Account, payload: UserCreate) -> models.Account:
        return UserService(self.db).create(actor, payload, conflict_status=409)

    def change_password(self, account: models.Account, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, account.password_hash):
            raise Unauthenticated("Senha atual incorreta")
        account.password_hash = get_password_hash(new_password)
        self.accounts.save(account)
        logger.info("password changed account=%s", account.id)
