import logging
from typing import Optional

from sqlalchemy.orm import Session

from agrovision.common.pagination import PaginationParams, paginated
from agrovision.core.authorization import (
    allowed_client_ids,
    ensure_client_access,
    filter_client_ids,
    has_global_access,
    has_permission,
    is_admin,
    linked_client_ids,
)
from agrovision.core.errors import Conflict, NotFound, Unauthorized, ValidationError
from agrovision.core.permissions import AccessScope, Action, Resource, Role, default_permissions
from agrovision.core.security import get_password_hash
from agrovision.db import models
from agrovision.users.repository import AccountRepository
from agrovision.users.schemas import UserCreate, UserUpdate, to_response

logger = logging.getLogger(__name__)


def can_view_account(actor: models.Account, target: models.Account) -> bool:
    if is_admin(actor) or actor.id == target.id or has_global_access(actor):
        return True
    if target.access_scope == AccessScope.GLOBAL.value:
        return False
    return bool(set(linked_client_ids(actor)) & set(linked_client_ids(target)))


def can_modify_account(actor: models.Account, target: models.Account) -> bool:
    if is_admin(actor):
        return target.role != Role.ADMIN.value or actor.id == target.id
    if target.role == Role.ADMIN.value:
        return False
    if not has_permission(actor, Resource.USERS, Action.EDIT):
        return False
    return can_view_account(actor, target)


def can_assign_role(actor: models.Account, role: Role) -> bool:
    if is_admin(actor):
        return True
    if role == Role.ADMIN:
        return False
    if actor.role == Role.MANAGER.value:
        return role in (Role.OPERATOR, Role.VIEWER)
    return False


class UserService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.accounts = AccountRepository(db)

    def _get_or_404(self, user_id: str) -> models.Account:
        account = self.accounts.get(user_id)
        if not account:
            raise NotFound("Usuario nao encontrado")
        return account

    def _checked_client_ids(self, actor: models.Account, client_ids: list[str]) -> list[str]:
        client_ids = filter_client_ids(actor, client_ids)
        if not client_ids:
            return []
        found = {
            client_id
            for (client_id,) in self.db.query(models.Client.id)
            .filter(models.Client.id.in_(client_ids), models.Client.deleted_at.is_(None))
            .all()
        }
        missing = [client_id for client_id in client_ids if client_id not in found]
        if missing:
            raise ValidationError("Cliente vinculado nao encontrado", clientes=missing)
        return client_ids

    def _ensure_scope_grant(self, actor: models.Account, scope: Optional[AccessScope]) -> None:
        if scope == AccessScope.GLOBAL and not is_admin(actor):
            raise Unauthorized("Apenas administradores podem conceder acesso global")

    def search(
        self,
        actor: models.Account,
        params: PaginationParams,
        *,
        q: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        access_scope: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> dict:
        visible = None
        if not (is_admin(actor) or has_global_access(actor)):
            visible = allowed_client_ids(actor)
            if client_id:
                ensure_client_access(actor, client_id)
        query = self.accounts.search(
            q=q,
            role=role,
            status=status,
            access_scope=access_scope,
            client_id=client_id,
            visible_client_ids=visible,
        )
        items, total = self.accounts.paginate(query, params)
        return paginated([to_response(item) for item in items], total, params)

    def get(self, actor: models.Account, user_id: str) -> models.Account:
        account = self._get_or_404(user_id)
        if not can_view_account(actor, account):
            raise Unauthorized("Sem permissao para acessar este usuario")
        return account

    def create(self, actor: Optional[models.Account], payload: UserCreate, *, conflict_status: int = 400) -> models.Account:
        if actor is not None:
            if not can_assign_role(actor, payload.role):
                raise Unauthorized(f"Sem permissao para criar usuario com role {payload.role.value}")
            self._ensure_scope_grant(actor, payload.tipoAcesso)
        if self.accounts.email_taken(payload.email):
            raise Conflict("Email ja esta em uso", status_code=conflict_status)

        permissions = payload.permissoes or default_permissions(payload.role)
        client_ids = payload.clientesVinculados
        if actor is not None:
            client_ids = self._checked_client_ids(actor, client_ids)

        account = models.Account(
            name=payload.nome,
            email=payload.email,
            password_hash=get_password_hash(payload.senha),
            phone=payload.telefone,
            avatar=payload.avatar,
            role=payload.role.value,
            status=payload.status.value,
            access_scope=payload.tipoAcesso.value,
            permissions=permissions.model_dump(),
            created_by=actor.id if actor else None,
        )
        account.client_ids = client_ids
        account = self.accounts.add(account)
        logger.info("account created id=%s role=%s by=%s", account.id, account.role, account.created_by)
        return account

    def update(self, actor: models.Account, user_id: str, payload: UserUpdate) -> models.Account:
        account = self._get_or_404(user_id)
        if not can_modify_account(actor, account):
            raise Unauthorized("Sem permissao para modificar este usuario")
        if payload.role is not None and not can_assign_role(actor, payload.role):
            raise Unauthorized(f"Sem permissao para atribuir role {payload.role.value}")
        self._ensure_scope_grant(actor, payload.tipoAcesso)

        data = payload.model_dump(exclude_unset=True)
        if "email" in data and data["email"] is not None and data["email"] != account.email:
            if self.accounts.email_taken(data["email"], exclude_id=account.id):
                raise Conflict("Email ja esta em uso")
            account.email = data["email"]
        if data.get("nome") is not None:
            account.name = data["nome"]
        if "telefone" in data:
            account.phone = data["telefone"]
        if "avatar" in data:
            account.avatar = data["avatar"]
        if payload.role is not None:
            account.role = payload.role.value
        if payload.status is not None:
            account.status = payload.status.value
        if payload.tipoAcesso is not None:
            account.access_scope = payload.tipoAcesso.value
        if payload.clientesVinculados is not None:
            account.client_ids = self._checked_client_ids(actor, payload.clientesVinculados)
        if payload.permissoes is not None:
            account.permissions = payload.permissoes.model_dump()
        return self.accounts.save(account)

    def delete(self, actor: models.Account, user_id: str) -> None:
        if user_id == actor.id:
            raise ValidationError("Nao e possivel excluir seu proprio usuario")
        account = self._get_or_404(user_id)
        if not can_modify_account(actor, account):
            raise Unauthorized("Sem permissao para excluir este usuario")
        self.accounts.soft_delete(account)
        logger.info("account deleted id=%s by=%s", account.id, actor.id)

    def set_password(self, actor: models.Account, user_id: str, new_password: str) -> None:
        account = self._get_or_404(user_id)
        if account.id != actor.id and not can_modify_account(actor, account):
            raise Unauthorized("Sem permissao para alterar senha deste usuario")
        account.password_hash = get_password_hash(new_password)
        account.failed_login_attempts = 0
        account.locked_until = None
        self.accounts.save(account)

    def for_client(self, actor: models.Account, client_id: str) -> list[models.Account]:
        ensure_client_access(actor, client_id)
        return self.accounts.active_for_client(client_id)
