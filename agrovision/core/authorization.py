from typing import Iterable, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Query, Session

from agrovision.core.errors import Unauthorized
from agrovision.core.permissions import AccessScope, Action, PermissionMatrix, Resource, Role
from agrovision.core.security import get_current_account
from agrovision.db import models
from agrovision.db.session import get_db
from agrovision.users.repository import AccountRepository


def is_admin(account: models.Account) -> bool:
    return account.role == Role.ADMIN.value


def has_global_access(account: models.Account) -> bool:
    return account.access_scope == AccessScope.GLOBAL.value


def linked_client_ids(account: models.Account) -> list[str]:
    return [str(client_id) for client_id in (account.client_ids or [])]


def permission_matrix(account: models.Account) -> PermissionMatrix:
    return PermissionMatrix.model_validate(account.permissions or {})


def has_permission(account: models.Account, resource: Resource, action: Action) -> bool:
    if is_admin(account):
        return True
    return permission_matrix(account).allows(resource, action)


def ensure_permission(account: models.Account, resource: Resource, action: Action) -> None:
    if not has_permission(account, resource, action):
        raise Unauthorized(
            "Permissao insuficiente",
            recurso=Resource(resource).value,
            acao=Action(action).value,
        )


def can_access_client(account: models.Account, client_id: Optional[str]) -> bool:
    if has_global_access(account):
        return True
    return client_id is not None and str(client_id) in linked_client_ids(account)


def allowed_client_ids(account: models.Account) -> Optional[list[str]]:
    """Client ids visible to the account, ``None`` meaning every client."""
    if has_global_access(account):
        return None
    client_ids = linked_client_ids(account)
    if not client_ids:
        raise Unauthorized("Usuario nao vinculado a nenhum cliente")
    return client_ids


def ensure_client_access(account: models.Account, client_id: Optional[str]) -> None:
    allowed = allowed_client_ids(account)
    if allowed is None:
        return
    if client_id is None or str(client_id) not in allowed:
        raise Unauthorized("Acesso negado ao cliente especificado", clienteSolicitado=client_id)


def apply_client_scope(query: Query, account: models.Account, client_field) -> Query:
    allowed = allowed_client_ids(account)
    if allowed is None:
        return query
    return query.filter(client_field.in_(allowed))


def shares_client(account: models.Account, other: models.Account) -> bool:
    return bool(set(linked_client_ids(account)) & set(linked_client_ids(other)))


def require_roles(*roles: Role):
    allowed = {Role(role).value for role in roles}

    def _dependency(account: models.Account = Depends(get_current_account)) -> models.Account:
        if account.role not in allowed:
            raise Unauthorized("Acesso negado", requiredRoles=sorted(allowed), userRole=account.role)
        return account

    return _dependency


def require_permission(resource: Resource, action: Action):
    def _dependency(account: models.Account = Depends(get_current_account)) -> models.Account:
        ensure_permission(account, resource, action)
        return account

    return _dependency


def require_permissions(*pairs: tuple[Resource, Action]):
    def _dependency(account: models.Account = Depends(get_current_account)) -> models.Account:
        for resource, action in pairs:
            ensure_permission(account, resource, action)
        return account

    return _dependency


def _target_client_id(request: Request) -> Optional[str]:
    return (
        request.path_params.get("client_id")
        or request.query_params.get("clienteId")
        or request.query_params.get("clientId")
    )


def require_client_access():
    """Gate on the client id carried in the path or query string.

    Body-supplied ids are checked by the services once the payload is parsed.
    """

    def _dependency(
        request: Request,
        account: models.Account = Depends(get_current_account),
    ) -> models.Account:
        allowed = allowed_client_ids(account)
        target = _target_client_id(request)
        if allowed is not None and target and target not in allowed:
            raise Unauthorized("Acesso negado ao cliente especificado", clienteSolicitado=target)
        return account

    return _dependency


def can_act_on_account(actor: models.Account, target: Optional[models.Account], target_id: str) -> bool:
    """Route gate for self-or-admin endpoints.

    Any admin passes here, as in ``has_permission``; the service still applies
    ``can_modify_account`` to the target.
    """
    if is_admin(actor):
        return True
    if actor.id == target_id:
        return True
    if target is not None and actor.role == Role.MANAGER.value and shares_client(actor, target):
        return True
    return False


def require_self_or_admin(param: str = "user_id"):
    def _dependency(
        request: Request,
        account: models.Account = Depends(get_current_account),
        db: Session = Depends(get_db),
    ) -> models.Account:
        target_id = request.path_params.get(param)
        target = AccountRepository(db).get(target_id) if target_id else None
        if not can_act_on_account(account, target, target_id):
            raise Unauthorized(
                "Voce so pode acessar seus proprios dados ou usuarios dos mesmos clientes"
            )
        return account

    return _dependency


def filter_client_ids(actor: models.Account, client_ids: Iterable[str]) -> list[str]:
    """Drop client ids the actor cannot hand out to another account."""
    requested = [str(client_id) for client_id in client_ids]
    allowed = None if has_global_access(actor) else set(linked_client_ids(actor))
    if allowed is None:
        return requested
    return [client_id for client_id in requested if client_id in allowed]
