from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    OPERATOR = "operator"
    VIEWER = "viewer"


class AccountStatus(str, Enum):
    ACTIVE = "ativo"
    INACTIVE = "inativo"
    SUSPENDED = "suspenso"


class AccessScope(str, Enum):
    GLOBAL = "global"
    CLIENT = "cliente-especifico"


class Resource(str, Enum):
    CLIENTS = "clientes"
    PROPERTIES = "propriedades"
    AREAS = "areas"
    CROPS = "culturas"
    PESTS = "pragas"
    LOSSES = "perdas"
    USERS = "usuarios"
    REPORTS = "relatorios"


class Action(str, Enum):
    VIEW = "visualizar"
    CREATE = "criar"
    EDIT = "editar"
    DELETE = "excluir"
    EXPORT = "exportar"


CRUD_RESOURCES = (
    Resource.CLIENTS,
    Resource.PROPERTIES,
    Resource.AREAS,
    Resource.CROPS,
    Resource.PESTS,
    Resource.LOSSES,
    Resource.USERS,
)
CRUD_ACTIONS = (Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE)
REPORT_ACTIONS = (Action.VIEW, Action.EXPORT)

PERMISSION_PAIRS = frozenset(
    [(resource, action) for resource in CRUD_RESOURCES for action in CRUD_ACTIONS]
    + [(Resource.REPORTS, action) for action in REPORT_ACTIONS]
)


class CrudPermissions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    visualizar: bool = False
    criar: bool = False
    editar: bool = False
    excluir: bool = False


class ReportPermissions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    visualizar: bool = False
    exportar: bool = False


class PermissionMatrix(BaseModel):
    """Fixed map of resource -> allowed actions stored on every account."""

    model_config = ConfigDict(extra="forbid")

    clientes: CrudPermissions = Field(default_factory=CrudPermissions)
    propriedades: CrudPermissions = Field(default_factory=CrudPermissions)
    areas: CrudPermissions = Field(default_factory=CrudPermissions)
    culturas: CrudPermissions = Field(default_factory=CrudPermissions)
    pragas: CrudPermissions = Field(default_factory=CrudPermissions)
    perdas: CrudPermissions = Field(default_factory=CrudPermissions)
    usuarios: CrudPermissions = Field(default_factory=CrudPermissions)
    relatorios: ReportPermissions = Field(default_factory=ReportPermissions)

    def allows(self, resource: Resource | str, action: Action | str) -> bool:
        resource = Resource(resource)
        action = Action(action)
        if (resource, action) not in PERMISSION_PAIRS:
            raise ValueError(f"Permissao desconhecida: {resource.value}.{action.value}")
        return bool(getattr(getattr(self, resource.value), action.value))


def _crud(view: bool = False, create: bool = False, edit: bool = False, delete: bool = False) -> CrudPermissions:
    return CrudPermissions(visualizar=view, criar=create, editar=edit, excluir=delete)


def default_permissions(role: Role | str) -> PermissionMatrix:
    role = Role(role)
    if role == Role.ADMIN:
        full = _crud(True, True, True, True)
        return PermissionMatrix(
            **{resource.value: full.model_copy() for resource in CRUD_RESOURCES},
            relatorios=ReportPermissions(visualizar=True, exportar=True),
        )
    if role == Role.MANAGER:
        managed = _crud(True, True, True, False)
        return PermissionMatrix(
            clientes=managed.model_copy(),
            propriedades=managed.model_copy(),
            areas=managed.model_copy(),
            culturas=managed.model_copy(),
            pragas=managed.model_copy(),
            perdas=managed.model_copy(),
            usuarios=_crud(view=True),
            relatorios=ReportPermissions(visualizar=True, exportar=True),
        )
    if role == Role.OPERATOR:
        field_work = _crud(True, True, True, False)
        return PermissionMatrix(
            clientes=_crud(view=True),
            propriedades=_crud(view=True),
            areas=field_work.model_copy(),
            culturas=field_work.model_copy(),
            pragas=field_work.model_copy(),
            perdas=field_work.model_copy(),
            relatorios=ReportPermissions(visualizar=True),
        )
    read_only = _crud(view=True)
    return PermissionMatrix(
        clientes=read_only.model_copy(),
        propriedades=read_only.model_copy(),
        areas=read_only.model_copy(),
        culturas=read_only.model_copy(),
        pragas=read_only.model_copy(),
        perdas=read_only.model_copy(),
        relatorios=ReportPermissions(visualizar=True),
    )
