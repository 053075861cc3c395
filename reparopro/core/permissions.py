import logging

from reparopro.core.settings import UserRole
from reparopro.exceptions.errors import AccessDenied
from reparopro.schemas.user import UserObject

logger = logging.getLogger(__name__)

EDITOR_ROLES = (UserRole.ADMIN, UserRole.ESTIMATOR)
APPROVER_ROLES = (UserRole.ADMIN, UserRole.ESTIMATOR)
DELETE_ROLES = (UserRole.ADMIN,)


def require_active(actor: UserObject) -> None:
    if actor is None or not actor.is_active:
        raise AccessDenied("Usuário inativo ou não autenticado")


def require_role(actor: UserObject, *roles: UserRole) -> None:
    require_active(actor)
    if actor.role not in roles:
        logger.warning(f"User {actor.id} with role {actor.role.value} denied; requires {[r.value for r in roles]}")
        raise AccessDenied(
            "Você não tem permissão para executar esta ação",
            {"role": actor.role.value},
        )


def can_edit(actor: UserObject) -> bool:
    return actor.is_active and actor.role in EDITOR_ROLES
