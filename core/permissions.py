"""
Role allow-lists for every protected operation.

Each endpoint asks for a permission by name; the roles allowed to use it are
declared here and nowhere else.
"""
from typing import Dict, FrozenSet

from models.user import UserRole

ADMIN = UserRole.ADMIN
ESTABLISHMENT = UserRole.ESTABLISHMENT
MOTOBOY = UserRole.MOTOBOY

ALL_ROLES = frozenset({ADMIN, ESTABLISHMENT, MOTOBOY})

ROUTE_PERMISSIONS: Dict[str, FrozenSet[UserRole]] = {
    # auth
    "auth:me": ALL_ROLES,

    # orders
    "orders:list": ALL_ROLES,
    "orders:create": frozenset({ADMIN, ESTABLISHMENT}),
    "orders:read": ALL_ROLES,
    "orders:update": ALL_ROLES,
    "orders:assign": frozenset({ADMIN, ESTABLISHMENT}),
    "orders:respond": frozenset({MOTOBOY}),
    "orders:events": ALL_ROLES,
    "orders:reviews:read": ALL_ROLES,
    "orders:reviews:create": ALL_ROLES,

    # establishments
    "establishments:list": frozenset({ADMIN, ESTABLISHMENT}),
    "establishments:create": frozenset({ADMIN}),
    "establishments:read": frozenset({ADMIN, ESTABLISHMENT}),
    "establishments:update": frozenset({ADMIN, ESTABLISHMENT}),

    # motoboys
    "motoboys:list": frozenset({ADMIN, ESTABLISHMENT}),
    "motoboys:locations": frozenset({ADMIN, ESTABLISHMENT}),
    "motoboys:create": frozenset({ADMIN}),
    "motoboys:read": ALL_ROLES,
    "motoboys:update": frozenset({ADMIN, MOTOBOY}),
    "motoboys:self": frozenset({MOTOBOY}),

    # reports
    "reports:summary": frozenset({ADMIN}),
}


def allowed_roles(permission: str) -> FrozenSet[UserRole]:
    """Return the roles allowed for a permission; unknown names allow nobody."""
    return ROUTE_PERMISSIONS.get(permission, frozenset())
