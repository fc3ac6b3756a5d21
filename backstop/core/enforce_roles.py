"""Role Enforcement - the single authorization check shared by every gated operation.

Invariants:
    - require_role is PURE: no IO, no mutation; it raises before any state is touched
    - Callers never compare role values themselves

Design Decisions:
    - Raise instead of returning an error dict: gated operations must abort before
      reading the ledger, and an exception cannot be ignored by accident
"""

from backstop.core.domain_types import Role
from backstop.core.errors import AuthorizationError, ErrorContext

_ROLE_MESSAGES = {
    Role.GUARANTOR: "not a guarantor",
    Role.INVESTOR: "not an investor",
    Role.ENTITY: "not an entity",
}


def has_role(actor: object, role: Role) -> bool:
    """True if the actor's role attribute equals the required role."""
    # str Enum: a raw "guarantor" column value compares equal to Role.GUARANTOR
    return getattr(actor, "role", None) == role


def require_role(
    actor: object, role: Role, context: ErrorContext | None = None,
) -> None:
    """Raise AuthorizationError unless actor holds role."""
    if not has_role(actor, role):
        raise AuthorizationError(
            _ROLE_MESSAGES[role], required_role=role.value, context=context,
        )
