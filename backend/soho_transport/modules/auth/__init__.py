# Authentication module

from soho_transport.modules.auth.dependencies import (
    get_current_claims,
    require_roles,
    require_school_admin,
    require_driver,
)

__all__ = [
    "get_current_claims",
    "require_roles",
    "require_school_admin",
    "require_driver",
]
