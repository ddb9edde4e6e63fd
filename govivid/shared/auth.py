"""
Admin secret authentication

Mutating catalog and upload routes require the admin password in the
x-admin-secret header. Accepted values come from the environment; when none
is configured every request is let through and a warning is logged once.
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader

from govivid.shared.context import ServerContext, get_context
from govivid.shared.errors import Unauthorized

# Setup logging
logger = logging.getLogger(__name__)

# Admin secret header name
ADMIN_SECRET_HEADER = "x-admin-secret"

admin_secret_header = APIKeyHeader(name=ADMIN_SECRET_HEADER, auto_error=False)


def is_authorized(secret: Optional[str], accepted: tuple[str, ...]) -> bool:
    """Constant-time match of a client secret against the accepted values."""
    if not secret:
        return False
    matched = False
    for candidate in accepted:
        # Compare against every candidate so timing doesn't reveal which matched
        if hmac.compare_digest(secret.encode(), candidate.encode()):
            matched = True
    return matched


async def require_admin(
    secret: Optional[str] = Security(admin_secret_header),
    context: ServerContext = Depends(get_context),
) -> Optional[str]:
    """
    Dependency to validate the admin secret header

    Usage in endpoints:
    @router.post("/protected")
    def protected_endpoint(admin: Optional[str] = Depends(require_admin)):
        pass
    """
    accepted = context.settings.admin_secrets
    if not accepted:
        if not context.admin_warning_emitted:
            logger.warning(
                "Admin authentication disabled - no ADMIN_PASSWORD configured. "
                "All admin routes are open."
            )
            context.admin_warning_emitted = True
        return None

    if not is_authorized(secret, accepted):
        logger.warning("Rejected admin request with missing or invalid secret")
        raise Unauthorized("Unauthorized")

    return secret
