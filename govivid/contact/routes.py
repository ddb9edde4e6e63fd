"""
Contact API

Relays contact form submissions to the configured mailbox.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from govivid.shared.context import ServerContext, get_context
from govivid.shared.errors import (
    BadRequest,
    InternalError,
    ServiceUnavailable,
    log_and_sanitize_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])


class ContactRequest(BaseModel):
    # All optional here; missing fields are reported as a single 400 below
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ContactResponse(BaseModel):
    ok: bool = True
    id: str


@router.post("/contact", response_model=ContactResponse)
def send_contact(
    form: ContactRequest,
    request: Request,
    context: ServerContext = Depends(get_context),
):
    """Send a contact form submission by email."""
    logger.info(
        f"Contact form request - host: {request.headers.get('host')}, "
        f"origin: {request.headers.get('origin')}, email: {form.email}"
    )

    fields = [(value or "").strip() for value in (form.name, form.email, form.subject, form.message)]
    if not all(fields):
        raise BadRequest("Missing required fields")
    name, email, subject, message = fields

    # These end up in mail headers
    if any("\r" in value or "\n" in value for value in (name, email, subject)):
        raise BadRequest("Invalid characters in name, email or subject")

    if not context.mail.ensure_ready():
        raise ServiceUnavailable("Mail transport not ready")

    try:
        message_id = context.mail.send_contact(name, email, subject, message)
    except Exception as e:
        sanitized, _ = log_and_sanitize_error(e, "Sending contact email", "Failed to send email")
        raise InternalError(sanitized)

    return ContactResponse(id=message_id)
