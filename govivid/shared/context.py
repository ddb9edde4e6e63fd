"""
Server context

Holds the state shared by all request handlers: settings, the catalog,
the mail relay and the upload handler. One context is created per app and
stored on ``app.state.context``.
"""

import os
from dataclasses import dataclass

from fastapi import Request

from govivid.catalog.service import Catalog
from govivid.contact.relay import MailRelay
from govivid.shared.config import Settings
from govivid.uploads.handler import UploadHandler


@dataclass
class ServerContext:
    settings: Settings
    catalog: Catalog
    mail: MailRelay
    uploads: UploadHandler
    admin_warning_emitted: bool = False

    def startup(self) -> None:
        """Prepare directories, seed default data and verify the mail transport."""
        os.makedirs(self.settings.upload_dir, exist_ok=True)
        if self.settings.seed_categories:
            self.catalog.seed_default_categories()
        self.mail.initialize()


def get_context(request: Request) -> ServerContext:
    """
    Dependency returning the context of the app serving this request.

    Usage in endpoints:
    @router.get("/endpoint")
    def endpoint(context: ServerContext = Depends(get_context)):
        pass
    """
    return request.app.state.context
