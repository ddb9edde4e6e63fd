import pytest
from fastapi.testclient import TestClient

from govivid.catalog.schemas import CategoryResponse, ProjectResponse
from govivid.catalog.service import Catalog
from govivid.catalog.store import JsonCollectionStore
from govivid.main import create_app
from govivid.shared.config import Settings, SmtpSettings

ADMIN_SECRET = "let-me-in"
ADMIN_HEADERS = {"x-admin-secret": ADMIN_SECRET}


class FakeTransport:
    def __init__(self, fail_send=False):
        self.fail_send = fail_send
        self.sent = []

    def verify(self):
        pass

    def send(self, message):
        if self.fail_send:
            raise ConnectionResetError("connection dropped")
        self.sent.append(message)


class FakeTransportFactory:
    """Stands in for SmtpTransport; counts how often a transport is built."""

    def __init__(self, fail_verify=False, fail_send=False):
        self.fail_verify = fail_verify
        self.fail_send = fail_send
        self.calls = 0
        self.transports = []

    def __call__(self, settings):
        self.calls += 1
        if self.fail_verify:
            raise ConnectionRefusedError("smtp.test:587 refused connection")
        transport = FakeTransport(fail_send=self.fail_send)
        self.transports.append(transport)
        return transport

    @property
    def sent(self):
        return [message for transport in self.transports for message in transport.sent]


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        projects_file=str(tmp_path / "data" / "projects.json"),
        categories_file=str(tmp_path / "data" / "categories.json"),
        upload_dir=str(tmp_path / "uploads"),
        admin_secrets=(ADMIN_SECRET,),
        seed_categories=False,
        smtp=SmtpSettings(
            host="smtp.test",
            port="587",
            secure="false",
            user="site@govivid.test",
            password="secret",
            recipient="hello@govivid.test",
        ),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def mail_factory():
    return FakeTransportFactory()


@pytest.fixture
def app(settings, mail_factory):
    return create_app(settings, transport_factory=mail_factory)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def catalog(tmp_path):
    return Catalog(
        projects=JsonCollectionStore(str(tmp_path / "projects.json"), "projects", ProjectResponse),
        categories=JsonCollectionStore(str(tmp_path / "categories.json"), "categories", CategoryResponse),
    )
