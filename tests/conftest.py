import pytest

from contact_inbox.app import create_app
from contact_inbox.config import Config
from contact_inbox.handler import SubmissionHandler
from contact_inbox.inbox import InboxWriter
from contact_inbox.relay import DisabledRelay


@pytest.fixture
def inbox_path(tmp_path):
    return str(tmp_path / "data" / "inbox.jsonl")


@pytest.fixture
def writer(inbox_path):
    return InboxWriter(inbox_path, fsync=False)


@pytest.fixture
def valid_payload():
    return {
        "name": "Jane",
        "email": "jane@x.com",
        "phone": "555-0100",
        "service": "Consulting",
        "message": "Hi",
    }


@pytest.fixture
def config(tmp_path):
    return Config(inbox_dir=str(tmp_path / "data"), inbox_fsync=False)


@pytest.fixture
def handler(writer):
    h = SubmissionHandler(writer, DisabledRelay())
    yield h
    h.close()


@pytest.fixture
def app(config):
    """Create a Flask test app with relay disabled."""
    application = create_app(config)
    application.config["TESTING"] = True
    yield application
    application.config["components"]["handler"].close()


@pytest.fixture
def client(app):
    return app.test_client()
