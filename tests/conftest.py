import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base
import models_orm  # noqa: F401
from service_modules.document_store import DocumentStore
from service_modules.exceptions import UploadError
from service_modules.write_gateway import RemoteWriteGateway


class FakeUploader:
    """Stands in for Cloudinary. Records every reference it is asked to upload."""

    def __init__(self):
        self.calls = []
        self.fail = False

    async def upload(self, reference, folder=None):
        self.calls.append(reference)
        if self.fail:
            raise UploadError("Failed to upload image. Please try again.", title="Upload Failed")
        return f"https://res.cloudinary.com/demo/image/upload/v1/fitmaker_blogs/{len(self.calls)}.jpg"


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test_admin.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return DocumentStore(session_factory)


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def gateway(store, uploader):
    return RemoteWriteGateway(store, uploader)


@pytest.fixture
def client(store, gateway):
    from fastapi.testclient import TestClient
    from main import app
    from service_modules.base import get_document_store, get_write_gateway

    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_write_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()
