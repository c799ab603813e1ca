"""
Base service utilities and shared instances.
All routes should get the store, gateway and controllers from here.
"""
import logging

from .document_store import DocumentStore
from .entities import ENTITIES, EntityConfig, get_entity
from .sync_controller import CollectionSyncController
from .upload_helper import get_media_uploader
from .write_gateway import RemoteWriteGateway

logger = logging.getLogger("fitmaker_admin")

# Global instances
document_store = DocumentStore()
write_gateway = RemoteWriteGateway(document_store, get_media_uploader())


def get_document_store() -> DocumentStore:
    return document_store


def get_write_gateway() -> RemoteWriteGateway:
    return write_gateway


def new_controller(entity: EntityConfig, store: DocumentStore = None,
                   gateway: RemoteWriteGateway = None) -> CollectionSyncController:
    """One controller per screen (or request). Callers own its subscription."""
    return CollectionSyncController(entity, store or document_store, gateway or write_gateway)


__all__ = [
    'logger', 'document_store', 'write_gateway',
    'get_document_store', 'get_write_gateway', 'new_controller',
    'ENTITIES', 'EntityConfig', 'get_entity',
]
