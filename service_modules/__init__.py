"""
Services package - the collection sync layer and its collaborators.
"""
from .exceptions import AdminError, ValidationError, UploadError, WriteError, SubscriptionError, DocumentNotFound
from .document_store import DocumentStore, Subscription, sort_records
from .entities import ENTITIES, EntityConfig, get_entity
from .sync_controller import CollectionSyncController, SyncState, SubmitResult
from .base import document_store, write_gateway, get_document_store, get_write_gateway, new_controller

__all__ = [
    'AdminError',
    'ValidationError',
    'UploadError',
    'WriteError',
    'SubscriptionError',
    'DocumentNotFound',
    'DocumentStore',
    'Subscription',
    'sort_records',
    'ENTITIES',
    'EntityConfig',
    'get_entity',
    'CollectionSyncController',
    'SyncState',
    'SubmitResult',
    'document_store',
    'write_gateway',
    'get_document_store',
    'get_write_gateway',
    'new_controller',
]
