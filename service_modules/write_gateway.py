"""
Remote Write Gateway - create/update/delete against the document store.

Pending local media references are uploaded before the write. If an upload
fails nothing is written, and a record whose media already points at a
remote URL is never re-uploaded.
"""
import logging

from .document_store import DocumentStore
from .entities import EntityConfig, iso_now
from .exceptions import UploadError, WriteError, DocumentNotFound
from .upload_helper import MediaUploader, is_remote_url

logger = logging.getLogger("fitmaker_admin")


class RemoteWriteGateway:
    def __init__(self, store: DocumentStore, uploader: MediaUploader):
        self.store = store
        self.uploader = uploader

    def needs_upload(self, entity: EntityConfig, fields: dict) -> list:
        return [
            f for f in entity.media_fields
            if fields.get(f) and not is_remote_url(fields[f])
        ]

    async def resolve_media(self, entity: EntityConfig, fields: dict) -> dict:
        """Return a copy of `fields` with every local media reference replaced by its remote URL."""
        resolved = dict(fields)
        for field in self.needs_upload(entity, fields):
            try:
                resolved[field] = await self.uploader.upload(fields[field])
            except UploadError:
                raise
            except Exception as e:
                logger.error(f"Upload of {entity.collection}.{field} failed: {e}")
                raise UploadError("Failed to upload image. Please try again.", title="Upload Failed")
        return resolved

    async def create(self, entity: EntityConfig, fields: dict) -> str:
        data = await self.resolve_media(entity, fields)
        data[entity.created_field] = entity.created_value()
        data.pop("id", None)
        try:
            doc_id = await self.store.create(entity.collection, data)
        except Exception as e:
            logger.error(f"Error creating {entity.collection} document: {e}")
            raise WriteError(entity.messages["save_failed"])
        logger.info(f"Created {entity.collection}/{doc_id}")
        return doc_id

    async def update(self, entity: EntityConfig, doc_id: str, fields: dict):
        data = await self.resolve_media(entity, fields)
        # The creation stamp belongs to the first write only
        data.pop(entity.created_field, None)
        data.pop("id", None)
        data[entity.updated_field] = iso_now()
        try:
            await self.store.update(entity.collection, doc_id, data)
        except DocumentNotFound:
            raise
        except Exception as e:
            logger.error(f"Error updating {entity.collection}/{doc_id}: {e}")
            raise WriteError(entity.messages["save_failed"])
        logger.info(f"Updated {entity.collection}/{doc_id}")

    async def patch(self, entity: EntityConfig, doc_id: str, fields: dict):
        """Merge a few fields without touching timestamps (status flags)."""
        try:
            await self.store.update(entity.collection, doc_id, dict(fields))
        except DocumentNotFound:
            raise
        except Exception as e:
            logger.error(f"Error updating {entity.collection}/{doc_id}: {e}")
            raise WriteError(entity.messages["save_failed"])

    async def delete(self, entity: EntityConfig, doc_id: str):
        try:
            await self.store.delete(entity.collection, doc_id)
        except DocumentNotFound:
            raise
        except Exception as e:
            logger.error(f"Error deleting {entity.collection}/{doc_id}: {e}")
            raise WriteError(entity.messages["delete_failed"])
        logger.info(f"Deleted {entity.collection}/{doc_id}")
