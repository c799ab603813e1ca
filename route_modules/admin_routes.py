"""
Admin Routes - generic list/create/edit/delete for every managed collection.

Each request runs one pass of the collection's sync controller: open the live
list, start a create or edit session, submit, release the subscription.
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from models import CollectionSnapshot, SubmitResponse, FacilityAdd, DashboardData
from service_modules.base import get_document_store, get_write_gateway, new_controller
from service_modules.dashboard_service import DashboardService, get_dashboard_service
from service_modules.document_store import DocumentStore
from service_modules.entities import EntityConfig, get_entity, PROGRAMS, MAX_FACILITIES
from service_modules.exceptions import ValidationError, UploadError, WriteError, SubscriptionError
from service_modules.sync_controller import SubmitResult
from service_modules.validation import add_list_item
from service_modules.write_gateway import RemoteWriteGateway

logger = logging.getLogger("fitmaker_admin")
router = APIRouter()


def get_entity_or_404(collection: str) -> EntityConfig:
    entity = get_entity(collection)
    if not entity:
        raise HTTPException(status_code=404, detail={"title": "Error", "message": f"Unknown collection: {collection}"})
    return entity


def raise_for_result(result: SubmitResult):
    """Failed submit -> HTTP error carrying the operator notice."""
    if isinstance(result.error, ValidationError) or result.error is None:
        status_code = 400
    elif isinstance(result.error, (UploadError, WriteError)):
        status_code = 502
    else:
        status_code = 500
    raise HTTPException(status_code=status_code, detail=result.notice.model_dump())


def raise_for_subscription(error: SubscriptionError):
    raise HTTPException(status_code=502, detail=error.to_dict())


# ==================== DASHBOARD ====================

@router.get("/api/admin/dashboard", response_model=DashboardData)
async def get_dashboard(
    store: DocumentStore = Depends(get_document_store),
    service: DashboardService = Depends(get_dashboard_service)
):
    return await service.summary(store)


# ==================== PROGRAM FACILITIES ====================

@router.post("/api/admin/programs/facilities")
async def add_facility(data: FacilityAdd):
    """Append one facility to a program form's list (max 4, trimmed, blanks ignored)."""
    try:
        facilities = add_list_item(data.facilities, data.value, MAX_FACILITIES, "facilities")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return {"collection": PROGRAMS.collection, "facilities": facilities}


# ==================== COLLECTIONS ====================

@router.get("/api/admin/{collection}", response_model=CollectionSnapshot)
async def list_records(
    collection: str,
    store: DocumentStore = Depends(get_document_store),
    gateway: RemoteWriteGateway = Depends(get_write_gateway)
):
    entity = get_entity_or_404(collection)
    controller = new_controller(entity, store, gateway)
    async with controller.open():
        await controller.ready()
        if controller.subscriber.error:
            raise_for_subscription(controller.subscriber.error)
        records = controller.records

    return {
        "collection": entity.collection,
        "count": len(records),
        "limit": entity.max_records,
        "records": records,
    }


@router.post("/api/admin/{collection}", response_model=SubmitResponse)
async def create_record(
    collection: str,
    data: dict,
    store: DocumentStore = Depends(get_document_store),
    gateway: RemoteWriteGateway = Depends(get_write_gateway)
):
    entity = get_entity_or_404(collection)
    if not entity.creatable:
        raise HTTPException(status_code=405, detail={"title": "Error", "message": f"{entity.plural} cannot be created here."})

    controller = new_controller(entity, store, gateway)
    async with controller.open():
        await controller.ready()
        notice = controller.begin_create()
        if notice:
            raise HTTPException(status_code=400, detail=notice.model_dump())
        result = await controller.submit(data)

    if not result.ok:
        raise_for_result(result)
    return result.to_dict()


@router.put("/api/admin/{collection}/{record_id}", response_model=SubmitResponse)
async def update_record(
    collection: str,
    record_id: str,
    data: dict,
    store: DocumentStore = Depends(get_document_store),
    gateway: RemoteWriteGateway = Depends(get_write_gateway)
):
    entity = get_entity_or_404(collection)
    if not entity.editable:
        raise HTTPException(status_code=405, detail={"title": "Error", "message": f"{entity.plural} cannot be edited here."})

    controller = new_controller(entity, store, gateway)
    async with controller.open():
        await controller.ready()
        record = controller.find(record_id)
        if not record:
            raise HTTPException(status_code=404, detail={"title": "Error", "message": f"{entity.label} not found"})
        controller.begin_edit(record)
        result = await controller.submit(data)

    if not result.ok:
        raise_for_result(result)
    return result.to_dict()


@router.delete("/api/admin/{collection}/{record_id}", response_model=SubmitResponse)
async def delete_record(
    collection: str,
    record_id: str,
    store: DocumentStore = Depends(get_document_store),
    gateway: RemoteWriteGateway = Depends(get_write_gateway)
):
    entity = get_entity_or_404(collection)
    if not entity.deletable:
        raise HTTPException(status_code=405, detail={"title": "Error", "message": f"{entity.plural} cannot be deleted."})

    if not await store.get(entity.collection, record_id):
        raise HTTPException(status_code=404, detail={"title": "Error", "message": f"{entity.label} not found"})

    controller = new_controller(entity, store, gateway)
    result = await controller.delete(record_id)
    if not result.ok:
        raise_for_result(result)
    return result.to_dict()
