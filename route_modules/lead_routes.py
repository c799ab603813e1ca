"""
Lead Routes - contact leads (user_data): sorted list, mark as read, export, call.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
import logging

from service_modules.base import get_document_store, get_write_gateway, new_controller
from service_modules.document_store import DocumentStore
from service_modules.entities import LEADS
from service_modules.exceptions import ValidationError
from service_modules.lead_service import (
    LeadService, get_lead_service, sort_leads, call_link, SORT_MODES, SORT_CREATED, XLSX_MIME
)
from service_modules.write_gateway import RemoteWriteGateway

logger = logging.getLogger("fitmaker_admin")
router = APIRouter()


def _check_sort(sort: str):
    if sort not in SORT_MODES:
        raise HTTPException(status_code=400, detail={"title": "Error", "message": f"Unknown sort: {sort}"})


async def _load_leads(store: DocumentStore, gateway: RemoteWriteGateway) -> list:
    controller = new_controller(LEADS, store, gateway)
    async with controller.open():
        await controller.ready()
        if controller.subscriber.error:
            raise HTTPException(status_code=502, detail=controller.subscriber.error.to_dict())
        return controller.records


@router.get("/api/admin/user_data")
async def list_leads(
    sort: str = SORT_CREATED,
    store: DocumentStore = Depends(get_document_store),
    gateway: RemoteWriteGateway = Depends(get_write_gateway)
):
    _check_sort(sort)
    records = sort_leads(await _load_leads(store, gateway), sort)
    return {
        "collection": LEADS.collection,
        "count": len(records),
        "sort": sort,
        "records": records,
    }


@router.get("/api/admin/user_data/export")
async def export_leads(
    sort: str = SORT_CREATED,
    store: DocumentStore = Depends(get_document_store),
    gateway: RemoteWriteGateway = Depends(get_write_gateway),
    service: LeadService = Depends(get_lead_service)
):
    _check_sort(sort)
    records = await _load_leads(store, gateway)
    try:
        content = service.export(records, sort)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())

    filename = f"user_data_{int(datetime.now().timestamp() * 1000)}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MIME,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/api/admin/user_data/{record_id}/read")
async def mark_lead_read(
    record_id: str,
    store: DocumentStore = Depends(get_document_store),
    gateway: RemoteWriteGateway = Depends(get_write_gateway),
    service: LeadService = Depends(get_lead_service)
):
    controller = new_controller(LEADS, store, gateway)
    async with controller.open():
        await controller.ready()
        if not controller.find(record_id):
            raise HTTPException(status_code=404, detail={"title": "Error", "message": "Lead not found"})
        notice = await service.mark_as_read(controller, record_id)

    if notice:
        raise HTTPException(status_code=502, detail=notice.model_dump())
    return {"status": "success", "id": record_id}


@router.get("/api/admin/user_data/{record_id}/call")
async def call_lead(
    record_id: str,
    store: DocumentStore = Depends(get_document_store)
):
    record = await store.get(LEADS.collection, record_id)
    if not record:
        raise HTTPException(status_code=404, detail={"title": "Error", "message": "Lead not found"})

    url = call_link(record.get("user_contact"))
    if not url:
        raise HTTPException(status_code=400, detail={"title": "Error", "message": "No contact number for this lead"})
    return {"url": url}
