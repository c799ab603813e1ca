"""
Basic Details Routes - the gym's phone, email and address.
"""
from fastapi import APIRouter, Depends

from models import BasicDetails, BasicDetailsUpdate, SubmitResponse
from service_modules.base import get_document_store
from service_modules.basic_details_service import BasicDetailsService
from service_modules.document_store import DocumentStore
from .admin_routes import raise_for_result

router = APIRouter()


def get_basic_details_service(store: DocumentStore = Depends(get_document_store)) -> BasicDetailsService:
    return BasicDetailsService(store)


@router.get("/api/admin/basic-details", response_model=BasicDetails)
async def get_basic_details(service: BasicDetailsService = Depends(get_basic_details_service)):
    return await service.get()


@router.put("/api/admin/basic-details", response_model=SubmitResponse)
async def save_basic_details(
    data: BasicDetailsUpdate,
    service: BasicDetailsService = Depends(get_basic_details_service)
):
    result = await service.save(data.model_dump())
    if not result.ok:
        raise_for_result(result)
    return result.to_dict()
