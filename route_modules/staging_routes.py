"""
Staging Routes - pick one image for a form before it is submitted.
"""
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File

from models import StagedImage
from service_modules.exceptions import ValidationError
from service_modules.staging_service import StagingService, get_staging_service

router = APIRouter()


@router.post("/api/admin/staging", response_model=StagedImage)
async def stage_image(
    file: UploadFile = File(...),
    service: StagingService = Depends(get_staging_service)
):
    """Store one picked image; the returned reference goes into a media field of the form."""
    content = await file.read()
    try:
        reference = service.stage(content, file.filename)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return {"reference": reference, "filename": file.filename}
