from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from jobtracker.config import settings
from jobtracker.dependencies import get_application_service
from jobtracker.schemas.application import RestoreResponse
from jobtracker.services.application_service import ApplicationService
from jobtracker.services.blob_backend import XLSX_CONTENT_TYPE

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("/download")
def download_table(service: ApplicationService = Depends(get_application_service)):
    return Response(
        content=service.export_table(),
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{settings.table_file_name}"'},
    )


@router.post("/restore", response_model=RestoreResponse)
async def restore_table(
    file: UploadFile = File(...),
    service: ApplicationService = Depends(get_application_service),
):
    data = await file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File too large")
    records = await run_in_threadpool(service.restore_table, data)
    return RestoreResponse(
        message="Applications restored successfully",
        count=len(records),
        applications=records,
    )
