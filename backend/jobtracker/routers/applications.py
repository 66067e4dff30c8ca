from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response

from jobtracker.dependencies import get_application_service
from jobtracker.errors import InvalidInputError
from jobtracker.models.application import (
    ApplicationPriority,
    ApplicationRecord,
    ApplicationStatus,
)
from jobtracker.schemas.application import (
    ApplicationFilter,
    ApplicationPatch,
    LinksRequest,
    StatsResponse,
    StorageInfo,
)
from jobtracker.services.application_service import ApplicationService

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("", response_model=list[ApplicationRecord])
def list_applications(
    status: ApplicationStatus | None = None,
    priority: ApplicationPriority | None = None,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    service: ApplicationService = Depends(get_application_service),
):
    filters = ApplicationFilter(
        status=status,
        priority=priority,
        search=search or None,
        start_date=start_date,
        end_date=end_date,
    )
    return service.list_applications(filters)


@router.get("/stats", response_model=StatsResponse)
def get_stats(service: ApplicationService = Depends(get_application_service)):
    return service.get_stats()


@router.get("/storage", response_model=StorageInfo)
def storage_info(service: ApplicationService = Depends(get_application_service)):
    return service.storage_info()


@router.post("/links", response_model=list[ApplicationRecord], status_code=201)
def ingest_links(req: LinksRequest, service: ApplicationService = Depends(get_application_service)):
    entries = req.raw_entries()
    if entries is None:
        raise InvalidInputError("Provide links, links_with_titles or text")
    return service.ingest_links(entries)


@router.get("/{application_id}", response_model=ApplicationRecord)
def get_application(application_id: str, service: ApplicationService = Depends(get_application_service)):
    return service.get_application(application_id)


@router.patch("/{application_id}", response_model=ApplicationRecord)
def update_application(
    application_id: str,
    req: ApplicationPatch,
    service: ApplicationService = Depends(get_application_service),
):
    if not req.model_fields_set:
        raise HTTPException(status_code=400, detail="No fields to update")
    return service.update_application(application_id, req)


@router.delete("/{application_id}", response_model=ApplicationRecord)
def archive_application(application_id: str, service: ApplicationService = Depends(get_application_service)):
    return service.archive_application(application_id)


@router.delete("/{application_id}/hard", status_code=204)
def delete_application(application_id: str, service: ApplicationService = Depends(get_application_service)):
    service.delete_application(application_id)
    return Response(status_code=204)


@router.delete("/{application_id}/clear-link", response_model=ApplicationRecord)
def clear_link(application_id: str, service: ApplicationService = Depends(get_application_service)):
    return service.clear_link(application_id)
