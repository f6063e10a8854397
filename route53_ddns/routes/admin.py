"""Session-protected administrative API for zones and managed records."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from route53_ddns.config import settings
from route53_ddns.dependencies import get_record_service, require_session
from route53_ddns.schemas.records import (
    CreateRecordRequest,
    CredentialResponse,
    HistoryResponse,
    RecordListResponse,
    RecordResponse,
    UpdateRecordRequest,
    ZoneListResponse,
    ZoneRecordsResponse,
)
from route53_ddns.services.record_service import RecordService
from route53_ddns.utils.addresses import normalize_hostname

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_session)],
    responses={401: {"description": "Missing or invalid session"}},
)


@router.get("/zones", response_model=ZoneListResponse)
async def list_zones(
    service: RecordService = Depends(get_record_service),
) -> ZoneListResponse:
    """List Route 53 hosted zones (cached for a few minutes)."""
    return ZoneListResponse(zones=await service.list_zones())


@router.get("/zones/{zone_id}/records", response_model=ZoneRecordsResponse)
async def list_zone_records(
    zone_id: str,
    service: RecordService = Depends(get_record_service),
) -> ZoneRecordsResponse:
    """List the record sets of a hosted zone, alias records excluded."""
    records = await service.list_zone_records(zone_id)
    return ZoneRecordsResponse(zone_id=zone_id, records=records)


@router.get("/records", response_model=RecordListResponse)
async def list_records(
    service: RecordService = Depends(get_record_service),
) -> RecordListResponse:
    """List managed records."""
    records = await service.list()
    return RecordListResponse(
        records=[RecordResponse.from_record(record) for record in records]
    )


@router.post(
    "/records",
    response_model=CredentialResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid hostname or TTL"},
        404: {"description": "Hosted zone not found"},
        409: {"description": "Hostname already managed"},
    },
)
async def create_record(
    body: CreateRecordRequest,
    service: RecordService = Depends(get_record_service),
) -> CredentialResponse:
    """
    Create a managed record.

    The plaintext update credential is returned in this response only.
    """
    record, credential = await service.create(body.hostname, body.zone_id, body.ttl)
    return CredentialResponse(
        record=RecordResponse.from_record(record), credential=credential
    )


@router.get("/records/{hostname}", response_model=RecordResponse)
async def get_record(
    hostname: str,
    service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    """Get a managed record."""
    return RecordResponse.from_record(await service.get(hostname))


@router.patch("/records/{hostname}", response_model=RecordResponse)
async def update_record(
    hostname: str,
    body: UpdateRecordRequest,
    service: RecordService = Depends(get_record_service),
) -> RecordResponse:
    """Change a record's TTL and/or enabled flag."""
    record = await service.update(hostname, ttl=body.ttl, enabled=body.enabled)
    return RecordResponse.from_record(record)


@router.post(
    "/records/{hostname}/regenerate-credential",
    response_model=CredentialResponse,
)
async def regenerate_credential(
    hostname: str,
    service: RecordService = Depends(get_record_service),
) -> CredentialResponse:
    """Mint a new update credential; the previous one stops working."""
    record, credential = await service.regenerate_credential(hostname)
    return CredentialResponse(
        record=RecordResponse.from_record(record), credential=credential
    )


@router.delete("/records/{hostname}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    hostname: str,
    service: RecordService = Depends(get_record_service),
) -> Response:
    """Delete a managed record and (best effort) its DNS record."""
    await service.delete(hostname)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/records/{hostname}/history", response_model=HistoryResponse)
async def get_history(
    hostname: str,
    limit: Optional[int] = Query(
        None, ge=1, le=settings.max_history_limit, description="Maximum events"
    ),
    service: RecordService = Depends(get_record_service),
) -> HistoryResponse:
    """Update history for a record, most recent first."""
    events = await service.history(hostname, limit=limit)
    return HistoryResponse(hostname=normalize_hostname(hostname), events=events)
