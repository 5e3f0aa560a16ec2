# qurbani/api/routes.py
import io
from typing import List, Sequence

from fastapi import APIRouter, Depends, HTTPException, Response, status

from qurbani.api.schemas import (
    HissaSlotSchema,
    SetTextRequest,
    SetTypeRequest,
    SlotState,
    SlotStateResponse,
    SubmitRequest,
    SubmitResponse,
    SubmitterSchema,
)
from qurbani.config.settings import Settings
from qurbani.domain.allocation import AllocationResult, ShareAllocator, total_weight
from qurbani.domain.hissa import HissaSlot, initial_slots
from qurbani.domain.submitter import Region, RegionRates, SubmitterContext, ensure_region_allowed
from qurbani.integrations.customers_client import CustomersClient, CustomersServiceError
from qurbani.logger import get_logger
from qurbani.services.receipt_pdf import ReceiptRenderer, ReceiptSummary
from qurbani.services.submission_service import SubmissionService
from qurbani.utils.helpers import sanitize_filename

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/shares", tags=["shares"])


def get_settings() -> Settings:
    return Settings()


def get_allocator() -> ShareAllocator:
    return ShareAllocator()


def get_customers_client(settings: Settings = Depends(get_settings)) -> CustomersClient:
    return CustomersClient(
        service_url=settings.customers_service_url,
        timeout=settings.request_timeout,
    )


def get_submission_service(client: CustomersClient = Depends(get_customers_client)) -> SubmissionService:
    """Dependency injection para SubmissionService con el cliente de customers."""
    return SubmissionService(customers_client=client)


@router.get("/slots", response_model=SlotStateResponse)
async def new_session() -> SlotStateResponse:
    """Devuelve los 7 slots por defecto para empezar una sesión."""
    return _state_response(AllocationResult(initial_slots()))


@router.post("/slots/{slot_id}/type", response_model=SlotStateResponse)
async def set_slot_type(
    slot_id: int,
    request: SetTypeRequest,
    allocator: ShareAllocator = Depends(get_allocator),
) -> SlotStateResponse:
    result = allocator.set_type(to_domain_slots(request.slots), slot_id, request.type)
    return _state_response(result)


@router.post("/slots/{slot_id}/text", response_model=SlotStateResponse)
async def set_slot_text(
    slot_id: int,
    request: SetTextRequest,
    allocator: ShareAllocator = Depends(get_allocator),
) -> SlotStateResponse:
    result = allocator.set_text(to_domain_slots(request.slots), slot_id, request.text)
    return _state_response(result)


@router.post("/slots/{slot_id}/clear", response_model=SlotStateResponse)
async def clear_slot(
    slot_id: int,
    request: SlotState,
    allocator: ShareAllocator = Depends(get_allocator),
) -> SlotStateResponse:
    result = allocator.clear(to_domain_slots(request.slots), slot_id)
    return _state_response(result)


@router.post("/submit", response_model=SubmitResponse)
async def submit_shares(
    request: SubmitRequest,
    service: SubmissionService = Depends(get_submission_service),
) -> SubmitResponse:
    """
    Envía la sesión: un registro de customer por cada hissa consumida.

    Los rechazos locales y las fallas del servicio externo vuelven en el
    cuerpo (status "rejected" / "error") con los slots sin tocar.
    """
    submitter = to_submitter(request.submitter)
    _check_region(submitter, request.region)

    try:
        logger.info("Received submit request receipt=%s user=%s", request.receipt_number, submitter.name)
        result = await service.submit(
            to_domain_slots(request.slots),
            request.receipt_number,
            request.mobile_number,
            request.region,
            submitter,
        )
    except Exception as e:
        logger.error("Unexpected error submitting shares: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while submitting shares",
        )

    return SubmitResponse(
        status=result.status,
        slots=to_schema_slots(result.slots),
        total_weight=service.allocator.total_weight(result.slots),
        error=result.error,
        created=result.created,
        failed=result.failed,
    )


@router.post("/receipt")
async def download_receipt(
    request: SubmitRequest,
    allocator: ShareAllocator = Depends(get_allocator),
    client: CustomersClient = Depends(get_customers_client),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Genera el recibo PDF (hissas x tarifa de la región) para la sesión dada."""
    submitter = to_submitter(request.submitter)
    _check_region(submitter, request.region)

    result = allocator.build_batch(
        to_domain_slots(request.slots),
        request.receipt_number,
        request.mobile_number,
        request.region,
        submitter,
    )
    if result.error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)

    rates = await resolve_rates(client, settings)
    rate = rates.rate_for(request.region)
    summary = ReceiptSummary.from_batch(result.batch, rate)

    buffer = io.BytesIO()
    try:
        ReceiptRenderer(currency=settings.currency).render(summary, buffer)
    except Exception as e:
        logger.error("Unexpected error rendering receipt: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while rendering receipt",
        )

    filename = sanitize_filename(f"QUR-{summary.receipt_number}.pdf")
    return Response(
        content=buffer.getvalue(),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ------------------------
# Conversión API <-> dominio
# ------------------------
def to_domain_slots(slots: Sequence[HissaSlotSchema]) -> List[HissaSlot]:
    return [
        HissaSlot(
            id=slot.id,
            type=slot.type,
            text=slot.text,
            is_paired=slot.is_paired,
            pair_id=slot.pair_id if slot.is_paired else None,
        )
        for slot in slots
    ]


def to_schema_slots(slots: Sequence[HissaSlot]) -> List[HissaSlotSchema]:
    return [
        HissaSlotSchema(
            id=slot.id,
            type=slot.type,
            text=slot.text,
            is_paired=slot.is_paired,
            pair_id=slot.pair_id,
        )
        for slot in slots
    ]


def to_submitter(submitter: SubmitterSchema) -> SubmitterContext:
    return SubmitterContext(
        name=submitter.name,
        area_name=submitter.area_name,
        area_incharge=submitter.area_incharge,
        zone_name=submitter.zone_name,
        zone_incharge=submitter.zone_incharge,
        regions_incharge_of=submitter.regions_incharge_of,
    )


def _check_region(submitter: SubmitterContext, region: Region) -> None:
    try:
        ensure_region_allowed(submitter.regions_incharge_of, region)
    except ValueError as e:
        logger.warning("Region rejected for user=%s: %s", submitter.name, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request: {str(e)}",
        )


def _state_response(result: AllocationResult) -> SlotStateResponse:
    return SlotStateResponse(
        slots=to_schema_slots(result.slots),
        total_weight=total_weight(result.slots),
        error=result.error,
    )


async def resolve_rates(client: CustomersClient, settings: Settings) -> RegionRates:
    """Tarifas vigentes del servicio de customers; si no responde, las de settings."""
    try:
        return await client.get_costs()
    except CustomersServiceError as e:
        logger.warning("Falling back to configured rates: %s", e.message)
        return RegionRates(mumbai=settings.mumbai_rate, out_of_mumbai=settings.out_of_mumbai_rate)
