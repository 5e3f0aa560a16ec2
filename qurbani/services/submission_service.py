# qurbani/services/submission_service.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from qurbani.domain.allocation import ShareAllocator, Slots, SubmissionBatch
from qurbani.domain.hissa import HissaSlot, initial_slots
from qurbani.domain.submitter import Region, SubmitterContext
from qurbani.integrations.customers_client import CustomersClient, RecordCreationError
from qurbani.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    status: Literal["success", "rejected", "error"]
    slots: Slots
    error: Optional[str] = None
    created: int = 0
    failed: int = 0


class SubmissionService:
    """
    Envía una sesión de hissas al servicio de customers.

    Las validaciones locales (recibo, nombres, límite de 7) se resuelven
    con ShareAllocator.build_batch sin llamar al servicio. Los registros
    del lote se emiten en paralelo; el envío sólo es exitoso si todos
    terminan bien. Ante cualquier falla los slots se devuelven intactos
    para que el usuario pueda reintentar sin volver a escribir nombres.
    """

    def __init__(self, customers_client: CustomersClient, allocator: Optional[ShareAllocator] = None) -> None:
        self.customers_client = customers_client
        self.allocator = allocator or ShareAllocator()

    async def submit(
        self,
        slots: Sequence[HissaSlot],
        receipt_number: str,
        mobile_number: Optional[str],
        region: Region,
        submitter: SubmitterContext,
    ) -> SubmissionResult:
        current = tuple(slots)
        result = self.allocator.build_batch(current, receipt_number, mobile_number, region, submitter)
        if result.error:
            logger.info("Submission rejected receipt=%s: %s", receipt_number, result.error)
            return SubmissionResult(status="rejected", slots=current, error=result.error)

        batch = result.batch
        logger.info(
            "Submitting receipt=%s units=%d user=%s",
            batch.receipt_number,
            len(batch),
            submitter.name,
        )

        outcomes = await self._emit(batch)
        failures = [o for o in outcomes if isinstance(o, BaseException)]
        created = len(outcomes) - len(failures)

        if failures:
            unexpected = [f for f in failures if not isinstance(f, RecordCreationError)]
            for exc in unexpected:
                logger.error("Unexpected error creating customer: %s", exc, exc_info=exc)
            message = self._aggregate_error(batch, failures, created)
            logger.error("Submission failed receipt=%s: %s", batch.receipt_number, message)
            return SubmissionResult(
                status="error",
                slots=current,
                error=message,
                created=created,
                failed=len(failures),
            )

        logger.info("Submission completed receipt=%s created=%d", batch.receipt_number, created)
        return SubmissionResult(status="success", slots=initial_slots(), created=created)

    async def _emit(self, batch: SubmissionBatch) -> list:
        calls = [
            self.customers_client.create_customer(unit.record, unit.idempotency_key)
            for unit in batch.units
        ]
        return await asyncio.gather(*calls, return_exceptions=True)

    @staticmethod
    def _aggregate_error(batch: SubmissionBatch, failures: list, created: int) -> str:
        first = failures[0]
        reason = first.message if isinstance(first, RecordCreationError) else "An unknown error occurred."
        if created:
            return (
                f"{len(failures)} of {len(batch)} hissa records failed for receipt "
                f"{batch.receipt_number} ({created} were saved): {reason}"
            )
        return f"Submission failed for receipt {batch.receipt_number}: {reason}"
