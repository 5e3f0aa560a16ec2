"""
Cliente HTTP para el servicio de customers (/api/customers y /api/costs).
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from qurbani.domain.record import CustomerRecord
from qurbani.domain.submitter import RegionRates
from qurbani.logger import get_logger

logger = get_logger(__name__)


class CustomersServiceError(Exception):
    """Falla al hablar con el servicio de customers."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecordCreationError(CustomersServiceError):
    """Falla al crear un registro de customer en el servicio externo."""


class CustomersClient:
    """
    Cliente para registrar hissas en el servicio de customers.

    Cada llamada crea UN registro plano; el servicio no ofrece atomicidad
    por lote, por eso cada request lleva un Idempotency-Key propio.

    Uso:
        client = CustomersClient(service_url="http://localhost:3000")
        created = await client.create_customer(record, idempotency_key="1001:1:0")
        rates = await client.get_costs()
    """

    def __init__(
        self,
        service_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            service_url: URL base del servicio (ej: http://localhost:3000)
            timeout: Timeout en segundos para cada request HTTP
            transport: Transport httpx alternativo (para testing)
        """
        if not service_url:
            raise ValueError("service_url cannot be empty")
        self.service_url = service_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def create_customer(self, record: CustomerRecord, idempotency_key: str) -> dict[str, Any]:
        """
        Crea un registro de customer.

        Returns:
            dict con el registro creado tal como lo devuelve el servicio

        Raises:
            RecordCreationError: si la request falla por HTTP, red o respuesta inválida
        """
        try:
            logger.debug("Creating customer receipt=%s key=%s", record.receipt, idempotency_key)

            async with self._client() as client:
                response = await client.post(
                    f"{self.service_url}/api/customers",
                    json=record.to_payload(),
                    headers={
                        "Content-Type": "application/json",
                        "Idempotency-Key": idempotency_key,
                    },
                )
                response.raise_for_status()

            return response.json()

        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(
                "HTTP error creating customer: status=%s body=%s",
                e.response.status_code,
                e.response.text,
            )
            raise RecordCreationError(detail, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error("Network error creating customer: %s", e)
            raise RecordCreationError(f"Network error: {e}") from e
        except ValueError as e:
            logger.error("Invalid JSON in create customer response: %s", e)
            raise RecordCreationError("Invalid response from customers service") from e

    async def get_costs(self) -> RegionRates:
        """
        Lee las tarifas por hissa vigentes desde /api/costs.

        Raises:
            CustomersServiceError: si la request falla o el cuerpo no trae las tarifas
        """
        try:
            async with self._client() as client:
                response = await client.get(f"{self.service_url}/api/costs")
                response.raise_for_status()

            body = response.json()
            return RegionRates(
                mumbai=float(body["mumbai_cost"]),
                out_of_mumbai=float(body["out_of_mumbai_cost"]),
            )

        except httpx.HTTPStatusError as e:
            logger.error("HTTP error fetching costs: status=%s", e.response.status_code)
            raise CustomersServiceError(_error_detail(e.response), status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error("Network error fetching costs: %s", e)
            raise CustomersServiceError(f"Network error: {e}") from e
        except (ValueError, TypeError, KeyError) as e:
            logger.error("Invalid costs response: %s", e)
            raise CustomersServiceError("Invalid costs response from customers service") from e


def _error_detail(response: httpx.Response) -> str:
    """Extrae el campo `error` del cuerpo, con fallback al status HTTP."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Customers service responded with status {response.status_code}"
