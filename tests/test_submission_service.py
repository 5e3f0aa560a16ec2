# tests/test_submission_service.py
"""
Tests del SubmissionService con un cliente de customers falso.
"""
import asyncio

from qurbani.domain.allocation import NAME_REQUIRED, RECEIPT_REQUIRED, ShareAllocator
from qurbani.domain.hissa import HissaType, initial_slots
from qurbani.domain.submitter import Region, SubmitterContext
from qurbani.integrations.customers_client import RecordCreationError
from qurbani.services.submission_service import SubmissionService

SUBMITTER = SubmitterContext(name="Yusuf Shaikh", area_name="Bandra", zone_name="West")


class FakeCustomersClient:
    """Registra las llamadas y falla para las keys indicadas."""

    def __init__(self, fail_keys=(), error=None):
        self.calls = []
        self.fail_keys = set(fail_keys)
        self.error = error

    async def create_customer(self, record, idempotency_key):
        self.calls.append((record, idempotency_key))
        await asyncio.sleep(0)
        if idempotency_key in self.fail_keys:
            raise self.error or RecordCreationError("Failed to create customer", status_code=500)
        return {"id": len(self.calls), **record.to_payload()}


class BarrierCustomersClient:
    """Sólo responde cuando TODAS las llamadas esperadas ya empezaron."""

    def __init__(self, expected):
        self.expected = expected
        self.started = 0

    async def create_customer(self, record, idempotency_key):
        self.started += 1
        while self.started < self.expected:
            await asyncio.sleep(0)
        return {"id": self.started}


def session_with_boy_and_qurbani():
    allocator = ShareAllocator()
    slots = allocator.set_type(initial_slots(), 1, HissaType.AQEEQAH_BOY).slots
    slots = allocator.set_text(slots, 1, "Zainab").slots
    slots = allocator.set_text(slots, 3, "Ali").slots
    return slots


def run(coro):
    return asyncio.run(coro)


class TestSubmit:
    """Tests para el envío completo de una sesión."""

    def test_success_resets_slots(self):
        """Test: Un envío exitoso devuelve los slots por defecto."""
        client = FakeCustomersClient()
        service = SubmissionService(customers_client=client)
        slots = session_with_boy_and_qurbani()

        result = run(service.submit(slots, "1001", "9820012345", Region.MUMBAI, SUBMITTER))

        assert result.status == "success"
        assert result.error is None
        assert result.created == 3
        assert result.slots == initial_slots()
        names = sorted(record.name for record, _ in client.calls)
        assert names == ["Ali", "Zainab", "Zainab"]

    def test_weight_two_is_sent_twice(self):
        """Test: El Aqeeqah (Boy) se registra como dos customers idénticos."""
        client = FakeCustomersClient()
        service = SubmissionService(customers_client=client)

        run(service.submit(session_with_boy_and_qurbani(), "1001", None, Region.MUMBAI, SUBMITTER))

        boy_records = [record for record, _ in client.calls if record.type == HissaType.AQEEQAH_BOY]
        assert len(boy_records) == 2
        assert boy_records[0] == boy_records[1]
        assert boy_records[0].to_payload()["type"] == 2

    def test_calls_are_concurrent(self):
        """Test: Todas las unidades se emiten a la vez."""
        client = BarrierCustomersClient(expected=3)
        service = SubmissionService(customers_client=client)

        result = run(asyncio.wait_for(
            service.submit(session_with_boy_and_qurbani(), "1001", None, Region.MUMBAI, SUBMITTER),
            timeout=5,
        ))

        assert result.status == "success"
        assert client.started == 3

    def test_validation_rejects_without_calls(self):
        """Test: Un rechazo local no llama al servicio."""
        client = FakeCustomersClient()
        service = SubmissionService(customers_client=client)

        empty = run(service.submit(initial_slots(), "1001", None, Region.MUMBAI, SUBMITTER))
        no_receipt = run(service.submit(session_with_boy_and_qurbani(), "", None, Region.MUMBAI, SUBMITTER))

        assert empty.status == "rejected" and empty.error == NAME_REQUIRED
        assert no_receipt.status == "rejected" and no_receipt.error == RECEIPT_REQUIRED
        assert no_receipt.slots == session_with_boy_and_qurbani()
        assert client.calls == []

    def test_partial_failure_keeps_slots(self):
        """Test: Una falla parcial conserva los slots e informa cuántos se guardaron."""
        client = FakeCustomersClient(fail_keys={"1001:1:1"})
        service = SubmissionService(customers_client=client)
        slots = session_with_boy_and_qurbani()

        result = run(service.submit(slots, "1001", None, Region.MUMBAI, SUBMITTER))

        assert result.status == "error"
        assert result.slots == slots
        assert result.created == 2
        assert result.failed == 1
        assert "1 of 3" in result.error
        assert "Failed to create customer" in result.error
        assert len(client.calls) == 3

    def test_total_failure_message(self):
        """Test: Si todo falla, el mensaje lleva el motivo del servicio."""
        client = FakeCustomersClient(fail_keys={"9:1:0"})
        service = SubmissionService(customers_client=client)
        slots = ShareAllocator().set_text(initial_slots(), 1, "Ali").slots

        result = run(service.submit(slots, "9", None, Region.OUT_OF_MUMBAI, SUBMITTER))

        assert result.status == "error"
        assert result.error == "Submission failed for receipt 9: Failed to create customer"
        assert result.created == 0

    def test_unexpected_exception_is_reported(self):
        """Test: Una excepción inesperada se reporta con mensaje genérico."""
        client = FakeCustomersClient(fail_keys={"9:1:0"}, error=RuntimeError("boom"))
        service = SubmissionService(customers_client=client)
        slots = ShareAllocator().set_text(initial_slots(), 1, "Ali").slots

        result = run(service.submit(slots, "9", None, Region.OUT_OF_MUMBAI, SUBMITTER))

        assert result.status == "error"
        assert "An unknown error occurred." in result.error
        assert result.slots == slots
