# qurbani/domain/allocation.py
"""
Asignación de hissas sobre los 7 slots de una sesión de envío.

Todas las operaciones son transiciones puras: reciben la tupla de slots
actual y devuelven un AllocationResult con el nuevo estado o, si la
operación se rechaza, el mismo estado de entrada más un mensaje de error.
El llamador (UI / API) es dueño de guardar el estado entre llamadas.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from qurbani.domain.hissa import (
    MAX_HISSAS,
    MAX_NAME_LENGTH,
    HissaSlot,
    HissaType,
    default_slot,
)
from qurbani.domain.record import CustomerRecord
from qurbani.domain.submitter import Region, SubmitterContext
from qurbani.logger import get_logger

logger = get_logger(__name__)

Slots = Tuple[HissaSlot, ...]

NO_PAIR_SLOT = "No available slot next to this card for an Aqeeqah (Boy) pair. Please clear the next card."
LIMIT_EXCEEDED = f"This change would exceed the {MAX_HISSAS} hissa limit."
RECEIPT_REQUIRED = "Receipt number is required."
NAME_REQUIRED = "At least one hissa must have a name."
TOTAL_EXCEEDED = f"Total hissas cannot exceed {MAX_HISSAS}."
NAME_TOO_LONG = f"Name cannot exceed {MAX_NAME_LENGTH} characters."


@dataclass(frozen=True)
class AllocationResult:
    slots: Slots
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ShareUnit:
    """Una hissa consumida: se traduce en exactamente un registro de customer."""
    slot_id: int
    unit_index: int
    record: CustomerRecord

    @property
    def idempotency_key(self) -> str:
        return f"{self.record.receipt}:{self.slot_id}:{self.unit_index}"


@dataclass(frozen=True)
class SubmissionBatch:
    receipt_number: str
    region: Region
    units: List[ShareUnit] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.units)


@dataclass(frozen=True)
class BatchResult:
    batch: Optional[SubmissionBatch]
    error: Optional[str] = None


def total_weight(slots: Iterable[HissaSlot]) -> int:
    """Suma de pesos de los slots con nombre que no son secundarios."""
    return sum(slot.weight for slot in slots)


def _ordered(slots: Iterable[HissaSlot]) -> Slots:
    return tuple(sorted(slots, key=lambda s: s.id))


class ShareAllocator:
    """
    Reglas de asignación de los 7 slots de hissa.

    - Un Aqeeqah (Boy) pesa 2 y reserva el primer slot libre con id mayor
      como secundario (is_paired, pair_id, mismo texto).
    - Los secundarios no se editan directamente; siguen a su primario.
    - El peso total nunca supera MAX_HISSAS; una operación que lo haría
      se rechaza y el estado no cambia.
    """

    # ------------------------
    # Operaciones de sesión
    # ------------------------
    def set_type(self, slots: Sequence[HissaSlot], slot_id: int, new_type: HissaType) -> AllocationResult:
        current = _ordered(slots)
        error = self._check_editable(current, slot_id)
        if error:
            return AllocationResult(current, error)

        new_type = HissaType(new_type)
        # Primero se libera el secundario que este slot tuviera reservado
        cards = self._release_pair(list(current), slot_id)
        index = slot_id - 1
        cards[index] = replace(cards[index], type=new_type)

        if new_type == HissaType.AQEEQAH_BOY:
            pair_index = self._find_free_after(cards, slot_id)
            if pair_index is None:
                logger.info("Slot %d: no free slot to pair Aqeeqah (Boy)", slot_id)
                return AllocationResult(current, NO_PAIR_SLOT)
            cards[pair_index] = replace(
                cards[pair_index],
                text=cards[index].text,
                type=HissaType.AQEEQAH_BOY,
                is_paired=True,
                pair_id=slot_id,
            )
            logger.debug("Slot %d paired with slot %d", slot_id, pair_index + 1)

        if total_weight(cards) > MAX_HISSAS:
            logger.info("Slot %d: type %s rejected, weight would exceed %d", slot_id, new_type.label, MAX_HISSAS)
            return AllocationResult(current, LIMIT_EXCEEDED)

        return AllocationResult(tuple(cards))

    def set_text(self, slots: Sequence[HissaSlot], slot_id: int, text: str) -> AllocationResult:
        current = _ordered(slots)
        error = self._check_editable(current, slot_id)
        if error:
            return AllocationResult(current, error)
        if len(text) > MAX_NAME_LENGTH:
            return AllocationResult(current, NAME_TOO_LONG)

        cards = list(current)
        cards[slot_id - 1] = cards[slot_id - 1].with_text(text)

        # Un Aqeeqah (Boy) replica el nombre en su secundario
        if cards[slot_id - 1].type == HissaType.AQEEQAH_BOY:
            for i, card in enumerate(cards):
                if card.pair_id == slot_id:
                    cards[i] = card.with_text(text)

        return AllocationResult(tuple(cards))

    def clear(self, slots: Sequence[HissaSlot], slot_id: int) -> AllocationResult:
        current = _ordered(slots)
        error = self._check_editable(current, slot_id)
        if error:
            return AllocationResult(current, error)

        cards = self._release_pair(list(current), slot_id)
        cards[slot_id - 1] = default_slot(slot_id)
        return AllocationResult(tuple(cards))

    def total_weight(self, slots: Iterable[HissaSlot]) -> int:
        return total_weight(slots)

    # ------------------------
    # Materialización del envío
    # ------------------------
    def build_batch(
        self,
        slots: Sequence[HissaSlot],
        receipt_number: str,
        mobile_number: Optional[str],
        region: Region,
        submitter: SubmitterContext,
    ) -> BatchResult:
        """
        Valida la sesión y genera un ShareUnit por cada hissa consumida.

        Un slot Aqeeqah (Boy) produce DOS registros idénticos: cada hissa
        física corresponde a un registro en el sistema de customers.
        """
        receipt = (receipt_number or "").strip()
        if not receipt:
            return BatchResult(None, RECEIPT_REQUIRED)

        valid = [slot for slot in slots if slot.counts]
        if not valid:
            return BatchResult(None, NAME_REQUIRED)

        if total_weight(slots) > MAX_HISSAS:
            return BatchResult(None, TOTAL_EXCEEDED)

        phone = (mobile_number or "").strip() or None
        units: List[ShareUnit] = []
        for slot in sorted(valid, key=lambda s: s.id):
            record = CustomerRecord.for_hissa(
                receipt=receipt,
                name=slot.text.strip(),
                phone=phone,
                hissa_type=slot.type,
                region=Region(region),
                submitter=submitter,
            )
            for unit_index in range(slot.type.weight):
                units.append(ShareUnit(slot_id=slot.id, unit_index=unit_index, record=record))

        return BatchResult(SubmissionBatch(receipt_number=receipt, region=Region(region), units=units))

    # ------------------------
    # Helpers
    # ------------------------
    def _check_editable(self, slots: Slots, slot_id: int) -> Optional[str]:
        if not 1 <= slot_id <= len(slots):
            return f"Unknown hissa slot {slot_id}."
        slot = slots[slot_id - 1]
        if slot.is_paired:
            return (
                f"Hissa {slot_id} is paired with Hissa {slot.pair_id} "
                "and cannot be edited directly."
            )
        return None

    @staticmethod
    def _release_pair(cards: List[HissaSlot], slot_id: int) -> List[HissaSlot]:
        return [default_slot(card.id) if card.pair_id == slot_id else card for card in cards]

    @staticmethod
    def _find_free_after(cards: List[HissaSlot], slot_id: int) -> Optional[int]:
        # Un primario sin nombre también está vacío, pero ya tiene su propio secundario
        primaries = {card.pair_id for card in cards if card.is_paired}
        for i, card in enumerate(cards):
            if card.id > slot_id and card.is_free and card.id not in primaries:
                return i
        return None
