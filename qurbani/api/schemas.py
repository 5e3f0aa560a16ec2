# qurbani/api/schemas.py
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from qurbani.domain.hissa import MAX_HISSAS, MAX_NAME_LENGTH, HissaType
from qurbani.domain.submitter import Region, RegionPermission


class HissaSlotSchema(BaseModel):
    id: int = Field(..., ge=1, le=MAX_HISSAS, description="Posición del slot (1..7).")
    type: HissaType = Field(HissaType.QURBANI, description="1 = Qurbani, 2 = Aqeeqah (Boy), 3 = Aqeeqah (Girl).")
    text: str = Field("", max_length=MAX_NAME_LENGTH, description="Nombre de la persona; vacío = slot sin usar.")
    is_paired: bool = Field(False, description="True si es el secundario de un Aqeeqah (Boy).")
    pair_id: Optional[int] = Field(None, description="Slot primario que reservó este slot.")


class SlotState(BaseModel):
    slots: List[HissaSlotSchema] = Field(..., description="Los 7 slots de la sesión, tal como los devolvió el servicio.")

    @field_validator("slots")
    @classmethod
    def _exactly_seven(cls, slots: List[HissaSlotSchema]) -> List[HissaSlotSchema]:
        ids = sorted(slot.id for slot in slots)
        if ids != list(range(1, MAX_HISSAS + 1)):
            raise ValueError(f"slots must contain ids 1..{MAX_HISSAS} exactly once")
        return slots

    @field_validator("slots")
    @classmethod
    def _consistent_pairs(cls, slots: List[HissaSlotSchema]) -> List[HissaSlotSchema]:
        """
        El estado lo guarda el cliente, así que se revalida en cada request:
        todo secundario apunta a otro slot Aqeeqah (Boy) no pareado, que no
        tiene más secundarios y con el mismo nombre.
        """
        by_id = {slot.id: slot for slot in slots}
        claimed = set()
        for slot in slots:
            if not slot.is_paired:
                continue
            if slot.pair_id is None:
                raise ValueError(f"slot {slot.id} is paired but has no pair_id")
            if slot.pair_id == slot.id:
                raise ValueError(f"slot {slot.id} cannot be paired with itself")
            primary = by_id.get(slot.pair_id)
            if primary is None:
                raise ValueError(f"slot {slot.id} is paired with unknown slot {slot.pair_id}")
            if primary.type != HissaType.AQEEQAH_BOY or primary.is_paired:
                raise ValueError(
                    f"slot {slot.id} is paired with slot {primary.id}, which is not an Aqeeqah (Boy) primary"
                )
            if slot.pair_id in claimed:
                raise ValueError(f"slot {primary.id} has more than one paired slot")
            if slot.text != primary.text:
                raise ValueError(f"slot {slot.id} text must match its primary slot {primary.id}")
            claimed.add(slot.pair_id)
        return slots


class SetTypeRequest(SlotState):
    type: HissaType = Field(..., description="Nuevo tipo para el slot.")


class SetTextRequest(SlotState):
    text: str = Field(..., description="Nuevo nombre para el slot.")


class SubmitterSchema(BaseModel):
    name: str = Field(..., min_length=1, description="Nombre del usuario que registra.")
    area_name: str = Field(..., min_length=1)
    area_incharge: str = ""
    zone_name: str = Field(..., min_length=1)
    zone_incharge: str = ""
    regions_incharge_of: RegionPermission = Field(
        RegionPermission.BOTH,
        description="0 = ambas regiones, 1 = sólo Mumbai, 2 = sólo Out of Mumbai.",
    )


class SubmitRequest(SlotState):
    receipt_number: str = Field("", description="Número de recibo (obligatorio para enviar).")
    mobile_number: Optional[str] = Field(None, description="Teléfono opcional del contribuyente.")
    region: Region = Field(..., description="1 = Mumbai, 2 = Out of Mumbai.")
    submitter: SubmitterSchema


class SlotStateResponse(BaseModel):
    slots: List[HissaSlotSchema]
    total_weight: int
    error: Optional[str] = None


class SubmitResponse(SlotStateResponse):
    status: Literal["success", "rejected", "error"]
    created: int = 0
    failed: int = 0
