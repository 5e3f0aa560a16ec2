# qurbani/domain/record.py
from dataclasses import asdict, dataclass
from typing import Optional

from qurbani.domain.hissa import HissaType
from qurbani.domain.submitter import Region, SubmitterContext


@dataclass(frozen=True)
class CustomerRecord:
    """Registro plano que consume el endpoint /api/customers (uno por hissa)."""
    receipt: str
    name: str
    phone: Optional[str]
    type: HissaType
    region: Region
    user_name: str
    area_name: str
    area_incharge: str
    zone_name: str
    zone_incharge: str
    status: bool = False
    payment_status: bool = False
    amount_paid: float = 0.0

    @classmethod
    def for_hissa(
        cls,
        receipt: str,
        name: str,
        phone: Optional[str],
        hissa_type: HissaType,
        region: Region,
        submitter: SubmitterContext,
    ) -> "CustomerRecord":
        return cls(
            receipt=receipt,
            name=name,
            phone=phone or None,
            type=hissa_type,
            region=region,
            user_name=submitter.name,
            area_name=submitter.area_name,
            area_incharge=submitter.area_incharge,
            zone_name=submitter.zone_name,
            zone_incharge=submitter.zone_incharge,
        )

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["type"] = int(self.type)
        payload["region"] = int(self.region)
        return payload
