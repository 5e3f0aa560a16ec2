# qurbani/domain/submitter.py
from dataclasses import dataclass
from enum import IntEnum
from typing import List


class Region(IntEnum):
    MUMBAI = 1
    OUT_OF_MUMBAI = 2

    @property
    def label(self) -> str:
        return "Mumbai" if self is Region.MUMBAI else "Out of Mumbai"


class RegionPermission(IntEnum):
    """Valor de `regions_incharge_of` del usuario autenticado."""
    BOTH = 0
    MUMBAI_ONLY = 1
    OUT_OF_MUMBAI_ONLY = 2


@dataclass(frozen=True)
class SubmitterContext:
    name: str
    area_name: str
    zone_name: str
    area_incharge: str = ""
    zone_incharge: str = ""
    regions_incharge_of: RegionPermission = RegionPermission.BOTH


def allowed_regions(permission: RegionPermission) -> List[Region]:
    """Regiones que el usuario puede elegir, en el orden en que se ofrecen."""
    regions = []
    if permission != RegionPermission.MUMBAI_ONLY:
        regions.append(Region.OUT_OF_MUMBAI)
    if permission != RegionPermission.OUT_OF_MUMBAI_ONLY:
        regions.append(Region.MUMBAI)
    return regions


def default_region(permission: RegionPermission) -> Region:
    if permission == RegionPermission.MUMBAI_ONLY:
        return Region.MUMBAI
    return Region.OUT_OF_MUMBAI


def ensure_region_allowed(permission: RegionPermission, region: Region) -> None:
    """
    Valida que el usuario pueda registrar hissas en la región elegida.

    Raises:
        ValueError: Si la región no está permitida para el usuario
    """
    if region not in allowed_regions(permission):
        raise ValueError(
            f"Region '{region.label}' is not allowed for this user"
        )


@dataclass(frozen=True)
class RegionRates:
    """Tarifa por hissa de cada región (columnas mumbai_cost / out_of_mumbai_cost)."""
    mumbai: float
    out_of_mumbai: float

    def rate_for(self, region: Region) -> float:
        return self.mumbai if region == Region.MUMBAI else self.out_of_mumbai
