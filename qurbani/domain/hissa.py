# qurbani/domain/hissa.py
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional, Tuple

MAX_HISSAS = 7
MAX_NAME_LENGTH = 250


class HissaType(IntEnum):
    """Tipos de contribución. El valor es el código que viaja al endpoint de customers."""
    QURBANI = 1
    AQEEQAH_BOY = 2
    AQEEQAH_GIRL = 3

    @property
    def weight(self) -> int:
        """Hissas consumidas por una selección de este tipo."""
        return 2 if self == HissaType.AQEEQAH_BOY else 1

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    HissaType.QURBANI: "Qurbani",
    HissaType.AQEEQAH_BOY: "Aqeeqah (Boy)",
    HissaType.AQEEQAH_GIRL: "Aqeeqah (Girl)",
}


@dataclass(frozen=True)
class HissaSlot:
    id: int
    type: HissaType = HissaType.QURBANI
    text: str = ""
    is_paired: bool = False
    pair_id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", HissaType(self.type))

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    @property
    def is_free(self) -> bool:
        """Vacío y sin par: puede servir de slot secundario para un Aqeeqah (Boy)."""
        return self.is_empty and not self.is_paired

    @property
    def counts(self) -> bool:
        """True si el slot aporta peso al total (tiene nombre y no es secundario)."""
        return not self.is_empty and not self.is_paired

    @property
    def weight(self) -> int:
        return self.type.weight if self.counts else 0

    def with_text(self, text: str) -> "HissaSlot":
        return replace(self, text=text)


def default_slot(slot_id: int) -> HissaSlot:
    return HissaSlot(id=slot_id)


def initial_slots() -> Tuple[HissaSlot, ...]:
    """Los 7 slots de una sesión nueva, en estado por defecto."""
    return tuple(default_slot(i) for i in range(1, MAX_HISSAS + 1))
