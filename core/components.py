from dataclasses import dataclass
from typing import Optional, Tuple

@dataclass(frozen=True)
class FactorEntry:
    factor: float
    clause: str
    notes: str = ""

@dataclass(frozen=True)
class Tier:
    size_kva: Optional[float]  # None = remainder (no upper bound)
    factor: float

@dataclass(frozen=True)
class TieredFactor:
    tiers: Tuple[Tier, ...]
    clause: str
    notes: str = ""

    @property
    def first_portion(self) -> Tier:
        return self.tiers[0]

    @property
    def remainder(self) -> Tier:
        return self.tiers[-1]

@dataclass(frozen=True)
class QuantityTier:
    min_units: int
    max_units: int
    factor: float
