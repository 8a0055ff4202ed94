from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple
from .components import FactorEntry, Tier, TieredFactor
from .models import CategoryResult, LoadCategory, LoadInputs, Standard, ProjectType

def tiered_demand(load: float, tiers: Iterable[Tier]) -> float:
    """Applies each tier's factor to its slice of `load`; the tier with size None takes the rest."""
    demand = 0.0
    remaining = max(0.0, load)
    for tier in tiers:
        if remaining <= 0:
            break
        portion = remaining if tier.size_kva is None else min(remaining, tier.size_kva)
        demand += portion * tier.factor
        remaining -= portion
    return demand

def flat_category(category: LoadCategory, load: float, entry: FactorEntry,
                  demand_basis: Optional[float] = None, notes: Optional[str] = None) -> CategoryResult:
    """
    Flat-factor category: demand = basis * factor.
    `demand_basis` lets a floor (e.g. NEC dryer minimum) raise the demand without
    touching the reported connected load.
    """
    basis = load if demand_basis is None else demand_basis
    return CategoryResult(
        category=category,
        connected_load=load,
        applied_factor=entry.factor,
        demand_load=basis * entry.factor,
        standard_reference=entry.clause,
        notes=entry.notes if notes is None else notes,
    )

def tiered_category(category: LoadCategory, load: float, tiered: TieredFactor) -> CategoryResult:
    """Tiered category: applied_factor is the blended demand/connected ratio."""
    demand = tiered_demand(load, tiered.tiers)
    return CategoryResult(
        category=category,
        connected_load=load,
        applied_factor=demand / load if load > 0 else 0.0,
        demand_load=demand,
        standard_reference=tiered.clause,
        notes=tiered.notes,
    )

class DemandCalculator(ABC):
    """
    One calculator per (standard, project type). Subclasses declare the input
    categories they address in CATEGORIES (canonical breakdown order) and the factor
    used for anything else in DEFAULT_FACTOR.
    """
    standard: Standard
    project_type: ProjectType
    CATEGORIES: Tuple[LoadCategory, ...] = ()
    HANDLES_MOTORS: bool = False
    DEFAULT_FACTOR: FactorEntry

    @abstractmethod
    def calculate_categories(self, loads: LoadInputs) -> List[CategoryResult]:
        """Returns breakdown entries for the categories this method addresses. Loads are sanitized."""
        pass

    def unaddressed_loads(self, loads: LoadInputs) -> Dict[str, float]:
        """Positive loads this method has no rule for, keyed by their input name."""
        leftovers: Dict[str, float] = {}
        for category, value in loads.values.items():
            if category not in self.CATEGORIES and value > 0:
                leftovers[category.value] = value
        if not self.HANDLES_MOTORS:
            motor_total = sum(m.power for m in loads.motor_loads)
            if motor_total > 0:
                leftovers[LoadCategory.MOTOR_LOADS.value] = motor_total
        for key, value in loads.unclassified.items():
            if value > 0:
                leftovers[key] = value
        return leftovers

    def calculate_unclassified(self, loads: LoadInputs) -> Optional[CategoryResult]:
        leftovers = self.unaddressed_loads(loads)
        if not leftovers:
            return None
        total = sum(leftovers.values())
        notes = f"{self.DEFAULT_FACTOR.notes} ({', '.join(sorted(leftovers))})"
        return flat_category(LoadCategory.UNCLASSIFIED, total, self.DEFAULT_FACTOR, notes=notes)

    def calculate(self, loads: LoadInputs, custom_factors: Optional[Dict[LoadCategory, float]] = None
                  ) -> Tuple[float, float, List[CategoryResult]]:
        """Performs the full calculation. Returns (Total Connected kW, Total Demand kW, Breakdown)."""
        breakdown = self.calculate_categories(loads)
        unclassified = self.calculate_unclassified(loads)
        if unclassified is not None:
            breakdown.append(unclassified)

        if custom_factors:
            breakdown = [self._apply_custom_factor(entry, custom_factors) for entry in breakdown]

        total_connected = sum(entry.connected_load for entry in breakdown)
        total_demand = sum(entry.demand_load for entry in breakdown)
        return total_connected, total_demand, breakdown

    @staticmethod
    def _apply_custom_factor(entry: CategoryResult, custom_factors: Dict[LoadCategory, float]) -> CategoryResult:
        factor = custom_factors.get(entry.category)
        if factor is None:
            return entry
        return CategoryResult(
            category=entry.category,
            connected_load=entry.connected_load,
            applied_factor=factor,
            demand_load=entry.connected_load * factor,
            standard_reference=entry.standard_reference,
            notes=f"Custom factor {factor:g} overrides standard value {entry.applied_factor:.3g}",
        )
