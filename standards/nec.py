from typing import List, Sequence, Tuple
from core.calculator import DemandCalculator, flat_category, tiered_category, tiered_demand
from core.components import FactorEntry
from core.models import CategoryResult, LoadCategory, LoadInputs, MotorLoad, ProjectType, Standard
from core.validation import ValidationError, check_largest_motor_flag
from standards.factor_tables import (
    NEC_COMMERCIAL_FACTORS, NEC_DEFAULT, NEC_DRYER_MINIMUM_KW, NEC_DWELLING_OPTIONAL, NEC_INDUSTRIAL_FACTORS,
    NEC_KITCHEN_CLAUSE, NEC_KITCHEN_DEFAULT_FACTOR, NEC_KITCHEN_EQUIPMENT_FACTORS, NEC_KITCHEN_NOTES,
    NEC_LIGHTING_DEMAND_FACTORS, NEC_MOTOR_DEMAND_FACTORS, NEC_MOTOR_GROUP_NOTES, NEC_RECEPTACLE_DEMAND_FACTORS,
    get_nec_factor,
)

def calculate_nec_dwelling_optional(loads) -> Tuple[float, List[CategoryResult]]:
    """
    NEC 220.82 optional method for a dwelling unit. Returns (Total Demand kW, Breakdown).

    General lighting and receptacles are combined into one tiered category. The dryer
    demand uses max(load, 5 kW) while the reported connected load stays the raw input.
    """
    loads = LoadInputs.coerce(loads)
    breakdown = []

    general_load = max(0.0, loads.get(LoadCategory.GENERAL_LIGHTING) or 0.0) + \
        max(0.0, loads.get(LoadCategory.RECEPTACLE_LOADS) or 0.0)
    if general_load > 0:
        breakdown.append(tiered_category(
            LoadCategory.GENERAL_LIGHTING_RECEPTACLES, general_load,
            NEC_DWELLING_OPTIONAL["generalLightingReceptacles"],
        ))

    for category in (LoadCategory.COOKING_APPLIANCES, LoadCategory.HVAC, LoadCategory.WATER_HEATING):
        value = loads.get(category) or 0.0
        if value > 0:
            breakdown.append(flat_category(category, value, NEC_DWELLING_OPTIONAL[category.value]))

    dryer = loads.get(LoadCategory.DRYER) or 0.0
    if dryer > 0:
        entry = NEC_DWELLING_OPTIONAL["dryer"]
        breakdown.append(flat_category(
            LoadCategory.DRYER, dryer, entry,
            demand_basis=max(dryer, NEC_DRYER_MINIMUM_KW),
            notes=f"{entry.notes} ({NEC_DRYER_MINIMUM_KW:g} kW minimum)",
        ))

    total_demand = sum(c.demand_load for c in breakdown)
    return total_demand, breakdown

def calculate_nec_dwelling_lighting_demand(load_kva: float) -> float:
    """NEC 220.42 dwelling general lighting: 3 kVA @ 100%, next 117 kVA @ 35%, remainder @ 25%."""
    return tiered_demand(load_kva, NEC_LIGHTING_DEMAND_FACTORS["dwelling"].tiers)

def get_nec_kitchen_equipment_factor(quantity: int) -> FactorEntry:
    # Fewer than one unit is read as a single unit
    units = max(1, int(quantity))
    for tier in NEC_KITCHEN_EQUIPMENT_FACTORS:
        if tier.min_units <= units <= tier.max_units:
            return FactorEntry(tier.factor, NEC_KITCHEN_CLAUSE, f"{NEC_KITCHEN_NOTES} ({units} units)")

    # Default to 65% for large quantities
    return FactorEntry(NEC_KITCHEN_DEFAULT_FACTOR, NEC_KITCHEN_CLAUSE, f"{NEC_KITCHEN_NOTES} ({units} units)")

def calculate_nec_motor_demand(motors: Sequence[MotorLoad]) -> Tuple[float, str]:
    """
    NEC 430.24: 125% of the motor flagged largest + 100% of all others.
    Returns (Total Demand kW, Clause). Raises ValidationError unless exactly one motor is flagged.
    """
    if not motors:
        return 0.0, NEC_MOTOR_DEMAND_FACTORS["largestMotor"].clause

    errors = check_largest_motor_flag(motors)
    if errors:
        raise ValidationError(errors)

    total_demand = 0.0
    for motor in motors:
        if motor.is_largest:
            total_demand += motor.power * NEC_MOTOR_DEMAND_FACTORS["largestMotor"].factor
        else:
            total_demand += motor.power * NEC_MOTOR_DEMAND_FACTORS["otherMotors"].factor

    if len(motors) == 1:
        return total_demand, NEC_MOTOR_DEMAND_FACTORS["singleMotor"].clause
    return total_demand, NEC_MOTOR_DEMAND_FACTORS["largestMotor"].clause


class NECResidentialCalculator(DemandCalculator):
    standard = Standard.NEC
    project_type = ProjectType.RESIDENTIAL
    CATEGORIES = (
        LoadCategory.GENERAL_LIGHTING,
        LoadCategory.RECEPTACLE_LOADS,
        LoadCategory.COOKING_APPLIANCES,
        LoadCategory.HVAC,
        LoadCategory.WATER_HEATING,
        LoadCategory.DRYER,
    )
    DEFAULT_FACTOR = NEC_DEFAULT

    def calculate_categories(self, loads: LoadInputs) -> List[CategoryResult]:
        _, breakdown = calculate_nec_dwelling_optional(loads)
        return breakdown


class NECCommercialCalculator(DemandCalculator):
    standard = Standard.NEC
    project_type = ProjectType.COMMERCIAL
    CATEGORIES = (
        LoadCategory.GENERAL_LIGHTING,
        LoadCategory.RECEPTACLE_LOADS,
        LoadCategory.HVAC,
        LoadCategory.KITCHEN_EQUIPMENT,
        LoadCategory.ELEVATORS,
        LoadCategory.SPECIAL_EQUIPMENT,
    )
    DEFAULT_FACTOR = NEC_DEFAULT

    def __init__(self, kitchen_equipment_units: int = 4):
        self.kitchen_equipment_units = kitchen_equipment_units

    def calculate_categories(self, loads: LoadInputs) -> List[CategoryResult]:
        breakdown = []

        lighting = loads.get(LoadCategory.GENERAL_LIGHTING)
        if lighting > 0:
            # NEC 220.42: first 12.5 kVA @ 100%, remainder @ 75%
            breakdown.append(tiered_category(
                LoadCategory.GENERAL_LIGHTING, lighting, NEC_LIGHTING_DEMAND_FACTORS["commercial"]))

        receptacles = loads.get(LoadCategory.RECEPTACLE_LOADS)
        if receptacles > 0:
            # NEC 220.44: first 10 kVA @ 100%, remainder @ 50%
            breakdown.append(tiered_category(
                LoadCategory.RECEPTACLE_LOADS, receptacles, NEC_RECEPTACLE_DEMAND_FACTORS["nonDwelling"]))

        hvac = loads.get(LoadCategory.HVAC)
        if hvac > 0:
            breakdown.append(flat_category(LoadCategory.HVAC, hvac, NEC_COMMERCIAL_FACTORS["hvac"]))

        kitchen = loads.get(LoadCategory.KITCHEN_EQUIPMENT)
        if kitchen > 0:
            entry = get_nec_kitchen_equipment_factor(self.kitchen_equipment_units)
            breakdown.append(flat_category(LoadCategory.KITCHEN_EQUIPMENT, kitchen, entry))

        for category in (LoadCategory.ELEVATORS, LoadCategory.SPECIAL_EQUIPMENT):
            value = loads.get(category)
            if value > 0:
                breakdown.append(flat_category(category, value, get_nec_factor(NEC_COMMERCIAL_FACTORS, category.value)))

        return breakdown


class NECIndustrialCalculator(DemandCalculator):
    standard = Standard.NEC
    project_type = ProjectType.INDUSTRIAL
    CATEGORIES = (
        LoadCategory.PROCESS_EQUIPMENT,
        LoadCategory.LIGHTING,
        LoadCategory.WELDING_EQUIPMENT,
        LoadCategory.CONTROL_SYSTEMS,
    )
    HANDLES_MOTORS = True
    DEFAULT_FACTOR = NEC_DEFAULT

    def calculate_categories(self, loads: LoadInputs) -> List[CategoryResult]:
        breakdown = []

        motor_total = sum(m.power for m in loads.motor_loads)
        if motor_total > 0:
            motor_demand, clause = calculate_nec_motor_demand(loads.motor_loads)
            breakdown.append(CategoryResult(
                category=LoadCategory.MOTOR_LOADS,
                connected_load=motor_total,
                applied_factor=motor_demand / motor_total,
                demand_load=motor_demand,
                standard_reference=clause,
                notes=NEC_MOTOR_GROUP_NOTES,
            ))

        for category in self.CATEGORIES:
            value = loads.get(category)
            if value > 0:
                breakdown.append(flat_category(category, value, get_nec_factor(NEC_INDUSTRIAL_FACTORS, category.value)))

        return breakdown
