from typing import List, Tuple
from core.calculator import DemandCalculator, flat_category
from core.models import BuildingType, CategoryResult, LoadCategory, LoadInputs, ProjectType, Standard
from standards.factor_tables import (
    IEC_COMMERCIAL_DEFAULT, IEC_INDUSTRIAL_DEFAULT, IEC_RESIDENTIAL_DEFAULT, IEC_RESIDENTIAL_FACTORS,
    get_iec_commercial_factor, get_iec_industrial_factor, get_iec_rated_diversity_factor,
)

IEC_RESIDENTIAL_CATEGORIES = (
    LoadCategory.LIGHTING,
    LoadCategory.SOCKET_OUTLETS,
    LoadCategory.HVAC,
    LoadCategory.COOKING_APPLIANCES,
    LoadCategory.WATER_HEATING,
    LoadCategory.OTHER_APPLIANCES,
)

def calculate_iec_overall_diversity(loads) -> Tuple[float, float, float]:
    """
    IEC residential overall diversity. Returns (overall_factor, total_connected, total_demand).
    overall_factor = 1 - demand/connected, i.e. the fraction of connected load removed
    by simultaneity; 0 when nothing is connected.
    """
    loads = LoadInputs.coerce(loads)
    total_connected = 0.0
    total_demand = 0.0

    for category in IEC_RESIDENTIAL_CATEGORIES:
        value = loads.get(category)
        # Negative or missing = absent
        if not value or value <= 0:
            continue
        total_connected += value
        total_demand += value * IEC_RESIDENTIAL_FACTORS[category.value].factor

    overall_factor = 1 - (total_demand / total_connected) if total_connected > 0 else 0.0
    return overall_factor, total_connected, total_demand


class IECResidentialCalculator(DemandCalculator):
    standard = Standard.IEC
    project_type = ProjectType.RESIDENTIAL
    CATEGORIES = IEC_RESIDENTIAL_CATEGORIES
    DEFAULT_FACTOR = IEC_RESIDENTIAL_DEFAULT

    def calculate_categories(self, loads: LoadInputs) -> List[CategoryResult]:
        breakdown = []
        for category in self.CATEGORIES:
            value = loads.get(category)
            if value > 0:
                breakdown.append(flat_category(category, value, IEC_RESIDENTIAL_FACTORS[category.value]))
        return breakdown


class IECCommercialCalculator(DemandCalculator):
    standard = Standard.IEC
    project_type = ProjectType.COMMERCIAL
    CATEGORIES = (
        LoadCategory.GENERAL_LIGHTING,
        LoadCategory.RECEPTACLE_LOADS,
        LoadCategory.HVAC,
        LoadCategory.KITCHEN_EQUIPMENT,
        LoadCategory.ELEVATORS,
        LoadCategory.SPECIAL_EQUIPMENT,
    )
    DEFAULT_FACTOR = IEC_COMMERCIAL_DEFAULT

    # Input category -> key in IEC_COMMERCIAL_FACTORS (unmapped keys take the commercial default)
    TABLE_KEYS = {
        LoadCategory.GENERAL_LIGHTING: "lighting",
        LoadCategory.RECEPTACLE_LOADS: "receptacles",
        LoadCategory.HVAC: "hvac",
    }

    def __init__(self, building_type: BuildingType = BuildingType.OFFICE):
        self.building_type = building_type

    def calculate_categories(self, loads: LoadInputs) -> List[CategoryResult]:
        breakdown = []
        for category in self.CATEGORIES:
            value = loads.get(category)
            if value <= 0:
                continue
            table_key = self.TABLE_KEYS.get(category, category.value)
            entry = get_iec_commercial_factor(self.building_type, table_key)
            breakdown.append(flat_category(category, value, entry))
        return breakdown


class IECIndustrialCalculator(DemandCalculator):
    standard = Standard.IEC
    project_type = ProjectType.INDUSTRIAL
    CATEGORIES = (
        LoadCategory.PROCESS_EQUIPMENT,
        LoadCategory.LIGHTING,
        LoadCategory.WELDING_EQUIPMENT,
        LoadCategory.CONTROL_SYSTEMS,
    )
    HANDLES_MOTORS = True
    DEFAULT_FACTOR = IEC_INDUSTRIAL_DEFAULT

    def calculate_categories(self, loads: LoadInputs) -> List[CategoryResult]:
        breakdown = []

        # Motor group: IEC 61439-1 RDF by number of motor circuits
        motors = [m for m in loads.motor_loads if m.power > 0]
        if motors:
            motor_total = sum(m.power for m in motors)
            rdf = get_iec_rated_diversity_factor(len(motors))
            breakdown.append(flat_category(LoadCategory.MOTOR_LOADS, motor_total, rdf))

        for category in self.CATEGORIES:
            value = loads.get(category)
            if value > 0:
                breakdown.append(flat_category(category, value, get_iec_industrial_factor(category.value)))
        return breakdown
