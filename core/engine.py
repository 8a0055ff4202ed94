"""Maximum demand engine: validation, routing, aggregation, sizing, compliance checks and warnings."""

import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from .calculator import DemandCalculator
from .config import EngineSettings
from .converters import kw_to_amps, round_half_away
from .models import (
    CategoryResult, ComplianceCheck, DemandCalculationParameters, DemandCalculationResult, DutyCycle,
    LoadCategory, ProjectType, Standard,
)
from .validation import get_input_warnings, validate_parameters
from standards.factor_tables import STANDARD_AMPERE_RATINGS, STANDARD_LABELS
from standards.iec import IECCommercialCalculator, IECIndustrialCalculator, IECResidentialCalculator
from standards.nec import NECCommercialCalculator, NECIndustrialCalculator, NECResidentialCalculator

logger = logging.getLogger(__name__)

# Loads expected to run 3h+ (NEC 210.20(A) 125% rule)
CONTINUOUS_CATEGORIES = frozenset({
    LoadCategory.LIGHTING,
    LoadCategory.GENERAL_LIGHTING,
    LoadCategory.GENERAL_LIGHTING_RECEPTACLES,
    LoadCategory.HVAC,
    LoadCategory.WATER_HEATING,
    LoadCategory.PROCESS_EQUIPMENT,
})


def select_standard_rating(amps: float, ratings: Sequence[int] = STANDARD_AMPERE_RATINGS) -> int:
    """First standard rating >= amps; above the table, amps rounded up to the next whole ampere."""
    for rating in ratings:
        if rating >= amps:
            return rating
    return int(math.ceil(amps))


class DemandCalculationEngine:

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def calculate(self, params: Any) -> DemandCalculationResult:
        """
        Calculates maximum demand for a DemandCalculationParameters (or its wire dict).
        Raises ValidationError for out-of-domain parameters; never returns a partial result.
        """
        params = validate_parameters(params, self.settings)
        calculator = self.select_calculator(params)
        logger.debug("Routing %s/%s to %s", params.standard.value, params.project_type.value,
                     type(calculator).__name__)

        _, _, breakdown = calculator.calculate(params.loads, params.custom_factors)

        # Totals come from the rounded entries so they always equal the breakdown sums
        breakdown = [self._round_entry(entry) for entry in breakdown]
        total_connected = self._round(sum(entry.connected_load for entry in breakdown))
        base_demand = self._round(sum(entry.demand_load for entry in breakdown))

        # Future expansion scales demand only, never connected load
        maximum_demand = self._round(base_demand * (1 + params.future_expansion))
        diversity = self._round(self.overall_diversity_factor(total_connected, base_demand))

        demand_current = kw_to_amps(maximum_demand, params.voltage, params.phases)
        service_size = select_standard_rating(demand_current)
        breaker_size = select_standard_rating(service_size * self.settings.breaker_sizing_factor)

        compliance_checks = self.generate_compliance_checks(params, breakdown, demand_current, service_size, breaker_size)
        warnings = self.generate_warnings(params, calculator, total_connected, diversity, service_size)
        warnings.extend(get_input_warnings(params, self.settings))

        result = DemandCalculationResult(
            total_connected_load=total_connected,
            maximum_demand=maximum_demand,
            overall_diversity_factor=diversity,
            category_breakdown=breakdown,
            compliance_checks=compliance_checks,
            recommended_service_size=service_size,
            recommended_breaker_size=breaker_size,
            calculation_timestamp=datetime.now(timezone.utc),
            standard_used=STANDARD_LABELS[params.standard.value],
            warnings=warnings,
        )
        logger.info(
            "Demand calculation %r (%s %s): connected=%.3f kW, demand=%.3f kW, service=%sA, breaker=%sA",
            params.project_name, params.standard.value, params.project_type.value,
            result.total_connected_load, result.maximum_demand, service_size, breaker_size,
        )
        return result

    def select_calculator(self, params: DemandCalculationParameters) -> DemandCalculator:
        standard, project_type = params.standard, params.project_type

        if standard == Standard.IEC:
            if project_type == ProjectType.RESIDENTIAL:
                return IECResidentialCalculator()
            if project_type == ProjectType.COMMERCIAL:
                return IECCommercialCalculator(params.building_type)
            return IECIndustrialCalculator()

        if project_type == ProjectType.RESIDENTIAL:
            return NECResidentialCalculator()
        if project_type == ProjectType.COMMERCIAL:
            units = params.kitchen_equipment_units
            if units is None:
                units = self.settings.default_kitchen_equipment_units
            return NECCommercialCalculator(units)
        return NECIndustrialCalculator()

    @staticmethod
    def overall_diversity_factor(connected: float, base_demand: float) -> float:
        """1 - demand/connected on the pre-expansion demand, clamped to [0, 1]; 0 with no load."""
        if connected <= 0:
            return 0.0
        return min(1.0, max(0.0, 1 - (base_demand / connected)))

    def generate_compliance_checks(self, params: DemandCalculationParameters, breakdown: List[CategoryResult],
                                   demand_current: float, service_size: float,
                                   breaker_size: float) -> List[ComplianceCheck]:
        checks = []
        label = STANDARD_LABELS[params.standard.value]

        if params.standard == Standard.IEC:
            out_of_range = [c.category.value for c in breakdown if not (0 <= c.applied_factor <= 1)]
            checks.append(ComplianceCheck(
                standard=label,
                clause="524",
                requirement="All demand/diversity factors within valid range (0-1)",
                compliant=not out_of_range,
                details="All factors applied correctly" if not out_of_range
                else f"Invalid factors detected: {', '.join(out_of_range)}",
            ))
        else:
            checks.append(self._continuous_load_check(params, breakdown, breaker_size))

        # Service rating must carry the maximum demand current
        clause = "433.1" if params.standard == Standard.IEC else "230.42(A)"
        checks.append(ComplianceCheck(
            standard="IEC 60364-4-43" if params.standard == Standard.IEC else "NEC Article 230",
            clause=clause,
            requirement="Service rating not less than maximum demand current",
            compliant=service_size >= demand_current,
            details=f"Demand current {demand_current:.1f} A, service rating {service_size} A",
        ))
        return checks

    def _continuous_load_check(self, params: DemandCalculationParameters, breakdown: List[CategoryResult],
                               breaker_size: float) -> ComplianceCheck:
        continuous_kw = sum(c.demand_load for c in breakdown if c.category in CONTINUOUS_CATEGORIES)
        if any(c.category == LoadCategory.MOTOR_LOADS for c in breakdown):
            continuous_kw += sum(m.power for m in params.loads.motor_loads if m.duty_cycle == DutyCycle.CONTINUOUS)
        continuous_kw *= (1 + params.future_expansion)

        if continuous_kw <= 0:
            return ComplianceCheck(
                standard="NEC Article 210",
                clause="210.20(A)",
                requirement="Continuous loads multiplied by 125% for breaker sizing",
                compliant=True,
                details="No continuous loads detected",
            )

        factor = self.settings.continuous_load_factor
        required = kw_to_amps(continuous_kw, params.voltage, params.phases) * factor
        compliant = breaker_size >= required
        return ComplianceCheck(
            standard="NEC Article 210",
            clause="210.20(A)",
            requirement="Continuous loads multiplied by 125% for breaker sizing",
            compliant=compliant,
            details=(
                f"Continuous load {continuous_kw:.3f} kW requires {required:.1f} A "
                f"({factor * 100:g}%); breaker rated {breaker_size} A"
            ),
        )

    def generate_warnings(self, params: DemandCalculationParameters, calculator: DemandCalculator,
                          total_connected: float, diversity: float, service_size: float) -> List[str]:
        warnings = []
        settings = self.settings

        if total_connected <= 0:
            warnings.append("No connected load supplied - all demand figures are zero")
        elif diversity < settings.low_diversity_threshold:
            warnings.append("Low diversity factor detected - verify if all loads operate simultaneously")

        if total_connected > settings.high_connected_load_kw:
            warnings.append(f"High connected load ({total_connected:.1f} kW) - consider service entrance upgrade")

        if params.phases == 3 and params.project_type == ProjectType.RESIDENTIAL:
            warnings.append("Three-phase service for residential - verify load balancing")

        unaddressed = calculator.unaddressed_loads(params.loads)
        if unaddressed:
            warnings.append(
                f"Loads not addressed by the {params.standard.value} {params.project_type.value} method "
                f"({', '.join(sorted(unaddressed))}) - taken at default factor {calculator.DEFAULT_FACTOR.factor:g}"
            )

        if service_size > STANDARD_AMPERE_RATINGS[-1]:
            warnings.append(
                f"Demand current exceeds the largest standard rating ({STANDARD_AMPERE_RATINGS[-1]} A) - "
                "consider multiple services or a higher distribution voltage"
            )
        return warnings

    def _round(self, value: float) -> float:
        return round_half_away(value, self.settings.decimals)

    def _round_entry(self, entry: CategoryResult) -> CategoryResult:
        return CategoryResult(
            category=entry.category,
            connected_load=self._round(entry.connected_load),
            applied_factor=self._round(entry.applied_factor),
            demand_load=self._round(entry.demand_load),
            standard_reference=entry.standard_reference,
            notes=entry.notes,
        )


def calculate(params: Any, settings: Optional[EngineSettings] = None) -> DemandCalculationResult:
    return DemandCalculationEngine(settings).calculate(params)
