"""Validation and sanitization of demand calculation parameters."""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type

from .config import EngineSettings
from .converters import to_number
from .models import (
    BuildingType, DemandCalculationParameters, DutyCycle, LoadCategory, LoadInputs, MotorLoad,
    ProjectType, Standard,
)

logger = logging.getLogger(__name__)

ALLOWED_PHASES = (1, 3)
ALLOWED_FREQUENCIES = (50, 60)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationError(ValueError):
    """Raised when calculation parameters are malformed or out of domain."""

    def __init__(self, errors: Sequence[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "Invalid input parameters",
            "details": [{"field": e.field, "message": e.message} for e in self.errors],
        }


def _coerce_enum(enum_cls: Type[Enum], value: Any, field: str, errors: List[FieldError]) -> Optional[Enum]:
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if isinstance(value, str) and member.value.lower() == value.strip().lower():
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    errors.append(FieldError(field, f"Invalid value {value!r}. Must be one of: {allowed}"))
    return None


def check_largest_motor_flag(motors: Sequence[MotorLoad]) -> List[FieldError]:
    """Exactly one motor must carry is_largest; ties are never broken here."""
    if not motors:
        return []
    flagged = [m for m in motors if m.is_largest]
    if len(flagged) == 0:
        return [FieldError("loads.motorLoads", "One motor must be marked as the largest for NEC calculation")]
    if len(flagged) > 1:
        names = ", ".join(m.name or "?" for m in flagged)
        return [FieldError("loads.motorLoads", f"Only one motor should be marked as the largest (flagged: {names})")]
    return []


def _clamp(value: float, field: str) -> float:
    if value < 0:
        logger.debug("Clamping negative load %s=%s to 0", field, value)
        return 0.0
    return value


def sanitize_loads(loads: Any, settings: EngineSettings, errors: List[FieldError]) -> LoadInputs:
    """
    Returns a fresh LoadInputs with every value a float >= 0.
    Missing categories read as 0 through LoadInputs.get; negatives are clamped.
    Non-numeric values and values above the per-category limit are reported in `errors`.
    """
    raw = LoadInputs.coerce(loads)
    clean = LoadInputs()
    limit = settings.max_load_per_category_kw

    def read(key: str, value: Any) -> float:
        field = f"loads.{key}"
        if value is None:
            return 0.0
        number = to_number(value)
        if number is None:
            errors.append(FieldError(field, "must be a valid number"))
            return 0.0
        number = _clamp(number, field)
        if number > limit:
            errors.append(FieldError(field, f"exceeds maximum of {limit:,.0f} kW"))
        return number

    for category, value in raw.values.items():
        clean.values[category] = read(category.value, value)
    for key, value in raw.unclassified.items():
        clean.unclassified[key] = read(str(key), value)

    for i, motor in enumerate(raw.motor_loads):
        prefix = f"loads.motorLoads[{i}]"
        if not isinstance(motor, MotorLoad):
            errors.append(FieldError(prefix, "must be a motor load entry"))
            continue
        clean.motor_loads.append(_sanitize_motor(motor, prefix, settings, errors))

    errors.extend(check_largest_motor_flag(clean.motor_loads))
    return clean


def _sanitize_motor(motor: MotorLoad, prefix: str, settings: EngineSettings, errors: List[FieldError]) -> MotorLoad:
    if not motor.name or not isinstance(motor.name, str):
        errors.append(FieldError(f"{prefix}.name", "Name is required"))

    power = to_number(motor.power)
    if power is None:
        errors.append(FieldError(f"{prefix}.power", "must be a valid number"))
        power = 0.0
    power = _clamp(power, f"{prefix}.power")

    pf = to_number(motor.power_factor)
    if pf is None or not (settings.min_power_factor <= pf <= settings.max_power_factor):
        errors.append(FieldError(
            f"{prefix}.powerFactor",
            f"Power factor must be between {settings.min_power_factor} and {settings.max_power_factor}",
        ))
        pf = pf if pf is not None else 0.0

    duty = _coerce_enum(DutyCycle, motor.duty_cycle, f"{prefix}.dutyCycle", errors)

    return replace(motor, power=power, power_factor=pf, duty_cycle=duty or motor.duty_cycle)


def validate_parameters(params: Any, settings: Optional[EngineSettings] = None) -> DemandCalculationParameters:
    """
    Validates and sanitizes raw parameters (a DemandCalculationParameters or its wire dict).
    Returns a new, fully typed DemandCalculationParameters; raises ValidationError listing
    every problem found.
    """
    settings = settings or EngineSettings()
    if isinstance(params, dict):
        params = DemandCalculationParameters.from_dict(params)

    errors: List[FieldError] = []

    project_type = _coerce_enum(ProjectType, params.project_type, "projectType", errors)
    standard = _coerce_enum(Standard, params.standard, "standard", errors)
    building_type = _coerce_enum(BuildingType, params.building_type, "buildingType", errors)

    voltage = to_number(params.voltage)
    if voltage is None or voltage <= 0:
        errors.append(FieldError("voltage", "Voltage must be a number greater than 0"))

    phases = to_number(params.phases)
    if phases not in ALLOWED_PHASES:
        errors.append(FieldError("phases", "Phases must be either 1 (single-phase) or 3 (three-phase)"))

    frequency = to_number(params.frequency)
    if frequency not in ALLOWED_FREQUENCIES:
        errors.append(FieldError("frequency", "Frequency must be 50 or 60 Hz"))

    expansion = to_number(params.future_expansion if params.future_expansion is not None else 0.0)
    if expansion is None or not (0.0 <= expansion <= settings.max_future_expansion):
        errors.append(FieldError(
            "futureExpansion",
            f"Future expansion must be between 0 and {settings.max_future_expansion:g}",
        ))

    custom_factors: Dict[LoadCategory, float] = {}
    for key, value in (params.custom_factors or {}).items():
        field = f"customFactors.{key.value if isinstance(key, LoadCategory) else key}"
        try:
            category = key if isinstance(key, LoadCategory) else LoadCategory(key)
        except ValueError:
            errors.append(FieldError(field, "unknown load category"))
            continue
        factor = to_number(value)
        if factor is None or not (0.0 <= factor <= 1.0):
            errors.append(FieldError(field, "Custom factor must be between 0 and 1"))
            continue
        custom_factors[category] = factor

    kitchen_units = params.kitchen_equipment_units
    if kitchen_units is not None:
        units = to_number(kitchen_units)
        if units is None or units < 0 or units != int(units):
            errors.append(FieldError("kitchenEquipmentUnits", "must be a whole number >= 0"))
        else:
            kitchen_units = int(units)

    loads = sanitize_loads(params.loads, settings, errors)

    if errors:
        logger.debug("Rejected demand parameters: %d error(s)", len(errors))
        raise ValidationError(errors)

    return DemandCalculationParameters(
        project_name=params.project_name or "",
        project_type=project_type,
        standard=standard,
        voltage=voltage,
        phases=int(phases),
        frequency=int(frequency),
        loads=loads,
        future_expansion=expansion,
        custom_factors=custom_factors,
        building_type=building_type,
        kitchen_equipment_units=kitchen_units,
    )


def get_input_warnings(params: DemandCalculationParameters, settings: Optional[EngineSettings] = None) -> List[str]:
    """Non-blocking notes about unusual but valid inputs. Expects sanitized parameters."""
    settings = settings or EngineSettings()
    warnings = []

    total = sum(params.loads.values.values()) + sum(params.loads.unclassified.values()) + \
        sum(m.power for m in params.loads.motor_loads)
    if total > settings.very_high_connected_load_kw:
        warnings.append(f"Very high connected load ({total:.1f} kW) - consider consulting utility company")

    if params.voltage > settings.high_voltage_v:
        warnings.append(f"High voltage system ({params.voltage:g}V) - ensure proper safety measures")

    return warnings
