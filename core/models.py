from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

class Standard(Enum):
    IEC = "IEC"
    NEC = "NEC"

class ProjectType(Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"

class BuildingType(Enum):
    OFFICE = "office"
    RETAIL = "retail"

class DutyCycle(Enum):
    CONTINUOUS = "continuous"
    INTERMITTENT = "intermittent"
    SHORT_TIME = "short-time"

class LoadCategory(Enum):
    # Residential
    LIGHTING = "lighting"
    SOCKET_OUTLETS = "socketOutlets"
    HVAC = "hvac"
    COOKING_APPLIANCES = "cookingAppliances"
    WATER_HEATING = "waterHeating"
    OTHER_APPLIANCES = "otherAppliances"
    DRYER = "dryer"
    # Commercial
    GENERAL_LIGHTING = "generalLighting"
    RECEPTACLE_LOADS = "receptacleLoads"
    ELEVATORS = "elevators"
    KITCHEN_EQUIPMENT = "kitchenEquipment"
    SPECIAL_EQUIPMENT = "specialEquipment"
    # Industrial
    PROCESS_EQUIPMENT = "processEquipment"
    WELDING_EQUIPMENT = "weldingEquipment"
    CONTROL_SYSTEMS = "controlSystems"
    # Derived tags (breakdown only, never an input key)
    GENERAL_LIGHTING_RECEPTACLES = "generalLightingReceptacles"
    MOTOR_LOADS = "motorLoads"
    UNCLASSIFIED = "unclassified"

    @classmethod
    def from_key(cls, key: str) -> Optional["LoadCategory"]:
        for member in INPUT_CATEGORIES:
            if member.value == key:
                return member
        return None

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

INPUT_CATEGORIES = tuple(
    c for c in LoadCategory
    if c not in (LoadCategory.GENERAL_LIGHTING_RECEPTACLES, LoadCategory.MOTOR_LOADS, LoadCategory.UNCLASSIFIED)
)

CATEGORY_LABELS = {
    LoadCategory.LIGHTING: "Lighting",
    LoadCategory.SOCKET_OUTLETS: "Socket Outlets",
    LoadCategory.HVAC: "HVAC",
    LoadCategory.COOKING_APPLIANCES: "Cooking Appliances",
    LoadCategory.WATER_HEATING: "Water Heating",
    LoadCategory.OTHER_APPLIANCES: "Other Appliances",
    LoadCategory.DRYER: "Dryer",
    LoadCategory.GENERAL_LIGHTING: "General Lighting",
    LoadCategory.RECEPTACLE_LOADS: "Receptacle Loads",
    LoadCategory.ELEVATORS: "Elevators",
    LoadCategory.KITCHEN_EQUIPMENT: "Kitchen Equipment",
    LoadCategory.SPECIAL_EQUIPMENT: "Special Equipment",
    LoadCategory.PROCESS_EQUIPMENT: "Process Equipment",
    LoadCategory.WELDING_EQUIPMENT: "Welding Equipment",
    LoadCategory.CONTROL_SYSTEMS: "Control Systems",
    LoadCategory.GENERAL_LIGHTING_RECEPTACLES: "General Lighting & Receptacles",
    LoadCategory.MOTOR_LOADS: "Motor Loads",
    LoadCategory.UNCLASSIFIED: "Unclassified Loads",
}

@dataclass
class MotorLoad:
    name: str
    power: float  # kW
    is_largest: bool = False
    power_factor: float = 0.85
    duty_cycle: Any = DutyCycle.CONTINUOUS
    id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MotorLoad":
        return cls(
            name=data.get("name", ""),
            power=data.get("power", 0.0),
            is_largest=bool(data.get("isLargest", False)),
            power_factor=data.get("powerFactor", 0.85),
            duty_cycle=data.get("dutyCycle", DutyCycle.CONTINUOUS.value),
            id=str(data.get("id", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        duty = self.duty_cycle.value if isinstance(self.duty_cycle, DutyCycle) else self.duty_cycle
        return {
            "id": self.id,
            "name": self.name,
            "power": self.power,
            "isLargest": self.is_largest,
            "powerFactor": self.power_factor,
            "dutyCycle": duty,
        }

@dataclass
class LoadInputs:
    values: Dict[LoadCategory, Any] = field(default_factory=dict)  # kW per category
    motor_loads: List[MotorLoad] = field(default_factory=list)
    unclassified: Dict[str, Any] = field(default_factory=dict)  # unrecognized wire keys

    def get(self, category: LoadCategory) -> float:
        return self.values.get(category, 0.0)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LoadInputs":
        loads = cls()
        for key, value in (data or {}).items():
            if key == "motorLoads":
                loads.motor_loads = [MotorLoad.from_dict(m) if isinstance(m, dict) else m for m in value or []]
                continue
            category = key if isinstance(key, LoadCategory) else LoadCategory.from_key(key)
            if category is None:
                loads.unclassified[key] = value
            else:
                loads.values[category] = value
        return loads

    @classmethod
    def coerce(cls, loads: Any) -> "LoadInputs":
        if isinstance(loads, LoadInputs):
            return loads
        return cls.from_dict(loads)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {c.value: v for c, v in self.values.items()}
        out.update(self.unclassified)
        if self.motor_loads:
            out["motorLoads"] = [m.to_dict() for m in self.motor_loads]
        return out

def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value

@dataclass
class DemandCalculationParameters:
    project_type: Any  # ProjectType, or its wire string before validation
    standard: Any      # Standard, or its wire string before validation
    voltage: float
    phases: int  # 1 or 3
    loads: LoadInputs = field(default_factory=LoadInputs)
    project_name: str = ""
    frequency: int = 50
    future_expansion: float = 0.0  # fraction, 0.2 = 20%
    custom_factors: Dict[str, float] = field(default_factory=dict)
    building_type: Any = BuildingType.OFFICE
    kitchen_equipment_units: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DemandCalculationParameters":
        return cls(
            project_name=data.get("projectName", ""),
            project_type=data.get("projectType"),
            standard=data.get("standard"),
            voltage=data.get("voltage"),
            phases=data.get("phases"),
            frequency=data.get("frequency", 50),
            loads=LoadInputs.from_dict(data.get("loads")),
            future_expansion=data.get("futureExpansion") or 0.0,
            custom_factors=dict(data.get("customFactors") or {}),
            building_type=data.get("buildingType") or BuildingType.OFFICE.value,
            kitchen_equipment_units=data.get("kitchenEquipmentUnits"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectName": self.project_name,
            "projectType": _enum_value(self.project_type),
            "standard": _enum_value(self.standard),
            "voltage": self.voltage,
            "phases": self.phases,
            "frequency": self.frequency,
            "loads": LoadInputs.coerce(self.loads).to_dict(),
            "futureExpansion": self.future_expansion,
            "customFactors": {_enum_value(k): v for k, v in self.custom_factors.items()},
            "buildingType": _enum_value(self.building_type),
            "kitchenEquipmentUnits": self.kitchen_equipment_units,
        }

@dataclass
class CategoryResult:
    category: LoadCategory
    connected_load: float  # kW
    applied_factor: float  # effective demand/connected ratio for tiered categories
    demand_load: float     # kW
    standard_reference: str
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "connectedLoad": self.connected_load,
            "appliedFactor": self.applied_factor,
            "demandLoad": self.demand_load,
            "standardReference": self.standard_reference,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryResult":
        return cls(
            category=LoadCategory(data["category"]),
            connected_load=data["connectedLoad"],
            applied_factor=data["appliedFactor"],
            demand_load=data["demandLoad"],
            standard_reference=data["standardReference"],
            notes=data.get("notes", ""),
        )

@dataclass
class ComplianceCheck:
    standard: str
    clause: str
    requirement: str
    compliant: bool
    details: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "standard": self.standard,
            "clause": self.clause,
            "requirement": self.requirement,
            "compliant": self.compliant,
            "details": self.details,
        }

@dataclass
class DemandCalculationResult:
    total_connected_load: float  # kW
    maximum_demand: float        # kW
    overall_diversity_factor: float
    category_breakdown: List[CategoryResult]
    compliance_checks: List[ComplianceCheck]
    recommended_service_size: float  # A
    recommended_breaker_size: float  # A
    standard_used: str
    warnings: List[str] = field(default_factory=list)
    calculation_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalConnectedLoad": self.total_connected_load,
            "maximumDemand": self.maximum_demand,
            "overallDiversityFactor": self.overall_diversity_factor,
            "categoryBreakdown": [c.to_dict() for c in self.category_breakdown],
            "complianceChecks": [c.to_dict() for c in self.compliance_checks],
            "recommendedServiceSize": self.recommended_service_size,
            "recommendedBreakerSize": self.recommended_breaker_size,
            "calculationTimestamp": self.calculation_timestamp.isoformat(),
            "standardUsed": self.standard_used,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DemandCalculationResult":
        return cls(
            total_connected_load=data["totalConnectedLoad"],
            maximum_demand=data["maximumDemand"],
            overall_diversity_factor=data["overallDiversityFactor"],
            category_breakdown=[CategoryResult.from_dict(c) for c in data.get("categoryBreakdown", [])],
            compliance_checks=[ComplianceCheck(**c) for c in data.get("complianceChecks", [])],
            recommended_service_size=data["recommendedServiceSize"],
            recommended_breaker_size=data["recommendedBreakerSize"],
            standard_used=data["standardUsed"],
            warnings=list(data.get("warnings", [])),
            calculation_timestamp=datetime.fromisoformat(data["calculationTimestamp"]),
        )
