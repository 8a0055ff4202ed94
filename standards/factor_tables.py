from core.components import FactorEntry, Tier, TieredFactor, QuantityTier
from core.models import BuildingType

# ----------------------------------------------------------------------------
# IEC 60364 diversity factors
# ----------------------------------------------------------------------------

# IEC 60364-5-52 - Residential (factor applied to connected load)
IEC_RESIDENTIAL_FACTORS = {
    "lighting": FactorEntry(1.0, "IEC 60364-5-52", "No diversity applied for lighting circuits"),
    "socketOutlets": FactorEntry(0.4, "IEC 60364-5-52", "60% diversity applied - not all outlets used simultaneously"),
    "hvac": FactorEntry(0.8, "IEC 60364-5-52", "20% diversity for heating/cooling systems"),
    "cookingAppliances": FactorEntry(0.7, "IEC 60364-5-52", "30% diversity for cooking appliances"),
    "waterHeating": FactorEntry(1.0, "IEC 60364-5-52", "Continuous load - no diversity applied"),
    "otherAppliances": FactorEntry(0.6, "IEC 60364-5-52", "40% diversity for other appliances (washers, dryers, etc.)"),
}
IEC_RESIDENTIAL_DEFAULT = FactorEntry(0.6, "IEC 60364-5-52", "Default diversity factor")

# Commercial, by building type
IEC_COMMERCIAL_FACTORS = {
    BuildingType.OFFICE: {
        "overall": FactorEntry(0.75, "IEC 60364-5-52", "Typical office building overall diversity"),
        "lighting": FactorEntry(0.9, "IEC 60364-5-52", "10% diversity for office lighting"),
        "receptacles": FactorEntry(0.7, "IEC 60364-5-52", "30% diversity for office receptacles"),
        "hvac": FactorEntry(0.85, "IEC 60364-5-52", "15% diversity for HVAC systems"),
    },
    BuildingType.RETAIL: {
        "overall": FactorEntry(0.85, "IEC 60364-5-52", "Typical retail space overall diversity"),
        "lighting": FactorEntry(0.95, "IEC 60364-5-52", "5% diversity for retail lighting"),
        "receptacles": FactorEntry(0.8, "IEC 60364-5-52", "20% diversity for retail receptacles"),
    },
}
IEC_COMMERCIAL_DEFAULT = FactorEntry(0.8, "IEC 60364-5-52", "Default commercial diversity factor")

# Industrial (non-motor). Motors use the IEC 61439-1 RDF below.
IEC_INDUSTRIAL_FACTORS = {
    "processEquipment": FactorEntry(0.8, "IEC 60364-5-52", "20% diversity for process equipment"),
    "lighting": FactorEntry(0.9, "IEC 60364-5-52", "10% diversity for industrial lighting"),
    "weldingEquipment": FactorEntry(0.8, "IEC 60364-5-52", "20% diversity for welding equipment"),
    "controlSystems": FactorEntry(1.0, "IEC 60364-5-52", "Control systems taken at 100%"),
}
IEC_INDUSTRIAL_DEFAULT = FactorEntry(0.8, "IEC 60364-5-52", "Default industrial diversity factor")

# IEC 61439-1 Table 101 - Rated Diversity Factor by number of circuits
# Format: (Max_Circuits, RDF); None = no upper bound
IEC_RATED_DIVERSITY_FACTORS = (
    (1, 1.0),
    (3, 0.9),   # 2-3 circuits
    (5, 0.8),   # 4-5
    (9, 0.7),   # 6-9
    (None, 0.6),  # 10+
)
IEC_RDF_CLAUSE = "IEC 61439-1 Table 101"

# ----------------------------------------------------------------------------
# NEC Article 220 demand factors
# ----------------------------------------------------------------------------

# NEC 220.82 - Optional method for dwelling units
NEC_DWELLING_OPTIONAL = {
    "generalLightingReceptacles": TieredFactor(
        tiers=(Tier(10.0, 1.0), Tier(None, 0.4)),
        clause="NEC 220.82(B)",
        notes="First 10 kVA at 100%, remainder at 40%",
    ),
    "cookingAppliances": FactorEntry(0.75, "NEC 220.55", "Cooking appliances demand factor"),
    "hvac": FactorEntry(1.0, "NEC 220.82(C)(1)", "100% of largest heating or cooling system"),
    "waterHeating": FactorEntry(1.0, "NEC 220.82(B)", "100% of water heater load"),
    "dryer": FactorEntry(1.0, "NEC 220.82(B)", "100% of dryer load"),
}
NEC_DRYER_MINIMUM_KW = 5.0

# NEC 220.42 - General lighting
NEC_LIGHTING_DEMAND_FACTORS = {
    "dwelling": TieredFactor(
        tiers=(Tier(3.0, 1.0), Tier(117.0, 0.35), Tier(None, 0.25)),  # 3-120 kVA @ 35%
        clause="NEC 220.42",
        notes="First 3 kVA at 100%, next 117 kVA at 35%, remainder at 25%",
    ),
    "commercial": TieredFactor(
        tiers=(Tier(12.5, 1.0), Tier(None, 0.75)),
        clause="NEC 220.42",
        notes="First 12.5 kVA @ 100%, remainder @ 75%",
    ),
}

# NEC 220.44 - Receptacle loads, other than dwelling units
NEC_RECEPTACLE_DEMAND_FACTORS = {
    "nonDwelling": TieredFactor(
        tiers=(Tier(10.0, 1.0), Tier(None, 0.5)),
        clause="NEC 220.44",
        notes="First 10 kVA @ 100%, remainder @ 50%",
    ),
}

# NEC 430 - Motors
NEC_MOTOR_DEMAND_FACTORS = {
    "singleMotor": FactorEntry(1.25, "NEC 430.22", "125% of full-load current for single motor"),
    "largestMotor": FactorEntry(1.25, "NEC 430.24", "125% of largest motor"),
    "otherMotors": FactorEntry(1.0, "NEC 430.24", "100% of other motors"),
    "continuousDuty": FactorEntry(1.25, "NEC 430.32", "125% for continuous duty motors"),
}
NEC_MOTOR_GROUP_NOTES = "125% of largest + 100% of others"

# NEC 220.56 - Kitchen equipment, other than dwelling unit(s)
NEC_KITCHEN_EQUIPMENT_FACTORS = (
    QuantityTier(1, 1, 1.0),
    QuantityTier(2, 2, 0.8),
    QuantityTier(3, 3, 0.75),
    QuantityTier(4, 5, 0.7),
    QuantityTier(6, 100, 0.65),
)
NEC_KITCHEN_CLAUSE = "NEC 220.56"
NEC_KITCHEN_NOTES = "Demand factors based on number of kitchen equipment units"
NEC_KITCHEN_DEFAULT_FACTOR = 0.65

# Commercial loads other than lighting/receptacles/kitchen
NEC_COMMERCIAL_FACTORS = {
    "hvac": FactorEntry(1.0, "NEC 220.50", "100% of largest HVAC system"),
    "elevators": FactorEntry(1.0, "NEC 220.14", "No demand factor - 100% of elevator load"),
    "specialEquipment": FactorEntry(1.0, "NEC 220.14", "No demand factor - 100% of special equipment"),
}

# Industrial loads other than motors
NEC_INDUSTRIAL_FACTORS = {
    "processEquipment": FactorEntry(0.9, "NEC Article 220", "10% diversity applied"),
    "lighting": FactorEntry(1.0, "NEC 220.12", "100% for industrial lighting"),
    "weldingEquipment": FactorEntry(1.0, "NEC 220.14", "No demand factor - 100% of welding load"),
    "controlSystems": FactorEntry(1.0, "NEC 220.14", "No demand factor - 100% of control systems"),
}
NEC_DEFAULT = FactorEntry(1.0, "NEC 220.14", "No Article 220 demand factor - taken at 100%")

# ----------------------------------------------------------------------------
# Standard ampere ratings for service / main breaker selection (NEC 240.6(A) based)
# ----------------------------------------------------------------------------
STANDARD_AMPERE_RATINGS = (
    15, 20, 30, 40, 60, 100, 125, 150, 175, 200, 225, 250, 300, 350, 400,
    500, 600, 800, 1000, 1200, 1600, 2000, 2500, 3000, 4000, 5000, 6000,
)

STANDARD_LABELS = {
    "IEC": "IEC 60364-5-52",
    "NEC": "NEC Article 220",
}

# ----------------------------------------------------------------------------
# Accessors
# ----------------------------------------------------------------------------

def get_iec_residential_factor(category: str) -> FactorEntry:
    return IEC_RESIDENTIAL_FACTORS.get(category, IEC_RESIDENTIAL_DEFAULT)

def get_iec_commercial_factor(building_type: BuildingType, category: str) -> FactorEntry:
    building_factors = IEC_COMMERCIAL_FACTORS.get(building_type, {})
    return building_factors.get(category, IEC_COMMERCIAL_DEFAULT)

def get_iec_industrial_factor(category: str) -> FactorEntry:
    return IEC_INDUSTRIAL_FACTORS.get(category, IEC_INDUSTRIAL_DEFAULT)

def get_iec_rated_diversity_factor(num_circuits: int) -> FactorEntry:
    if num_circuits <= 1:
        return FactorEntry(1.0, IEC_RDF_CLAUSE, "Single circuit - no diversity")
    for limit, rdf in IEC_RATED_DIVERSITY_FACTORS:
        if limit is None or num_circuits <= limit:
            return FactorEntry(rdf, IEC_RDF_CLAUSE, f"RDF={rdf} for {num_circuits} circuits")
    return FactorEntry(0.6, IEC_RDF_CLAUSE, "RDF fallback")

def get_nec_factor(table: dict, category: str) -> FactorEntry:
    return table.get(category, NEC_DEFAULT)
