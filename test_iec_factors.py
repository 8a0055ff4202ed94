import unittest
from core.models import BuildingType, LoadCategory, LoadInputs, MotorLoad
from standards.factor_tables import (
    get_iec_commercial_factor, get_iec_industrial_factor, get_iec_rated_diversity_factor, get_iec_residential_factor,
)
from standards.iec import (
    IECCommercialCalculator, IECIndustrialCalculator, IECResidentialCalculator, calculate_iec_overall_diversity,
)

class TestIECFactorTables(unittest.TestCase):
    def test_residential_lookup(self):
        self.assertEqual(get_iec_residential_factor("lighting").factor, 1.0)
        self.assertEqual(get_iec_residential_factor("socketOutlets").factor, 0.4)
        self.assertEqual(get_iec_residential_factor("cookingAppliances").factor, 0.7)
        # Unknown category -> residential default
        self.assertEqual(get_iec_residential_factor("sauna").factor, 0.6)

    def test_commercial_lookup_by_building_type(self):
        self.assertEqual(get_iec_commercial_factor(BuildingType.OFFICE, "lighting").factor, 0.9)
        self.assertEqual(get_iec_commercial_factor(BuildingType.RETAIL, "receptacles").factor, 0.8)
        # Retail has no HVAC entry
        self.assertEqual(get_iec_commercial_factor(BuildingType.RETAIL, "hvac").factor, 0.8)

    def test_industrial_lookup(self):
        self.assertEqual(get_iec_industrial_factor("processEquipment").factor, 0.8)
        self.assertEqual(get_iec_industrial_factor("lighting").factor, 0.9)
        self.assertEqual(get_iec_industrial_factor("compressors").factor, 0.8)

    def test_rated_diversity_factor(self):
        self.assertEqual(get_iec_rated_diversity_factor(1).factor, 1.0)
        self.assertEqual(get_iec_rated_diversity_factor(3).factor, 0.9)
        self.assertEqual(get_iec_rated_diversity_factor(4).factor, 0.8)
        self.assertEqual(get_iec_rated_diversity_factor(9).factor, 0.7)
        self.assertEqual(get_iec_rated_diversity_factor(25).factor, 0.6)
        self.assertIn("61439-1", get_iec_rated_diversity_factor(2).clause)


class TestIECOverallDiversity(unittest.TestCase):
    def test_overall_diversity(self):
        loads = {"lighting": 10, "socketOutlets": 20, "hvac": 15, "cookingAppliances": 8, "waterHeating": 6}
        overall, connected, demand = calculate_iec_overall_diversity(loads)
        # Demand = 10 + 8 + 12 + 5.6 + 6 = 41.6 kW
        self.assertAlmostEqual(connected, 59.0)
        self.assertAlmostEqual(demand, 41.6)
        self.assertAlmostEqual(overall, 1 - 41.6 / 59.0)

    def test_negative_and_missing_are_absent(self):
        overall, connected, demand = calculate_iec_overall_diversity({"lighting": -5, "socketOutlets": None})
        self.assertEqual((overall, connected, demand), (0.0, 0.0, 0.0))


class TestIECCalculators(unittest.TestCase):
    def test_residential_breakdown(self):
        calc = IECResidentialCalculator()
        loads = LoadInputs.from_dict({"lighting": 10, "socketOutlets": 20})
        connected, demand, breakdown = calc.calculate(loads)

        self.assertEqual([c.category for c in breakdown], [LoadCategory.LIGHTING, LoadCategory.SOCKET_OUTLETS])
        self.assertAlmostEqual(connected, 30.0)
        # 10 * 1.0 + 20 * 0.4
        self.assertAlmostEqual(demand, 18.0)
        self.assertEqual(breakdown[1].standard_reference, "IEC 60364-5-52")

    def test_residential_zero_categories_omitted(self):
        calc = IECResidentialCalculator()
        _, _, breakdown = calc.calculate(LoadInputs.from_dict({"lighting": 0, "hvac": 4}))
        self.assertEqual([c.category for c in breakdown], [LoadCategory.HVAC])

    def test_commercial_office_and_retail(self):
        loads = LoadInputs.from_dict({"generalLighting": 20, "receptacleLoads": 10, "hvac": 40})

        _, office, _ = IECCommercialCalculator(BuildingType.OFFICE).calculate(loads)
        # 20*0.9 + 10*0.7 + 40*0.85 = 18 + 7 + 34
        self.assertAlmostEqual(office, 59.0)

        _, retail, _ = IECCommercialCalculator(BuildingType.RETAIL).calculate(loads)
        # 20*0.95 + 10*0.8 + 40*0.8 (default) = 19 + 8 + 32
        self.assertAlmostEqual(retail, 59.0)

    def test_commercial_unmapped_category_uses_default(self):
        loads = LoadInputs.from_dict({"elevators": 25})
        _, demand, breakdown = IECCommercialCalculator().calculate(loads)
        self.assertAlmostEqual(demand, 20.0)
        self.assertEqual(breakdown[0].category, LoadCategory.ELEVATORS)

    def test_industrial_motor_group_rdf(self):
        loads = LoadInputs(
            values={LoadCategory.PROCESS_EQUIPMENT: 50.0},
            motor_loads=[
                MotorLoad("Pump 1", 10, is_largest=True),
                MotorLoad("Pump 2", 10),
                MotorLoad("Fan", 10),
            ],
        )
        connected, demand, breakdown = IECIndustrialCalculator().calculate(loads)
        # Motors: 30 * RDF 0.9 (3 circuits) = 27; process: 50 * 0.8 = 40
        self.assertAlmostEqual(connected, 80.0)
        self.assertAlmostEqual(demand, 67.0)
        self.assertEqual(breakdown[0].category, LoadCategory.MOTOR_LOADS)
        self.assertAlmostEqual(breakdown[0].applied_factor, 0.9)

    def test_unaddressed_loads_go_to_unclassified(self):
        calc = IECResidentialCalculator()
        loads = LoadInputs.from_dict({"lighting": 10, "processEquipment": 5, "pool": 5})
        connected, demand, breakdown = calc.calculate(loads)

        unclassified = breakdown[-1]
        self.assertEqual(unclassified.category, LoadCategory.UNCLASSIFIED)
        self.assertAlmostEqual(unclassified.connected_load, 10.0)
        # Residential default 0.6
        self.assertAlmostEqual(unclassified.demand_load, 6.0)
        self.assertIn("pool", unclassified.notes)
        self.assertIn("processEquipment", unclassified.notes)
        self.assertAlmostEqual(connected, 20.0)
        self.assertAlmostEqual(demand, 16.0)

    def test_custom_factor_overrides(self):
        calc = IECResidentialCalculator()
        loads = LoadInputs.from_dict({"socketOutlets": 20})
        _, demand, breakdown = calc.calculate(loads, {LoadCategory.SOCKET_OUTLETS: 0.5})
        self.assertAlmostEqual(demand, 10.0)
        self.assertEqual(breakdown[0].applied_factor, 0.5)
        self.assertIn("Custom factor", breakdown[0].notes)

if __name__ == '__main__':
    unittest.main()
