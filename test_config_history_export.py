import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from openpyxl import load_workbook

from core.config import CONFIG_ENV_VAR, EngineSettings, load_settings, settings_from_dict
from core.engine import DemandCalculationEngine
from core.export import breakdown_dataframe, export_to_excel
from core.history import CalculationHistory
from core.validation import validate_parameters

PARAMS = {
    "projectName": "Warehouse",
    "projectType": "industrial",
    "standard": "NEC",
    "voltage": 480,
    "phases": 3,
    "frequency": 60,
    "loads": {
        "processEquipment": 120,
        "lighting": 15,
        "motorLoads": [{"id": "m1", "name": "Conveyor", "power": 22, "isLargest": True}],
    },
    "futureExpansion": 0.1,
}

class TestSettings(unittest.TestCase):
    def test_overrides(self):
        settings = settings_from_dict({"high_connected_load_kw": 750, "breaker_sizing_factor": 1.0})
        self.assertEqual(settings.high_connected_load_kw, 750)
        self.assertEqual(settings.breaker_sizing_factor, 1.0)
        self.assertEqual(settings.decimals, 3)

    def test_rejects_bad_values(self):
        with self.assertRaises(ValueError):
            settings_from_dict({"no_such_setting": 1})
        with self.assertRaises(ValueError):
            settings_from_dict({"breaker_sizing_factor": 0.8})
        with self.assertRaises(ValueError):
            settings_from_dict({"history_limit": 0})

    def test_load_yaml_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "engine.yaml"
            path.write_text("engine:\n  high_voltage_v: 600\n  decimals: 2\n", encoding="utf-8")
            settings = load_settings(path)
        self.assertEqual(settings.high_voltage_v, 600)
        self.assertEqual(settings.decimals, 2)

    def test_env_var(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "engine.yaml"
            path.write_text("engine:\n  history_limit: 5\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {CONFIG_ENV_VAR: str(path)}):
                self.assertEqual(load_settings().history_limit, 5)

    def test_defaults_without_file(self):
        with mock.patch.dict(os.environ, {CONFIG_ENV_VAR: ""}):
            self.assertEqual(load_settings(), EngineSettings())

    def test_non_mapping_root(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "engine.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_settings(path)


class TestHistory(unittest.TestCase):
    def setUp(self):
        self.engine = DemandCalculationEngine()
        self.params = validate_parameters(PARAMS)
        self.result = self.engine.calculate(self.params)

    def test_newest_first_and_capped(self):
        history = CalculationHistory(limit=2)
        first = history.add(self.params, self.result)
        second = history.add(self.params, self.result)
        third = history.add(self.params, self.result)

        self.assertEqual(len(history), 2)
        self.assertIs(history.latest(), third)
        self.assertEqual([e.id for e in history.entries()], [third.id, second.id])
        self.assertIsNone(history.get(first.id))

    def test_remove_and_clear(self):
        history = CalculationHistory()
        entry = history.add(self.params, self.result)
        self.assertTrue(history.remove(entry.id))
        self.assertFalse(history.remove(entry.id))
        history.add(self.params, self.result)
        history.clear()
        self.assertIsNone(history.latest())

    def test_summaries(self):
        history = CalculationHistory()
        history.add(self.params, self.result)
        summary = history.summaries()[0]
        self.assertEqual(summary["projectName"], "Warehouse")
        self.assertEqual(summary["standard"], "NEC")
        self.assertEqual(summary["projectType"], "industrial")
        self.assertEqual(summary["maximumDemand"], self.result.maximum_demand)

    def test_save_and_load(self):
        history = CalculationHistory(limit=10)
        entry = history.add(self.params, self.result)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "history.json"
            history.save(path)
            restored = CalculationHistory.load(path)

        self.assertEqual(restored.limit, 10)
        loaded = restored.get(entry.id)
        self.assertIsNotNone(loaded)
        self.assertEqual(loaded.result.to_dict(), self.result.to_dict())
        # Restored parameters calculate to the same demand
        self.assertEqual(self.engine.calculate(loaded.params).maximum_demand, self.result.maximum_demand)

    def test_limit_from_settings(self):
        history = CalculationHistory.from_settings(EngineSettings(history_limit=1))
        self.assertEqual(history.limit, 1)
        history.add(self.params, self.result)
        latest = history.add(self.params, self.result)
        self.assertEqual([e.id for e in history.entries()], [latest.id])
        self.assertEqual(CalculationHistory.from_settings().limit, 50)

    def test_invalid_limit(self):
        with self.assertRaises(ValueError):
            CalculationHistory(limit=0)


class TestExcelExport(unittest.TestCase):
    def setUp(self):
        self.params = validate_parameters(PARAMS)
        self.result = DemandCalculationEngine().calculate(self.params)

    def test_breakdown_dataframe(self):
        df = breakdown_dataframe(self.result)
        self.assertEqual(len(df), len(self.result.category_breakdown))
        self.assertEqual(df.iloc[0]["Category"], "Motor Loads")
        self.assertIn("Demand Load (kW)", df.columns)

    def test_workbook_bytes(self):
        data = export_to_excel(self.params, self.result)
        self.assertTrue(data.startswith(b"PK"))

        wb = load_workbook(io.BytesIO(data))
        self.assertEqual(wb.sheetnames, ["Summary", "Category Breakdown", "Compliance", "Warnings"])
        ws = wb["Category Breakdown"]
        self.assertEqual(ws["A1"].value, "Category")
        self.assertTrue(ws["A1"].font.bold)
        self.assertEqual(ws.max_row, len(self.result.category_breakdown) + 1)

    def test_workbook_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "report.xlsx"
            self.assertIsNone(export_to_excel(self.params, self.result, path))
            wb = load_workbook(path)
            self.assertEqual(wb["Compliance"]["B2"].value, "210.20(A)")

if __name__ == '__main__':
    unittest.main()
