import io
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd
from openpyxl.styles import Font, PatternFill

from .models import DemandCalculationParameters, DemandCalculationResult

logger = logging.getLogger(__name__)

BREAKDOWN_COLUMNS = ["Category", "Connected Load (kW)", "Factor", "Demand Load (kW)", "Reference", "Notes"]

def breakdown_dataframe(result: DemandCalculationResult) -> pd.DataFrame:
    rows = [
        {
            "Category": c.category.label,
            "Connected Load (kW)": c.connected_load,
            "Factor": c.applied_factor,
            "Demand Load (kW)": c.demand_load,
            "Reference": c.standard_reference,
            "Notes": c.notes,
        }
        for c in result.category_breakdown
    ]
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)

def _summary_dataframe(params: DemandCalculationParameters, result: DemandCalculationResult) -> pd.DataFrame:
    return pd.DataFrame([
        {"Parameter": "Project", "Value": params.project_name},
        {"Parameter": "Project Type", "Value": params.project_type.value},
        {"Parameter": "Standard", "Value": result.standard_used},
        {"Parameter": "Supply", "Value": f"{params.voltage:g} V, {params.phases}Ph, {params.frequency} Hz"},
        {"Parameter": "Future Expansion", "Value": f"{params.future_expansion * 100:g}%"},
        {"Parameter": "Total Connected Load (kW)", "Value": result.total_connected_load},
        {"Parameter": "Maximum Demand (kW)", "Value": result.maximum_demand},
        {"Parameter": "Overall Diversity Factor", "Value": result.overall_diversity_factor},
        {"Parameter": "Recommended Service (A)", "Value": result.recommended_service_size},
        {"Parameter": "Recommended Breaker (A)", "Value": result.recommended_breaker_size},
        {"Parameter": "Calculated", "Value": result.calculation_timestamp.strftime("%Y-%m-%d %H:%M UTC")},
    ])

def export_to_excel(params: DemandCalculationParameters, result: DemandCalculationResult,
                    target: Optional[Union[str, Path]] = None) -> Optional[bytes]:
    """
    Writes the calculation report workbook.
    With a target path the file is saved there; without one the workbook bytes are returned.
    `params` must be the validated parameters (enum fields resolved).
    """
    output = io.BytesIO() if target is None else target

    compliance = pd.DataFrame(
        [
            {
                "Standard": c.standard,
                "Clause": c.clause,
                "Requirement": c.requirement,
                "Compliant": "Yes" if c.compliant else "No",
                "Details": c.details,
            }
            for c in result.compliance_checks
        ],
        columns=["Standard", "Clause", "Requirement", "Compliant", "Details"],
    )
    warnings = pd.DataFrame({"Warning": list(result.warnings)}, columns=["Warning"])

    sheets = {
        "Summary": _summary_dataframe(params, result),
        "Category Breakdown": breakdown_dataframe(result),
        "Compliance": compliance,
        "Warnings": warnings,
    }

    header_fill = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
    header_font = Font(bold=True)

    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, index=False, sheet_name=name)
            ws = writer.sheets[name]
            for cell in ws[1]:
                cell.font = header_font
                cell.fill = header_fill
            for col in ws.columns:
                ws.column_dimensions[col[0].column_letter].width = 22

    if target is None:
        return output.getvalue()
    logger.info("Excel report written to %s", target)
    return None
