"""
Tabular views of the dashboard state.
Flattens reports, energy lines and actions into DataFrames, computes the
groupings the dashboard charts show, and writes CSV outputs.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from .config import ACTIONS_OUTPUT_FILE, ENERGY_OUTPUT_FILE, OUTPUTS_DIR, REPORTS_OUTPUT_FILE
from .models import DashboardState

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "file_name", "upload_date", "organization_name", "region", "industry",
    "implementation_status", "total_cost_savings", "total_energy_savings",
    "total_emissions_saved", "emissions_reduction_pct", "grant_amount",
    "grant_is_heuristic", "extraction_method", "sha256",
]
ENERGY_COLUMNS = ["organization", "type", "cost", "usage", "emissions"]
ACTION_COLUMNS = [
    "organization", "name", "energy_savings", "cost_savings",
    "emissions_reduction", "status", "status_is_heuristic",
]


def reports_frame(state: DashboardState) -> pd.DataFrame:
    """One row per absorbed report."""
    rows = []
    for entry in state.reports:
        data = entry.data
        rows.append({
            "file_name": entry.file_name,
            "upload_date": entry.upload_date,
            "organization_name": data.organization_name,
            "region": data.region,
            "industry": data.industry,
            "implementation_status": data.implementation_status,
            "total_cost_savings": data.total_cost_savings,
            "total_energy_savings": data.total_energy_savings,
            "total_emissions_saved": data.total_emissions_saved,
            "emissions_reduction_pct": data.emissions_reduction_pct,
            "grant_amount": data.grant_amount,
            "grant_is_heuristic": "grantAmount" in data.heuristic_fields,
            "extraction_method": data.extraction_method,
            "sha256": entry.sha256,
        })
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def energy_frame(state: DashboardState) -> pd.DataFrame:
    rows = [
        {"organization": line.organization, "type": line.type, "cost": line.cost,
         "usage": line.usage, "emissions": line.emissions}
        for line in state.energy_data
    ]
    return pd.DataFrame(rows, columns=ENERGY_COLUMNS)


def actions_frame(state: DashboardState) -> pd.DataFrame:
    rows = [
        {"organization": a.organization, "name": a.name, "energy_savings": a.energy_savings,
         "cost_savings": a.cost_savings, "emissions_reduction": a.emissions_reduction,
         "status": a.status, "status_is_heuristic": a.status_is_heuristic}
        for a in state.recommended_actions
    ]
    return pd.DataFrame(rows, columns=ACTION_COLUMNS)


def energy_usage_by_type(state: DashboardState) -> pd.Series:
    """Total kWh per energy source, largest first."""
    df = energy_frame(state)
    if df.empty:
        return pd.Series(dtype=float, name="usage")
    return df.groupby("type")["usage"].sum().sort_values(ascending=False)


def savings_by_action(state: DashboardState, top: Optional[int] = None) -> pd.DataFrame:
    """Cost and energy savings summed per action name, largest cost saving first."""
    df = actions_frame(state)
    if df.empty:
        return pd.DataFrame(columns=["cost_savings", "energy_savings", "count"])
    summary = df.groupby("name").agg(
        cost_savings=("cost_savings", "sum"),
        energy_savings=("energy_savings", "sum"),
        count=("name", "size"),
    ).sort_values("cost_savings", ascending=False)
    if top is not None:
        summary = summary.head(top)
    return summary


def save_outputs(state: DashboardState, output_dir: Optional[Path] = None) -> dict:
    """Write reports, energy lines and actions as CSV. Returns {name: path} of files written."""
    if output_dir is None:
        output_dir = OUTPUTS_DIR
        targets = {
            "reports": REPORTS_OUTPUT_FILE,
            "energy": ENERGY_OUTPUT_FILE,
            "actions": ACTIONS_OUTPUT_FILE,
        }
    else:
        output_dir = Path(output_dir)
        targets = {
            "reports": output_dir / REPORTS_OUTPUT_FILE.name,
            "energy": output_dir / ENERGY_OUTPUT_FILE.name,
            "actions": output_dir / ACTIONS_OUTPUT_FILE.name,
        }
    output_dir.mkdir(parents=True, exist_ok=True)

    frames = {
        "reports": reports_frame(state),
        "energy": energy_frame(state),
        "actions": actions_frame(state),
    }
    written = {}
    for key, df in frames.items():
        if df.empty:
            continue
        df.to_csv(targets[key], index=False)
        logger.info(f"{key.title()} saved: {targets[key]} ({len(df)} rows)")
        written[key] = targets[key]
    return written
