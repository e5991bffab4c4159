"""
Dashboard aggregation.

`absorb` folds one finalised report into a DashboardState. The
DashboardAggregator owns the process-wide state and is its only writer:
every read-modify-write runs under one lock, so concurrent uploads are
applied one after another.
"""

import copy
import logging
import random
import threading
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from .config import (
    GRANT_CATALOG,
    GRANT_STATUS_CATALOG,
    STATUS_IMPLEMENTED,
    STATUS_IN_PROGRESS,
)
from .models import (
    ActionLine,
    ApplicationStatus,
    DashboardState,
    EnergyLine,
    ExtractedReport,
    GrantRecommendation,
    ReportEntry,
)
from .patterns import round_half_up

logger = logging.getLogger(__name__)


def _add_distinct(values: List[str], value: str):
    if value and value not in values:
        values.append(value)


def tally_status(tally: ApplicationStatus, status: str):
    """Count one report; anything unrecognised counts as pending."""
    if status == STATUS_IMPLEMENTED:
        tally.completed += 1
    elif status == STATUS_IN_PROGRESS:
        tally.in_progress += 1
    else:
        tally.pending += 1
    tally.total += 1


def conversion_rate(reports: List[ReportEntry]) -> int:
    """Percentage of reports whose recommendations are implemented, 0 when empty."""
    if not reports:
        return 0
    implemented = sum(1 for r in reports if r.data.implementation_status == STATUS_IMPLEMENTED)
    return round_half_up(100 * implemented / len(reports))


def synthesize_grant(report: ExtractedReport, rng: random.Random) -> GrantRecommendation:
    """Placeholder grant suggestion; name and status are drawn from fixed catalogs."""
    return GrantRecommendation(
        name=rng.choice(GRANT_CATALOG),
        organization=report.organization_name,
        amount=report.grant_amount,
        status=rng.choice(GRANT_STATUS_CATALOG),
    )


def absorb(report: ExtractedReport, state: DashboardState, file_name: str,
           upload_date: Optional[str] = None, sha256: str = "",
           rng: Optional[random.Random] = None) -> DashboardState:
    """Fold one report into `state` in place and return it."""
    rng = rng or random.Random()
    report = copy.deepcopy(report)
    org = report.organization_name

    state.total_audits += 1
    state.total_emissions_saved += report.total_emissions_saved or 0
    state.total_euro_saved += report.total_cost_savings or 0
    state.total_grants += report.grant_amount or 0

    _add_distinct(state.organizations, org)
    _add_distinct(state.regions, report.region)
    _add_distinct(state.industries, report.industry)

    state.energy_data.extend(replace(line, organization=org) for line in report.energy_data)
    state.recommended_actions.extend(
        replace(action, organization=org) for action in report.recommended_actions
    )

    tally_status(state.application_status, report.implementation_status)

    if report.grant_amount and report.grant_amount > 0:
        state.recommended_grants.append(synthesize_grant(report, rng))

    state.reports.append(ReportEntry(
        file_name=file_name,
        organization_name=org,
        data=report,
        upload_date=upload_date or datetime.now().isoformat(),
        sha256=sha256,
    ))
    state.audit_conversion = conversion_rate(state.reports)
    return state


class DashboardAggregator:
    """Single writer for the process-wide DashboardState."""

    def __init__(self, state: Optional[DashboardState] = None,
                 rng: Optional[random.Random] = None):
        self.state = state or DashboardState()
        self.rng = rng or random.Random()
        self._lock = threading.Lock()

    def absorb(self, report: ExtractedReport, file_name: str,
               upload_date: Optional[str] = None, sha256: str = "") -> dict:
        """Absorb one report and return the updated dashboard payload."""
        with self._lock:
            absorb(report, self.state, file_name, upload_date=upload_date,
                   sha256=sha256, rng=self.rng)
            logger.info(
                f"Absorbed {file_name} ({report.organization_name}): "
                f"{self.state.total_audits} audits, conversion {self.state.audit_conversion}%"
            )
            return self.state.to_dict()

    def snapshot(self) -> dict:
        """Full dashboard payload, detached from the live state."""
        with self._lock:
            return self.state.to_dict()

    def reports(self) -> list:
        with self._lock:
            return [entry.to_dict() for entry in self.state.reports]

    def frozen_state(self) -> DashboardState:
        """Deep copy of the live state for read-only processing."""
        with self._lock:
            return copy.deepcopy(self.state)

    def reset(self, seed_demo: bool = False):
        with self._lock:
            self.state = demo_state() if seed_demo else DashboardState()


def _demo_reports() -> List[tuple]:
    return [
        ("demo-greenfield-foods.pdf", ExtractedReport(
            organization_name="Greenfield Foods Ltd",
            total_cost_savings=42000.0,
            total_emissions_saved=58.5,
            total_energy_savings=185000.0,
            emissions_reduction_pct=22,
            grant_amount=12600.0,
            implementation_status=STATUS_IMPLEMENTED,
            region="cork",
            industry="manufacturing",
            energy_data=[
                EnergyLine(type="Electricity", cost=96000.0, usage=540000.0, emissions=190.0),
                EnergyLine(type="Gas", cost=31000.0, usage=410000.0, emissions=83.0),
            ],
            recommended_actions=[
                ActionLine(name="LED Lighting Upgrade", energy_savings=85000.0,
                           cost_savings=15000.0, emissions_reduction=30.0,
                           status="Implemented"),
                ActionLine(name="Compressed Air Leak Repair", energy_savings=100000.0,
                           cost_savings=27000.0, emissions_reduction=28.5,
                           status="Implemented"),
            ],
            extraction_method="demo",
        )),
        ("demo-st-brigids-hospital.pdf", ExtractedReport(
            organization_name="St Brigid's Hospital",
            total_cost_savings=64000.0,
            total_emissions_saved=71.0,
            total_energy_savings=260000.0,
            emissions_reduction_pct=18,
            grant_amount=19200.0,
            implementation_status=STATUS_IN_PROGRESS,
            region="dublin",
            industry="healthcare",
            energy_data=[
                EnergyLine(type="Electricity", cost=150000.0, usage=820000.0, emissions=290.0),
                EnergyLine(type="Oil", cost=48000.0, usage=390000.0, emissions=104.0),
            ],
            recommended_actions=[
                ActionLine(name="Heat Pump Installation", energy_savings=260000.0,
                           cost_savings=64000.0, emissions_reduction=71.0,
                           status="In Progress"),
            ],
            extraction_method="demo",
        )),
        ("demo-westbridge-college.pdf", ExtractedReport(
            organization_name="Westbridge College",
            total_cost_savings=18500.0,
            total_emissions_saved=16.0,
            total_energy_savings=72000.0,
            grant_amount=5550.0,
            region="galway",
            industry="education",
            energy_data=[
                EnergyLine(type="Electricity", cost=38000.0, usage=210000.0, emissions=74.0),
            ],
            recommended_actions=[
                ActionLine(name="Building Management System", energy_savings=72000.0,
                           cost_savings=18500.0, emissions_reduction=16.0),
            ],
            extraction_method="demo",
        )),
    ]


def demo_state() -> DashboardState:
    """A DashboardState seeded with fixed demonstration reports."""
    state = DashboardState()
    rng = random.Random(0)
    for file_name, report in _demo_reports():
        absorb(report, state, file_name, rng=rng)
    return state
