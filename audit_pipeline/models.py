"""
Data models for the energy audit pipeline.
Every record serialises to the camelCase payload the dashboard client reads.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Optional

from .config import STATUS_PENDING


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_keys(value, drop_none: bool = True):
    """Recursively rename snake_case keys to camelCase, dropping unset optionals."""
    if isinstance(value, dict):
        return {
            _camel(k): _camel_keys(v, drop_none)
            for k, v in value.items()
            if not (drop_none and v is None)
        }
    if isinstance(value, list):
        return [_camel_keys(v, drop_none) for v in value]
    return value


@dataclass
class EnergyLine:
    """One row of the energy-source table."""
    type: str  # "Electricity", "Gas", "Oil"
    cost: float
    usage: float  # kWh
    emissions: float
    organization: Optional[str] = None  # set once absorbed into the dashboard

    def to_dict(self) -> dict:
        return _camel_keys(asdict(self))


@dataclass
class ActionLine:
    """One recommended efficiency action."""
    name: str
    energy_savings: float
    cost_savings: float
    emissions_reduction: float
    status: str = "Pending"
    status_is_heuristic: bool = False
    organization: Optional[str] = None

    def to_dict(self) -> dict:
        return _camel_keys(asdict(self))


@dataclass
class ExtractedReport:
    """Structured facts for one audit document."""
    organization_name: str = "Unknown"
    total_cost_savings: float = 0.0
    total_emissions_saved: float = 0.0
    total_energy_savings: float = 0.0
    emissions_reduction_pct: Optional[int] = None
    grant_amount: float = 0.0
    implementation_status: str = STATUS_PENDING
    region: str = ""
    industry: str = ""
    energy_data: List[EnergyLine] = field(default_factory=list)
    recommended_actions: List[ActionLine] = field(default_factory=list)
    # Caller-supplied only
    auditor_name: Optional[str] = None
    building_type: Optional[str] = None
    notes: Optional[str] = None
    # Provenance
    extraction_method: str = "unknown"  # "pdfplumber_pages", "pypdf_text", "stub"
    heuristic_fields: List[str] = field(default_factory=list)

    def mark_heuristic(self, name: str):
        if name not in self.heuristic_fields:
            self.heuristic_fields.append(name)

    def clear_heuristic(self, name: str):
        if name in self.heuristic_fields:
            self.heuristic_fields.remove(name)

    def to_dict(self) -> dict:
        return _camel_keys(asdict(self))


@dataclass
class ReportOverrides:
    """Fields an uploader may supply alongside the PDF. Unset means 'keep extracted'."""
    grant_amount: Optional[object] = None  # str or number from a form
    implementation_status: Optional[str] = None
    auditor_name: Optional[str] = None
    building_type: Optional[str] = None
    region: Optional[str] = None
    industry: Optional[str] = None
    notes: Optional[str] = None

    _FORM_KEYS = {
        "grantAmount": "grant_amount",
        "implementationStatus": "implementation_status",
        "auditorName": "auditor_name",
        "buildingType": "building_type",
        "region": "region",
        "industry": "industry",
        "notes": "notes",
    }

    @classmethod
    def from_form(cls, form: Optional[dict]) -> "ReportOverrides":
        """Build from an upload form, accepting camelCase or snake_case keys."""
        if not form:
            return cls()
        values = {}
        for key, value in form.items():
            attr = cls._FORM_KEYS.get(key, key)
            if attr in cls._FORM_KEYS.values():
                values[attr] = value
        return cls(**values)


@dataclass
class ApplicationStatus:
    """Tally of reports by implementation status."""
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    rejected: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return _camel_keys(asdict(self))


@dataclass
class GrantRecommendation:
    """Placeholder grant suggestion synthesised per upload, not a real match."""
    name: str
    organization: str
    amount: float
    status: str
    basis: str = "heuristic"

    def to_dict(self) -> dict:
        return _camel_keys(asdict(self))


@dataclass
class ReportEntry:
    """One upload as kept in the dashboard history."""
    file_name: str
    organization_name: str
    data: ExtractedReport
    upload_date: str = field(default_factory=lambda: datetime.now().isoformat())
    sha256: str = ""

    def to_dict(self) -> dict:
        return _camel_keys(asdict(self))


@dataclass
class DashboardState:
    """Process-lifetime accumulator behind the dashboard. Never persisted."""
    total_audits: int = 0
    total_emissions_saved: float = 0.0
    total_euro_saved: float = 0.0
    total_grants: float = 0.0
    audit_conversion: int = 0
    organizations: List[str] = field(default_factory=list)
    regions: List[str] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)
    energy_data: List[EnergyLine] = field(default_factory=list)
    recommended_actions: List[ActionLine] = field(default_factory=list)
    reports: List[ReportEntry] = field(default_factory=list)
    recommended_grants: List[GrantRecommendation] = field(default_factory=list)
    application_status: ApplicationStatus = field(default_factory=ApplicationStatus)

    def to_dict(self) -> dict:
        return _camel_keys(asdict(self))
