"""
Configuration and path management for the energy audit pipeline.
All paths are relative to the project root (one level above audit_pipeline/).
"""

import os
from pathlib import Path

# Project root: one level up from audit_pipeline/
_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = _THIS_DIR.parent

# ── Upload storage ────────────────────────────────────────────────────────────

UPLOADS_DIR = Path(os.environ.get("AUDIT_UPLOADS_DIR", PROJECT_ROOT / "uploads"))
UPLOAD_MANIFEST_FILE = UPLOADS_DIR / "upload_manifest.json"

# Uploads larger than this are still accepted, only logged
LARGE_UPLOAD_BYTES = 50 * 1024 * 1024

# ── Output files ──────────────────────────────────────────────────────────────

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
REPORTS_OUTPUT_FILE = OUTPUTS_DIR / "audit_reports.csv"
ENERGY_OUTPUT_FILE = OUTPUTS_DIR / "audit_energy_lines.csv"
ACTIONS_OUTPUT_FILE = OUTPUTS_DIR / "audit_recommended_actions.csv"

# ── Startup behaviour ────────────────────────────────────────────────────────

SEED_DEMO_DATA = os.environ.get("AUDIT_SEED_DEMO_DATA", "").lower() in ("1", "true", "yes")

# Seed for heuristic status assignment; None means unseeded
_seed = os.environ.get("AUDIT_ACTION_STATUS_SEED")
ACTION_STATUS_SEED = int(_seed) if _seed else None

# ── Classification vocabularies ──────────────────────────────────────────────
# Ordered (keyword, value) pairs. The first keyword found anywhere in the
# document text wins; order here is the tie-break.

REGION_KEYWORDS = [
    ("Dublin", "dublin"),
    ("Cork", "cork"),
    ("Galway", "galway"),
    ("Limerick", "limerick"),
]

INDUSTRY_KEYWORDS = [
    ("Manufacturing", "manufacturing"),
    ("Commercial", "commercial"),
    ("Healthcare", "healthcare"),
    ("Hospital", "healthcare"),
    ("Education", "education"),
]

# ── Implementation status ────────────────────────────────────────────────────

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in-progress"
STATUS_IMPLEMENTED = "implemented"
IMPLEMENTATION_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_IMPLEMENTED)

# ── Heuristic placeholders ───────────────────────────────────────────────────
# None of these are read from the PDFs. Values produced from them are flagged
# as heuristic on the records that carry them.

# Grant amount when the report states none: share of total cost savings
GRANT_DERIVATION_RATE = 0.30

ACTION_STATUSES = ("Pending", "In Progress", "Implemented")

GRANT_CATALOG = (
    "SEAI Support Scheme for Energy Audits",
    "SEAI EXEED Certified Grant",
    "SEAI Non-Domestic Microgen Grant",
    "Accelerated Capital Allowance",
)

GRANT_STATUS_CATALOG = ("Eligible", "Recommended", "Under Review")
