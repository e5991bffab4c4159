"""
Tests for folding reports into the dashboard state.
"""

import random
import threading

import pytest

from audit_pipeline.aggregator import (
    DashboardAggregator,
    absorb,
    conversion_rate,
    demo_state,
)
from audit_pipeline.models import (
    ActionLine,
    DashboardState,
    EnergyLine,
    ExtractedReport,
)


def _report(name="Acme Corp", status="pending", **kwargs):
    return ExtractedReport(organization_name=name, implementation_status=status, **kwargs)


class TestAbsorb:

    def test_totals_accumulate(self):
        state = DashboardState()
        absorb(_report(total_cost_savings=1000.0, total_emissions_saved=5.0, grant_amount=300.0),
               state, "a.pdf")
        absorb(_report("Beta Ltd", total_cost_savings=500.0, total_emissions_saved=2.5),
               state, "b.pdf")
        assert state.total_audits == 2
        assert state.total_euro_saved == 1500.0
        assert state.total_emissions_saved == 7.5
        assert state.total_grants == 300.0

    def test_distinct_sets_keep_insertion_order(self):
        state = DashboardState()
        absorb(_report("Beta Ltd", region="cork", industry="commercial"), state, "a.pdf")
        absorb(_report("Acme Corp", region="dublin"), state, "b.pdf")
        absorb(_report("Beta Ltd", region="cork", industry="commercial"), state, "c.pdf")
        assert state.organizations == ["Beta Ltd", "Acme Corp"]
        assert state.regions == ["cork", "dublin"]
        assert state.industries == ["commercial"]

    def test_lines_are_tagged_with_organisation(self):
        state = DashboardState()
        report = _report(
            energy_data=[EnergyLine("Electricity", 1.0, 2.0, 3.0)],
            recommended_actions=[ActionLine("LED Lighting", 10.0, 5.0, 1.0)],
        )
        absorb(report, state, "a.pdf")
        assert state.energy_data[0].organization == "Acme Corp"
        assert state.recommended_actions[0].organization == "Acme Corp"
        # the caller's report is left untouched
        assert report.energy_data[0].organization is None

    def test_report_entry_kept(self):
        state = DashboardState()
        absorb(_report(), state, "acme.pdf", upload_date="2026-01-05T10:00:00", sha256="ab" * 32)
        entry = state.reports[0]
        assert entry.file_name == "acme.pdf"
        assert entry.organization_name == "Acme Corp"
        assert entry.upload_date == "2026-01-05T10:00:00"
        assert entry.data.organization_name == "Acme Corp"

    def test_status_tally(self):
        state = DashboardState()
        for status in ["implemented", "in-progress", "pending", "something-else"]:
            absorb(_report(status=status), state, "x.pdf")
        tally = state.application_status
        assert (tally.completed, tally.in_progress, tally.pending, tally.rejected) == (1, 1, 2, 0)
        assert tally.total == 4

    def test_grant_synthesised_only_when_positive(self):
        state = DashboardState()
        rng = random.Random(3)
        absorb(_report(grant_amount=0.0), state, "a.pdf", rng=rng)
        absorb(_report("Beta Ltd", grant_amount=1200.0), state, "b.pdf", rng=rng)
        assert len(state.recommended_grants) == 1
        grant = state.recommended_grants[0]
        assert grant.organization == "Beta Ltd"
        assert grant.amount == 1200.0
        assert grant.basis == "heuristic"

    @pytest.mark.parametrize("statuses,expected", [
        ([], 0),
        (["implemented"], 100),
        (["implemented", "pending", "pending"], 33),
        (["implemented", "implemented", "pending"], 67),
        (["in-progress", "pending"], 0),
    ])
    def test_total_and_conversion(self, statuses, expected):
        state = DashboardState()
        for status in statuses:
            absorb(_report(status=status), state, "x.pdf")
        assert state.application_status.total == len(statuses) == len(state.reports)
        assert state.audit_conversion == expected

    def test_conversion_rate_empty(self):
        assert conversion_rate([]) == 0


class TestDashboardAggregator:

    def test_absorb_returns_camel_case_payload(self):
        aggregator = DashboardAggregator()
        payload = aggregator.absorb(_report(grant_amount=100.0), "a.pdf")
        assert payload["totalAudits"] == 1
        assert payload["applicationStatus"]["total"] == 1
        assert "inProgress" in payload["applicationStatus"]
        assert payload["recommendedGrants"][0]["organization"] == "Acme Corp"

    def test_snapshot_is_detached(self):
        aggregator = DashboardAggregator()
        aggregator.absorb(_report(), "a.pdf")
        snapshot = aggregator.snapshot()
        snapshot["organizations"].append("Tampered")
        assert aggregator.snapshot()["organizations"] == ["Acme Corp"]

    def test_reports_listing(self):
        aggregator = DashboardAggregator()
        aggregator.absorb(_report(), "a.pdf")
        aggregator.absorb(_report("Beta Ltd"), "b.pdf")
        assert [r["fileName"] for r in aggregator.reports()] == ["a.pdf", "b.pdf"]

    def test_concurrent_absorbs_are_not_lost(self):
        aggregator = DashboardAggregator()

        def upload(i):
            aggregator.absorb(_report(f"Org {i}", total_cost_savings=10.0), f"{i}.pdf")

        threads = [threading.Thread(target=upload, args=(i,)) for i in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        state = aggregator.frozen_state()
        assert state.total_audits == 50
        assert state.application_status.total == 50
        assert len(state.reports) == 50
        assert state.total_euro_saved == 500.0

    def test_reset(self):
        aggregator = DashboardAggregator()
        aggregator.absorb(_report(), "a.pdf")
        aggregator.reset()
        assert aggregator.snapshot()["totalAudits"] == 0


class TestDemoState:

    def test_demo_state_is_consistent(self):
        state = demo_state()
        assert state.total_audits == 3
        assert state.application_status.total == len(state.reports) == 3
        assert state.audit_conversion == 33
        assert state.organizations == [
            "Greenfield Foods Ltd", "St Brigid's Hospital", "Westbridge College",
        ]
        assert len(state.recommended_grants) == 3

    def test_reset_with_demo(self):
        aggregator = DashboardAggregator()
        aggregator.reset(seed_demo=True)
        assert aggregator.snapshot()["totalAudits"] == 3
