"""
Orchestrator - turns one uploaded PDF into one finalised report.
Tries each acquisition strategy in order, applies caller overrides, and
degrades to a filename-based stub when every strategy fails.

Usage:
    python -m audit_pipeline.orchestrator report.pdf [report2.pdf ...]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .aggregator import DashboardAggregator
from .base_extractor import BaseExtractor
from .config import IMPLEMENTATION_STATUSES, SEED_DEMO_DATA, STATUS_PENDING
from .extractors import PlainTextExtractor, StructuredExtractor
from .intake import UploadIntake, UploadRejected
from .models import ExtractedReport, ReportOverrides
from .patterns import PatternExtractor, parse_number

logger = logging.getLogger(__name__)


def default_strategies(patterns: Optional[PatternExtractor] = None) -> List[BaseExtractor]:
    """Primary first, fallback second."""
    patterns = patterns or PatternExtractor()
    return [StructuredExtractor(patterns), PlainTextExtractor(patterns)]


def build_stub(file_name: str) -> ExtractedReport:
    """Minimal record when nothing could be read: name from the filename, all else empty."""
    stem = Path(file_name or "").stem
    return ExtractedReport(
        organization_name=stem or "Unknown",
        implementation_status=STATUS_PENDING,
        extraction_method="stub",
    )


def normalize_status(value) -> str:
    """'In Progress', 'in_progress' -> 'in-progress'. Unknown values pass through lowercased."""
    cleaned = str(value).strip().lower().replace("_", "-").replace(" ", "-")
    if cleaned == "inprogress":
        cleaned = "in-progress"
    if cleaned not in IMPLEMENTATION_STATUSES:
        logger.warning(f"Unrecognised implementation status '{value}', counted as pending")
    return cleaned


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def apply_overrides(report: ExtractedReport, overrides: Optional[ReportOverrides]) -> ExtractedReport:
    """Caller-supplied values win over extracted ones whenever present and non-empty."""
    if overrides is None:
        return report

    if _present(overrides.grant_amount):
        amount = parse_number(overrides.grant_amount)
        if amount is not None and amount >= 0:
            report.grant_amount = amount
            report.clear_heuristic("grantAmount")
        else:
            logger.warning(f"Ignoring grant amount override {overrides.grant_amount!r}")

    if _present(overrides.implementation_status):
        report.implementation_status = normalize_status(overrides.implementation_status)

    for attr in ("region", "industry"):
        value = getattr(overrides, attr)
        if _present(value):
            setattr(report, attr, str(value).strip().lower())

    for attr in ("auditor_name", "building_type", "notes"):
        value = getattr(overrides, attr)
        if _present(value):
            setattr(report, attr, str(value).strip())

    return report


class ExtractionOrchestrator:
    """Runs acquisition strategies in order; the first usable report wins."""

    def __init__(self, strategies: Optional[List[BaseExtractor]] = None):
        self.strategies = strategies if strategies is not None else default_strategies()

    def extract(self, file_path, file_name: Optional[str] = None,
                overrides: Optional[ReportOverrides] = None) -> ExtractedReport:
        """Never raises: failures fall through to the next strategy, then to the stub."""
        try:
            file_path = Path(file_path) if file_path else None
        except TypeError:
            file_path = None
        file_name = file_name or (file_path.name if file_path else "")

        report = None
        if file_path is None:
            logger.error(f"No usable file path for {file_name or 'upload'}")
        for strategy in self.strategies if file_path else []:
            try:
                report = strategy.extract(file_path)
            except Exception as e:
                logger.warning(f"{strategy.name} extraction failed for {file_name}: {e}")
                continue
            if report is not None:
                logger.info(f"Extracted {file_name} with {strategy.name}: {report.organization_name}")
                break

        if report is None:
            logger.error(f"All extraction strategies failed for {file_name}, using stub")
            report = build_stub(file_name)

        return apply_overrides(report, overrides)


def extract(file_path, file_name: Optional[str] = None,
            overrides: Optional[ReportOverrides] = None) -> ExtractedReport:
    """Extract one report with the default strategies."""
    return ExtractionOrchestrator().extract(file_path, file_name, overrides)


def ingest(file_path, file_name: Optional[str], aggregator: DashboardAggregator,
           overrides: Optional[ReportOverrides] = None,
           intake: Optional[UploadIntake] = None,
           orchestrator: Optional[ExtractionOrchestrator] = None) -> Tuple[ExtractedReport, dict]:
    """Upload entry point: validate, store, extract, absorb.

    Raises UploadRejected when no PDF was supplied. Every other failure
    degrades to a stub report and the upload still succeeds.
    """
    orchestrator = orchestrator or ExtractionOrchestrator()
    if intake is not None:
        stored = intake.accept(file_path, file_name)
        path, name, sha = stored.stored_path, stored.original_name, stored.sha256
    else:
        path = UploadIntake.validate(file_path, file_name)
        name, sha = file_name or path.name, ""

    report = orchestrator.extract(path, name, overrides)
    dashboard = aggregator.absorb(report, name, sha256=sha)
    return report, dashboard


def _print_summary(aggregator: DashboardAggregator, rejected: List[str]):
    state = aggregator.frozen_state()
    logger.info("=" * 60)
    logger.info("AUDIT INGESTION SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Reports absorbed: {state.total_audits}")
    logger.info(f"  Rejected uploads: {len(rejected)}")
    logger.info(f"Organisations: {len(state.organizations)}")
    logger.info(f"Total cost savings: {state.total_euro_saved:,.0f}")
    logger.info(f"Total emissions saved: {state.total_emissions_saved:,.1f}")
    logger.info(f"Total grants: {state.total_grants:,.0f}")
    logger.info(f"Audit conversion: {state.audit_conversion}%")

    for entry in state.reports:
        data = entry.data
        logger.info(
            f"  {entry.file_name}: {data.organization_name} "
            f"[{data.extraction_method}, {data.implementation_status}, "
            f"{len(data.energy_data)} energy lines, {len(data.recommended_actions)} actions]"
        )
    logger.info("=" * 60)


def main(argv: Optional[List[str]] = None):
    """Entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    parser = argparse.ArgumentParser(description="Extract energy audit PDFs into a dashboard")
    parser.add_argument("pdfs", nargs="+", help="Audit report PDF files")
    parser.add_argument("--status", help="Implementation status applied to every report")
    parser.add_argument("--region", help="Region applied to every report")
    parser.add_argument("--industry", help="Industry applied to every report")
    parser.add_argument("--auditor", help="Auditor name applied to every report")
    parser.add_argument("--seed-demo", action="store_true", default=SEED_DEMO_DATA,
                        help="Start from the demonstration dashboard")
    parser.add_argument("--no-save", action="store_true", help="Do not write CSV outputs")
    args = parser.parse_args(argv)

    from .reporting import save_outputs

    aggregator = DashboardAggregator()
    if args.seed_demo:
        aggregator.reset(seed_demo=True)

    overrides = ReportOverrides(
        implementation_status=args.status,
        region=args.region,
        industry=args.industry,
        auditor_name=args.auditor,
    )
    orchestrator = ExtractionOrchestrator()
    rejected = []
    for pdf in args.pdfs:
        try:
            ingest(pdf, Path(pdf).name, aggregator, overrides=overrides, orchestrator=orchestrator)
        except UploadRejected as e:
            logger.error(f"Rejected {pdf}: {e}")
            rejected.append(pdf)

    if not args.no_save:
        save_outputs(aggregator.frozen_state())
    _print_summary(aggregator, rejected)
    return 1 if rejected and len(rejected) == len(args.pdfs) else 0


if __name__ == "__main__":
    sys.exit(main())
