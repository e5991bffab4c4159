"""
Field recognition for energy audit report text.

Each field is located by an independent rule tried once against the text.
A rule that does not match yields None and the field keeps its default;
nothing here raises for missing content.
"""

import logging
import math
import random
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .config import (
    ACTION_STATUSES,
    ACTION_STATUS_SEED,
    GRANT_DERIVATION_RATE,
    INDUSTRY_KEYWORDS,
    REGION_KEYWORDS,
)
from .models import ActionLine, EnergyLine, ExtractedReport

logger = logging.getLogger(__name__)

NUMBER = r"\d[\d,]*(?:\.\d+)?"
CURRENCY = r"[€$£]"

ENERGY_TABLE_HEADERS = ("Energy source", "Annual Cost", "Annual Use")
ACTIONS_MARKER = "recommended actions"

# "Electricity  €45,000  250,000 kWh  120"
ELECTRICITY_ROW = re.compile(
    rf"Electricity[^\n]*?{CURRENCY}\s*({NUMBER})[^\n]*?({NUMBER})\s*kWh[^\n]*?({NUMBER})"
)
# "Oil  €18,000  150,000 kWh  90" (Gas rows share the layout)
FUEL_ROW = re.compile(
    rf"(Gas|Oil)[^\n]*?{CURRENCY}\s*({NUMBER})[^\n]*?({NUMBER})\s*kWh[^\n]*?({NUMBER})"
)
# "1. LED Lighting Upgrade  25,000  Low cost  €4,500  12.5"
# optional enumerator or bullet, name, energy savings (kWh), optional cost
# category, cost savings, emissions reduction
ACTION_ROW = re.compile(
    rf"^[ \t]*(?:(?:\d+[.)]|[-•*])[ \t]*)?([A-Za-z][A-Za-z \t]*?)[ \t]+({NUMBER})[ \t]+"
    rf"(?:[A-Za-z][A-Za-z\- \t]*?[ \t]+)?{CURRENCY}\s*({NUMBER})[ \t]+({NUMBER})",
    re.MULTILINE,
)


def parse_number(value_str) -> Optional[float]:
    """Parse a number string, stripping thousands separators."""
    try:
        cleaned = str(value_str).replace(",", "").replace(" ", "").strip()
        return float(cleaned)
    except (ValueError, TypeError):
        return None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _number_group(index: int) -> Callable[[re.Match], Optional[float]]:
    return lambda match: parse_number(match.group(index))


@dataclass(frozen=True)
class FieldRule:
    """A regex locating one field; `convert` turns the match into the field value."""
    field: str
    pattern: re.Pattern
    convert: Callable[[re.Match], Any]

    def apply(self, text: str) -> Optional[Any]:
        match = self.pattern.search(text)
        if not match:
            return None
        return self.convert(match)


@dataclass(frozen=True)
class KeywordRule:
    """Case-insensitive containment search over an ordered vocabulary, first hit wins."""
    field: str
    vocabulary: Sequence[Tuple[str, str]]

    def apply(self, text: str) -> Optional[str]:
        lowered = text.lower()
        for keyword, value in self.vocabulary:
            if keyword.lower() in lowered:
                return value
        return None


LABEL_RULES = [
    FieldRule(
        "organization_name",
        re.compile(r"For:[ \t]*([^\n]+)"),
        lambda m: m.group(1).strip() or None,
    ),
    FieldRule(
        "emissions_reduction_pct",
        re.compile(r"emissions by (\d+)\s*%", re.IGNORECASE),
        lambda m: int(m.group(1)),
    ),
    FieldRule(
        "total_cost_savings",
        re.compile(rf"energy spend by\s*{CURRENCY}\s*({NUMBER})", re.IGNORECASE),
        _number_group(1),
    ),
    FieldRule(
        "grant_amount",
        re.compile(rf"grant amount[^\n€$£]*?{CURRENCY}\s*({NUMBER})", re.IGNORECASE),
        _number_group(1),
    ),
    KeywordRule("region", REGION_KEYWORDS),
    KeywordRule("industry", INDUSTRY_KEYWORDS),
]


class PatternExtractor:
    """Applies the field rules to document text and builds an ExtractedReport."""

    def __init__(self, rules: Optional[list] = None, rng: Optional[random.Random] = None):
        self.rules = rules if rules is not None else LABEL_RULES
        self.rng = rng or random.Random(ACTION_STATUS_SEED)

    def apply_rules(self, text: str, report: ExtractedReport) -> List[str]:
        """Run every rule in order; returns the names of fields that matched."""
        matched = []
        for rule in self.rules:
            value = rule.apply(text)
            if value is None:
                logger.debug(f"No match for {rule.field}")
                continue
            setattr(report, rule.field, value)
            matched.append(rule.field)
        return matched

    def extract_from_text(self, text: str) -> ExtractedReport:
        """Label and keyword fields only; used on flat text with no page structure."""
        report = ExtractedReport()
        matched = self.apply_rules(text, report)
        self._resolve_grant(report, "grant_amount" in matched)
        return report

    def extract_from_pages(self, pages: List[str]) -> ExtractedReport:
        """Full extraction: label fields over the whole document, tables per page."""
        report = ExtractedReport()
        matched = self.apply_rules("\n".join(pages), report)

        electricity = fuel = None
        for page_text in pages:
            if self.is_energy_table_page(page_text):
                page_electricity, page_fuel = self._energy_rows(page_text)
                electricity = electricity or page_electricity
                fuel = fuel or page_fuel

            if ACTIONS_MARKER in page_text.lower():
                for action in self.extract_actions(page_text):
                    report.recommended_actions.append(action)
                    report.total_energy_savings += action.energy_savings
                    report.total_emissions_saved += action.emissions_reduction

        report.energy_data.extend(line for line in (electricity, fuel) if line)
        if report.recommended_actions:
            report.mark_heuristic("actionStatus")
        self._resolve_grant(report, "grant_amount" in matched)
        return report

    @staticmethod
    def is_energy_table_page(page_text: str) -> bool:
        return all(header in page_text for header in ENERGY_TABLE_HEADERS)

    def extract_energy_lines(self, page_text: str) -> List[EnergyLine]:
        """First Electricity row and first Gas/Oil row of an energy-table page."""
        if not self.is_energy_table_page(page_text):
            return []
        return [line for line in self._energy_rows(page_text) if line]

    def _energy_rows(self, page_text: str) -> Tuple[Optional[EnergyLine], Optional[EnergyLine]]:
        electricity = fuel = None
        match = ELECTRICITY_ROW.search(page_text)
        if match:
            electricity = self._energy_line("Electricity", match.group(1), match.group(2), match.group(3))
        match = FUEL_ROW.search(page_text)
        if match:
            fuel = self._energy_line(match.group(1), match.group(2), match.group(3), match.group(4))
        return electricity, fuel

    def _energy_line(self, kind: str, cost: str, usage: str, emissions: str) -> Optional[EnergyLine]:
        values = [parse_number(v) for v in (cost, usage, emissions)]
        if any(v is None for v in values):
            logger.debug(f"Unparseable {kind} row: {cost!r} {usage!r} {emissions!r}")
            return None
        return EnergyLine(type=kind, cost=values[0], usage=values[1], emissions=values[2])

    def extract_actions(self, page_text: str) -> List[ActionLine]:
        """Every action row on the page; rows saving neither energy nor money are skipped."""
        actions = []
        for match in ACTION_ROW.finditer(page_text):
            energy = parse_number(match.group(2)) or 0.0
            cost = parse_number(match.group(3)) or 0.0
            emissions = parse_number(match.group(4)) or 0.0
            if energy <= 0 and cost <= 0:
                continue
            actions.append(ActionLine(
                name=match.group(1).strip(),
                energy_savings=energy,
                cost_savings=cost,
                emissions_reduction=emissions,
                status=self.rng.choice(ACTION_STATUSES),
                status_is_heuristic=True,
            ))
        return actions

    def _resolve_grant(self, report: ExtractedReport, found: bool):
        """Derive the grant from cost savings when the text states none."""
        if found:
            return
        report.grant_amount = float(round_half_up(report.total_cost_savings * GRANT_DERIVATION_RATE))
        if report.grant_amount > 0:
            report.mark_heuristic("grantAmount")
