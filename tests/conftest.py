"""Shared fixtures: hand-built PDFs and sample report text."""

import random
from pathlib import Path
from typing import List

import pytest


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: List[List[str]]) -> bytes:
    """Minimal PDF, one Helvetica text line per entry, WinAnsi encoded so '€' survives."""
    objects = {}
    kids = []
    next_id = 4
    for lines in pages:
        page_id, content_id = next_id, next_id + 1
        next_id += 2
        ops = ["BT", "/F1 11 Tf", "14 TL", "72 760 Td"]
        ops += [f"({_escape(line)}) Tj T*" for line in lines]
        ops.append("ET")
        stream = "\n".join(ops).encode("cp1252")
        objects[content_id] = (
            b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        )
        objects[page_id] = (
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {content_id} 0 R >>"
        ).encode()
        kids.append(page_id)

    objects[1] = b"<< /Type /Catalog /Pages 2 0 R >>"
    objects[2] = (
        f"<< /Type /Pages /Kids [{' '.join(f'{k} 0 R' for k in kids)}] /Count {len(kids)} >>"
    ).encode()
    objects[3] = b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>"

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for obj_id in range(1, next_id):
        offsets[obj_id] = len(out)
        out += f"{obj_id} 0 obj\n".encode() + objects[obj_id] + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {next_id}\n".encode()
    out += b"0000000000 65535 f \n"
    for obj_id in range(1, next_id):
        out += f"{offsets[obj_id]:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {next_id} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


SUMMARY_PAGE = [
    "Energy Audit Report",
    "For: Acme Corp",
    "Site: Cork Manufacturing Plant",
    "The measures below reduce emissions by 42% and",
    "cut annual energy spend by €10,000 with low-cost works.",
]

ENERGY_PAGE = [
    "Energy source Annual Cost Annual Use Emissions tCO2",
    "Electricity €45,000 250,000 kWh 120",
    "Oil €18,000 150,000 kWh 90",
]

ACTIONS_PAGE = [
    "Recommended actions",
    "Action Energy savings kWh Cost Annual saving Emissions",
    "LED Lighting Upgrade 25,000 Low cost €4,500 12.5",
    "Heating Controls 40,000 Medium cost €5,500 20",
    "Staff Awareness 0 No cost €0 0",
]


@pytest.fixture
def report_pages():
    return ["\n".join(SUMMARY_PAGE), "\n".join(ENERGY_PAGE), "\n".join(ACTIONS_PAGE)]


@pytest.fixture
def sample_pdf(tmp_path) -> Path:
    path = tmp_path / "acme-audit.pdf"
    path.write_bytes(build_pdf([SUMMARY_PAGE, ENERGY_PAGE, ACTIONS_PAGE]))
    return path


@pytest.fixture
def blank_pdf(tmp_path) -> Path:
    path = tmp_path / "scanned.pdf"
    path.write_bytes(build_pdf([[]]))
    return path


@pytest.fixture
def broken_pdf(tmp_path) -> Path:
    path = tmp_path / "Broken Audit.pdf"
    path.write_bytes(b"%PDF-1.4\nthis is not really a pdf\n")
    return path


@pytest.fixture
def rng():
    return random.Random(1234)
