"""
Upload intake with manifest tracking.
Validates an uploaded file, stores a copy under the uploads directory,
computes its SHA-256 and records it in a JSON manifest. Stored files are
kept indefinitely.
"""

import hashlib
import json
import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import LARGE_UPLOAD_BYTES, UPLOADS_DIR, UPLOAD_MANIFEST_FILE

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
HASH_BLOCK_BYTES = 64 * 1024


class UploadRejected(ValueError):
    """The upload is missing or is not a PDF. The only error callers see."""


def upload_digest(file_path: Path) -> str:
    """SHA-256 of an upload, read in blocks so large PDFs are not held in memory."""
    digest = hashlib.sha256()
    with Path(file_path).open("rb") as stream:
        while True:
            block = stream.read(HASH_BLOCK_BYTES)
            if not block:
                break
            digest.update(block)
    return digest.hexdigest()


@dataclass
class StoredUpload:
    """Where an accepted upload now lives."""
    original_name: str
    stored_path: Path
    sha256: str
    file_size_bytes: int
    upload_date: str


class UploadIntake:
    """Accepts uploaded PDFs and tracks them in a manifest."""

    def __init__(self, base_dir: Optional[Path] = None,
                 manifest_path: Optional[Path] = None):
        self.base_dir = Path(base_dir or UPLOADS_DIR)
        self.manifest_path = Path(manifest_path or (self.base_dir / UPLOAD_MANIFEST_FILE.name))
        self.manifest = self._load_manifest()

    def _load_manifest(self) -> dict:
        """Previously recorded uploads; an unreadable manifest starts a fresh one."""
        if not self.manifest_path.is_file():
            return {"uploads": []}
        try:
            manifest = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Upload manifest {self.manifest_path} unreadable ({e}), starting fresh")
            return {"uploads": []}
        manifest.setdefault("uploads", [])
        return manifest

    def _record(self, entry: dict):
        self.manifest["uploads"].append(entry)
        self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        self.manifest_path.write_text(json.dumps(self.manifest, indent=2), encoding="utf-8")

    @staticmethod
    def validate(file_path, original_name: Optional[str] = None) -> Path:
        """Raise UploadRejected unless `file_path` is an existing PDF."""
        if not file_path:
            raise UploadRejected("No file uploaded")
        path = Path(file_path)
        if not path.is_file():
            raise UploadRejected(f"Uploaded file not found: {path.name}")

        name = original_name or path.name
        if not name.lower().endswith(".pdf"):
            raise UploadRejected("Only PDF files are allowed")

        with open(path, "rb") as f:
            head = f.read(len(PDF_MAGIC))
        if head != PDF_MAGIC:
            raise UploadRejected(f"{name} is not a PDF (starts with {head!r})")
        return path

    def accept(self, file_path, original_name: Optional[str] = None) -> StoredUpload:
        """Validate and store an upload. Returns where it was stored."""
        source = self.validate(file_path, original_name)
        original_name = Path(original_name or source.name).name

        self.base_dir.mkdir(parents=True, exist_ok=True)
        stored_path = self.base_dir / f"{int(time.time() * 1000)}-{original_name}"
        shutil.copyfile(source, stored_path)

        sha = upload_digest(stored_path)
        file_size = stored_path.stat().st_size
        upload_date = time.strftime("%Y-%m-%d %H:%M:%S")
        if file_size > LARGE_UPLOAD_BYTES:
            logger.warning(f"Large upload {original_name}: {file_size / 1024 / 1024:.1f} MB")

        previous = self.find_by_sha256(sha)
        if previous:
            logger.info(f"{original_name} has the same content as {previous['original_name']}")

        self._record({
            "original_name": original_name,
            "stored_path": str(stored_path),
            "sha256": sha,
            "file_size_bytes": file_size,
            "upload_date": upload_date,
        })

        logger.info(f"Stored {file_size / 1024:.1f} KB -> {stored_path.name}")
        return StoredUpload(
            original_name=original_name,
            stored_path=stored_path,
            sha256=sha,
            file_size_bytes=file_size,
            upload_date=upload_date,
        )

    def find_by_sha256(self, sha: str) -> Optional[dict]:
        for entry in self.manifest["uploads"]:
            if entry["sha256"] == sha:
                return entry
        return None

    def get_all_uploads(self) -> list:
        return self.manifest["uploads"]
