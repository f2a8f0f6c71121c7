"""SeedStore — loads sample assessments from ``seeds/assessments/``.

Each YAML file holds one assessment document in the wire shape
(``jobId``, ``sections``, optional ``updatedAt``).  The server inserts
them on startup when the assessments table is empty, and the
``fill_assessment`` script runs against them without a database.

Usage::

    seeds = SeedStore()          # defaults to seeds/assessments/ at the repo root
    seeds.load()

    doc = seeds.get("job-frontend-engineer")
    for job_id in seeds.job_ids():
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from assessment_engine.models.assessment import Assessment

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# SeedStore
# ---------------------------------------------------------------------------

class SeedStore:
    """Loads every ``*.yaml`` under the seed directory into :class:`Assessment` models.

    Documents are keyed by ``jobId``; two files declaring the same job id
    is an error.
    """

    def __init__(self, seed_dir: str | Path | None = None) -> None:
        if seed_dir is None:
            seed_dir = find_repo_root() / "seeds" / "assessments"
        self._base = Path(seed_dir)
        self.assessments: dict[str, Assessment] = {}

    def load(self) -> None:
        """Parse all seed files.  Raises ``FileNotFoundError`` if the directory is missing."""
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing seed directory: {self._base}")

        for path in sorted(self._base.glob("*.yaml")):
            raw = load_yaml(path)
            if not isinstance(raw, dict):
                raise ValueError(f"Seed file {path.name} must contain a mapping")
            doc = Assessment.from_document(raw)
            if doc.job_id in self.assessments:
                raise ValueError(f"Duplicate seed for job_id={doc.job_id} in {path.name}")
            self.assessments[doc.job_id] = doc

        logger.info(
            "SeedStore loaded: %d assessments from %s", len(self.assessments), self._base,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, job_id: str) -> Assessment:
        """Return a copy of the seed for ``job_id``.  Raises ``KeyError`` if unknown."""
        if job_id not in self.assessments:
            raise KeyError(f"Unknown seed job_id: {job_id}")
        return self.assessments[job_id].model_copy(deep=True)

    def job_ids(self) -> list[str]:
        return list(self.assessments)

    def __len__(self) -> int:
        return len(self.assessments)
