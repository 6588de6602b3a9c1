from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence
from . import manual
from .extract import import_grid
from .ingest import load_grid
from .insights import overview
from .models import ScoreRecord
from .quality import quality_report
from .scoring import compute_statistics

logger = logging.getLogger(__name__)


class AnalysisSession:
    """
    The ordered record list of one working session. Every change replaces the
    list; statistics are always recomputed in full from the current list.
    """

    def __init__(self, records: Optional[Sequence[ScoreRecord]] = None):
        self._records: List[ScoreRecord] = list(records or [])
        self.import_meta: Dict[str, Any] = {}

    @property
    def records(self) -> List[ScoreRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    # --- import -------------------------------------------------------
    def load_grid(self, grid, **kwargs) -> Dict[str, Any]:
        # on failure the previous records stay untouched
        records, meta = import_grid(grid, **kwargs)
        self._records = records
        self.import_meta = meta
        return meta

    def load_upload(self, name: str, data: bytes, **kwargs) -> Dict[str, Any]:
        meta = self.load_grid(load_grid(name, data), **kwargs)
        meta["source_name"] = name
        return meta

    # --- editing ------------------------------------------------------
    def add_student(self, student_name: str = manual.NEW_STUDENT_NAME) -> None:
        self._records = manual.add_student(self._records, student_name)

    def add_subject(self, subject: Optional[str] = None) -> None:
        self._records = manual.add_subject(self._records, subject)

    def update_score(self, student_id: str, subject: str, value: Any) -> None:
        self._records = manual.update_score(self._records, student_id, subject, value)

    def rename_student(self, student_id: str, name: str) -> None:
        self._records = manual.rename_student(self._records, student_id, name)

    def change_student_id(self, student_id: str, new_id: str) -> None:
        self._records = manual.change_student_id(self._records, student_id, new_id)

    def rename_subject(self, old: str, new: str) -> None:
        self._records = manual.rename_subject(self._records, old, new)

    def remove_student(self, student_id: str) -> None:
        self._records = manual.remove_student(self._records, student_id)

    def remove_subject(self, subject: str) -> None:
        self._records = manual.remove_subject(self._records, subject)

    # --- derived views --------------------------------------------------
    def statistics(self) -> Dict[str, Any]:
        return compute_statistics(self._records)

    def overview(self) -> Dict[str, Any]:
        stats = self.statistics()
        return overview(self._records, stats["student_summaries"])

    def quality(self) -> Dict[str, Any]:
        return quality_report(self._records)
