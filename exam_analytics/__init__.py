"""
This package contains:
- reading spreadsheets (CSV/XLSX) into raw cell grids
- header row detection and Arabic-aware text normalization
- schema inference (wide/long layout, column roles)
- building normalized score records
- subject and student statistics, ranking, categories
- data-quality checks and overview indicators
"""
from .errors import ImportDataError, EmptyFileError, NoValidDataError
from .utils import norm_text
from .ingest import load_tables_from_uploads, load_grid
from .header_detect import locate_header_row, build_dataframe_with_headers
from .infer import classify_format, match_role, RoleMap
from .extract import import_grid, infer_max_score
from .models import ScoreRecord, SubjectStatistics, StudentSummary
from .scoring import compute_descriptive, compute_subject_stats, compute_student_summaries, compute_statistics
from .ranking import categorize, rank_students
from .quality import quality_report
from .insights import overview, school_stats, section_performance, subject_roster
from .session import AnalysisSession

__all__ = [
    "ImportDataError",
    "EmptyFileError",
    "NoValidDataError",
    "norm_text",
    "load_tables_from_uploads",
    "load_grid",
    "locate_header_row",
    "build_dataframe_with_headers",
    "classify_format",
    "match_role",
    "RoleMap",
    "import_grid",
    "infer_max_score",
    "ScoreRecord",
    "SubjectStatistics",
    "StudentSummary",
    "compute_descriptive",
    "compute_subject_stats",
    "compute_student_summaries",
    "compute_statistics",
    "categorize",
    "rank_students",
    "quality_report",
    "overview",
    "school_stats",
    "section_performance",
    "subject_roster",
    "AnalysisSession",
]
