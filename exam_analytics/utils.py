import os
import re
import json
import math
import numbers
import unicodedata
from datetime import date
from pathlib import Path
from typing import Any, Optional
from dateutil import parser as dtparser

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

APPDATA = os.environ.get("APPDATA")
if APPDATA:
    USER_DATA_DIR = Path(APPDATA) / "ExamAnalytics"
else:
    USER_DATA_DIR = DEFAULT_DATA_DIR  # fallback

def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except Exception:
        return default

def rules_path() -> Path:
    # explicit override > user copy > shipped defaults
    env = os.environ.get("EXAM_ANALYTICS_RULES")
    if env:
        return Path(env)
    user = USER_DATA_DIR / "rules.json"
    if user.exists():
        return user
    return DEFAULT_DATA_DIR / "rules.json"

def load_rules() -> dict:
    base = load_json(DEFAULT_DATA_DIR / "rules.json", {})
    path = rules_path()
    if path != DEFAULT_DATA_DIR / "rules.json":
        override = load_json(path, {})
        if isinstance(override, dict):
            defaults = dict(base.get("defaults", {}))
            defaults.update(override.get("defaults", {}) or {})
            base.update(override)
            base["defaults"] = defaults
    return base

RULES = load_rules()
DEFAULTS = RULES.get("defaults", {})

_HAMZA_RE = re.compile(r"[أإآ]")
_TASHKEEL_RE = re.compile(r"[\u064B-\u065F]")
# Arabic letters (without tatweel U+0640), Latin letters, ASCII and Arabic-Indic digits
_NOT_ALNUM_RE = re.compile(r"[^\u0621-\u063A\u0641-\u064Aa-zA-Z0-9\u0660-\u0669]")
_WS_RE = re.compile(r"\s+")


def norm_text(s: Any) -> str:
    """
    Canonical form of header/cell text, for matching only (never for display):
    - compatibility forms decomposed (lam-alef ligatures etc.)
    - أ إ آ -> ا, ة -> ه, ى -> ي
    - tashkeel stripped
    - everything except letters and digits removed, no whitespace
    - lower
    """
    if s is None:
        return ""
    if is_empty(s):
        return ""

    s = unicodedata.normalize("NFKC", str(s))
    s = _HAMZA_RE.sub("ا", s)
    s = s.replace("ة", "ه").replace("ى", "ي")
    s = _TASHKEEL_RE.sub("", s)
    s = _NOT_ALNUM_RE.sub("", s)
    s = _WS_RE.sub("", s)
    return s.lower()

def is_empty(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, str):
        return v.strip() == ""
    try:
        # NaN / NaT
        if v != v:
            return True
    except (TypeError, ValueError):
        return False
    return False

def cell_text(v: Any) -> str:
    """Display text of a cell: integral floats lose their '.0' (ids read from Excel)."""
    if is_empty(v):
        return ""
    if isinstance(v, bool):
        return str(v)
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if hasattr(v, "year") and hasattr(v, "month") and hasattr(v, "day"):
        parsed = try_parse_date(v)
        if parsed:
            return parsed
    return str(v).strip()

_ARABIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩٫", "0123456789.")

def to_number(v: Any) -> Optional[float]:
    # None means "not numeric": the caller skips or defaults the value
    if is_empty(v) or isinstance(v, bool):
        return None
    if isinstance(v, numbers.Real):
        x = float(v)
        return None if math.isnan(x) or math.isinf(x) else x
    s = str(v).strip().translate(_ARABIC_DIGITS).replace(",", ".")
    try:
        x = float(s)
    except (TypeError, ValueError):
        return None
    if math.isnan(x) or math.isinf(x):
        return None
    return x

def today_str() -> str:
    return date.today().isoformat()

def try_parse_date(s: Any) -> Optional[str]:
    # exam dates arrive as datetime cells or as dd/mm/yyyy, yyyy-mm-dd text
    if s is None:
        return None

    if hasattr(s, "year") and hasattr(s, "month") and hasattr(s, "day"):
        try:
            return f"{int(s.year):04d}-{int(s.month):02d}-{int(s.day):02d}"
        except Exception:
            pass

    txt = str(s).strip().translate(_ARABIC_DIGITS)
    if not txt:
        return None

    if re.match(r"^\d{1,2}[./-]\d{1,2}[./-]\d{2,4}$", txt):
        try:
            return dtparser.parse(txt, dayfirst=True).strftime("%Y-%m-%d")
        except (ValueError, OverflowError):
            return None

    if re.match(r"^\d{4}[./-]\d{1,2}[./-]\d{1,2}", txt):
        try:
            return dtparser.parse(txt[:10], dayfirst=False).strftime("%Y-%m-%d")
        except (ValueError, OverflowError):
            return None

    return None
