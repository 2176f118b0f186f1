import os
import re
import json
from pathlib import Path
from typing import Any, Dict, Optional

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

# значения по умолчанию, если rules.json отсутствует или неполный
DEFAULT_RULES: Dict[str, Any] = {
    "grade_keywords": ["grade", "score", "math", "science", "english", "history", "physics", "chemistry", "biology"],
    "grade_bands": [
        {"label": "A (90-100)", "min": 90},
        {"label": "B (80-89)", "min": 80},
        {"label": "C (70-79)", "min": 70},
        {"label": "D (60-69)", "min": 60},
        {"label": "F (0-59)", "min": 0},
    ],
    "pass_mark": 60,
    "struggling_below": 70,
    "top_n": 5,
    "default_total_questions": 0,
    "max_upload_mb": 10,
    "subjects": {
        "verbal": "Verbal Reasoning",
        "numerical": "Numerical Reasoning",
        "maths": "Mathematics",
        "reading": "Reading Comprehension",
    },
}

def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return default

def rules_path() -> Path:
    override = os.environ.get("GRADEBOOK_RULES_PATH")
    if override:
        return Path(override)
    return DEFAULT_DATA_DIR / "rules.json"

def load_rules(path: Optional[Path] = None) -> Dict[str, Any]:
    # rules.json поверх значений по умолчанию (только известные ключи)
    loaded = load_json(path or rules_path(), {})
    if not isinstance(loaded, dict):
        loaded = {}
    rules = dict(DEFAULT_RULES)
    for k, v in loaded.items():
        if k in DEFAULT_RULES and v is not None:
            rules[k] = v
    return rules

RULES = load_rules()

_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # NBSP варианты


def norm_text(s: Any) -> str:
    """
    Нормализация текста для сравнения заголовков:
    - BOM/неразрывные пробелы
    - lower
    - схлопывание пробелов
    """
    if s is None:
        return ""
    s = str(s).replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s)
    s = s.strip().lower()
    s = re.sub(r"\s+", " ", s).strip()
    return s

_FLOAT_PREFIX_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_INT_PREFIX_RE = re.compile(r"^\s*([-+]?\d+)")
_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?\s*$")


def parse_float(x: Any) -> Optional[float]:
    # Числовой префикс строки ("87.5", "90 pts" -> 90.0); None если числа нет
    if x is None:
        return None
    if isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        v = float(x)
        return None if v != v else v
    m = _FLOAT_PREFIX_RE.match(str(x))
    if not m:
        return None
    try:
        return float(m.group(1))
    except ValueError:
        return None

def parse_int(x: Any) -> Optional[int]:
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    if isinstance(x, float):
        return None if x != x else int(x)
    m = _INT_PREFIX_RE.match(str(x))
    if not m:
        return None
    return int(m.group(1))

def is_numeric(x: Any) -> bool:
    # Значение целиком число (пустая строка числом не считается)
    if x is None or isinstance(x, bool):
        return False
    if isinstance(x, (int, float)):
        return x == x
    return bool(_NUMBER_RE.match(str(x)))
