# shootcore/apps/accounts/divisions.py
from __future__ import annotations

NOVICE = "Novice"
INTERMEDIATE = "Intermediate"
JUNIOR_VARSITY = "Junior Varsity"
VARSITY = "Varsity"
COLLEGIATE = "Collegiate"
OPEN = "Open"
UNASSIGNED = "Unassigned"

DIVISION_CHOICES = (
    (NOVICE, NOVICE),
    (INTERMEDIATE, INTERMEDIATE),
    (JUNIOR_VARSITY, JUNIOR_VARSITY),
    (VARSITY, VARSITY),
    (COLLEGIATE, COLLEGIATE),
    (OPEN, OPEN),
    (UNASSIGNED, UNASSIGNED),
)

# grado escolar → división
_GRADE_TABLE = {
    **{g: NOVICE for g in ("k", "kindergarten", "1", "2", "3", "4", "5", "6")},
    "7": INTERMEDIATE,
    "8": INTERMEDIATE,
    "9": JUNIOR_VARSITY,
    "10": VARSITY,
    "11": VARSITY,
    "12": VARSITY,
    **{g: COLLEGIATE for g in ("college", "trade", "university", "college-trade")},
}


def division_for_grade(grade: str | None) -> str | None:
    if not grade:
        return None
    return _GRADE_TABLE.get(str(grade).strip().lower())


def effective_division(grade: str | None, override: str | None) -> str:
    """El override manda sobre lo calculado por grado."""
    return override or division_for_grade(grade) or UNASSIGNED
