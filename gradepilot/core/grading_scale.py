"""
Percentage to letter grade mapping on a configurable threshold table.
"""

import math
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .enums import LetterGrade
from .exceptions import ConfigurationError


DEFAULT_GRADE_THRESHOLDS: Tuple[Tuple[str, float], ...] = (
    (LetterGrade.A_PLUS.value, 97.0),
    (LetterGrade.A.value, 93.0),
    (LetterGrade.A_MINUS.value, 90.0),
    (LetterGrade.B_PLUS.value, 87.0),
    (LetterGrade.B.value, 83.0),
    (LetterGrade.B_MINUS.value, 80.0),
    (LetterGrade.C_PLUS.value, 77.0),
    (LetterGrade.C.value, 73.0),
    (LetterGrade.C_MINUS.value, 70.0),
    (LetterGrade.D_PLUS.value, 67.0),
    (LetterGrade.D.value, 63.0),
    (LetterGrade.D_MINUS.value, 60.0),
    (LetterGrade.F.value, 0.0),
)

DEFAULT_GRADE_POINTS: Dict[str, float] = {
    LetterGrade.A_PLUS.value: 4.0,
    LetterGrade.A.value: 4.0,
    LetterGrade.A_MINUS.value: 3.7,
    LetterGrade.B_PLUS.value: 3.3,
    LetterGrade.B.value: 3.0,
    LetterGrade.B_MINUS.value: 2.7,
    LetterGrade.C_PLUS.value: 2.3,
    LetterGrade.C.value: 2.0,
    LetterGrade.C_MINUS.value: 1.7,
    LetterGrade.D_PLUS.value: 1.3,
    LetterGrade.D.value: 1.0,
    LetterGrade.D_MINUS.value: 0.7,
    LetterGrade.F.value: 0.0,
}


class GradeScale:
    """Ordered threshold table mapping percentages to (letter, GPA points).

    Thresholds are inclusive lower bounds: with the default table 90.0 is an
    ``A-`` and 89.99 a ``B+``. Inputs outside [0, 100] are clamped first and
    non-finite inputs map to the lowest letter, so every call yields a
    defined result.
    """

    def __init__(self, thresholds: Optional[Sequence[Tuple[str, float]]] = None,
                 grade_points: Optional[Mapping[str, float]] = None,
                 gpa_cap: float = 4.0):
        raw = list(thresholds if thresholds is not None else DEFAULT_GRADE_THRESHOLDS)
        points = dict(grade_points if grade_points is not None else DEFAULT_GRADE_POINTS)
        if not raw:
            raise ConfigurationError("Grade scale needs at least one threshold",
                                     error_code="EMPTY_SCALE")

        table = []
        for letter, minimum in raw:
            try:
                minimum = float(minimum)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Threshold for {letter!r} is not numeric",
                                         error_code="BAD_THRESHOLD",
                                         details={"letter": letter, "value": minimum})
            if letter not in points:
                raise ConfigurationError(f"No GPA point value for letter {letter!r}",
                                         error_code="MISSING_POINTS",
                                         details={"letter": letter})
            table.append((letter, minimum))

        self._thresholds = tuple(sorted(table, key=lambda item: item[1], reverse=True))
        self._grade_points = points
        self._gpa_cap = float(gpa_cap)

    @property
    def thresholds(self) -> Tuple[Tuple[str, float], ...]:
        return self._thresholds

    @property
    def gpa_cap(self) -> float:
        return self._gpa_cap

    @property
    def lowest_letter(self) -> str:
        return self._thresholds[-1][0]

    def points_for(self, letter: str) -> float:
        """GPA points of a letter, capped at ``gpa_cap``."""
        return min(float(self._grade_points[letter]), self._gpa_cap)

    def map_percentage_to_letter(self, percentage: float) -> Tuple[str, float]:
        """Map a percentage to ``(letter, gpa_points)``."""
        try:
            value = float(percentage)
        except (TypeError, ValueError):
            value = math.nan
        if math.isnan(value):
            letter = self.lowest_letter
            return letter, self.points_for(letter)

        value = min(max(value, 0.0), 100.0)
        for letter, minimum in self._thresholds:
            if value >= minimum:
                return letter, self.points_for(letter)

        letter = self.lowest_letter
        return letter, self.points_for(letter)


DEFAULT_SCALE = GradeScale()


def map_percentage_to_letter(percentage: float, scale: Optional[GradeScale] = None) -> Tuple[str, float]:
    """Map a percentage using ``scale`` or the default production table."""
    return (scale or DEFAULT_SCALE).map_percentage_to_letter(percentage)
