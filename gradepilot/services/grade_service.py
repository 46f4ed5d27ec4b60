"""
Grade service facade wiring the aggregation engine to a data source.
"""

import logging
from typing import Collection, Iterable, Optional

from ..config import EngineSettings
from ..core.entities import ClassGrade, GPACalculation, GradeChange, WhatIfScenario
from ..core.interfaces import GradeTreeSource
from .gpa_aggregator import GPAAggregator
from .what_if_engine import WhatIfEngine


logger = logging.getLogger(__name__)


class GradeService:
    """Entry point for GPA, class breakdown and what-if computations.

    Holds no per-student state; every call reads a fresh snapshot from the
    source and returns new values.
    """

    def __init__(self, source: GradeTreeSource, settings: Optional[EngineSettings] = None):
        self._settings = settings or EngineSettings()
        self._aggregator = GPAAggregator(source, self._settings)
        self._what_if = WhatIfEngine(self._aggregator)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def calculate_full_gpa(self, student_id: str,
                           semester_class_ids: Optional[Collection[str]] = None) -> GPACalculation:
        return self._aggregator.calculate_full_gpa(student_id, semester_class_ids)

    def calculate_what_if_scenario(self, student_id: str, changes: Iterable[GradeChange],
                                   semester_class_ids: Optional[Collection[str]] = None) -> WhatIfScenario:
        return self._what_if.calculate_what_if_scenario(student_id, changes, semester_class_ids)

    def get_class_breakdown(self, student_id: str, class_id: str) -> Optional[ClassGrade]:
        """Grade one class, ungraded ones included. None for an unknown class."""
        for tree in self._aggregator.load_trees(student_id):
            if tree.class_id == class_id:
                return self._aggregator.calculator.calculate_tree(tree)
        logger.debug("Class %s not found for student %s", class_id, student_id)
        return None
