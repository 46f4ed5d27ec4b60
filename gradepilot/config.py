"""
Engine settings built from a plain configuration dict or JSON file.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .core.enums import TermRule
from .core.exceptions import ConfigurationError
from .core.grading_scale import DEFAULT_GRADE_POINTS, DEFAULT_GRADE_THRESHOLDS, GradeScale


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GRADEPILOT_CONFIG"


@dataclass(frozen=True)
class EngineSettings:
    """Tunable parameters of the grade engine."""
    grade_thresholds: Tuple[Tuple[str, float], ...] = DEFAULT_GRADE_THRESHOLDS
    grade_points: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_GRADE_POINTS))
    gpa_cap: float = 4.0
    grade_precision: int = 1
    gpa_precision: int = 2
    term_rule: TermRule = TermRule.IN_PROGRESS
    current_term: Optional[str] = None

    def build_scale(self) -> GradeScale:
        return GradeScale(self.grade_thresholds, self.grade_points, self.gpa_cap)

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]] = None) -> "EngineSettings":
        """Build settings from a config dict. Unknown keys are ignored."""
        config = config or {}
        defaults = cls()

        thresholds = config.get('grade_thresholds', defaults.grade_thresholds)
        if isinstance(thresholds, dict):
            thresholds = tuple(thresholds.items())
        try:
            thresholds = tuple((str(letter), float(minimum)) for letter, minimum in thresholds)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid grade_thresholds: {e}", error_code="BAD_THRESHOLDS")

        grade_points = config.get('grade_points', defaults.grade_points)
        try:
            grade_points = {str(letter): float(points) for letter, points in dict(grade_points).items()}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid grade_points: {e}", error_code="BAD_GRADE_POINTS")

        try:
            term_rule = TermRule(config.get('term_rule', defaults.term_rule.value))
        except ValueError:
            raise ConfigurationError(
                f"Unknown term_rule {config.get('term_rule')!r}",
                error_code="BAD_TERM_RULE",
                details={"allowed": [rule.value for rule in TermRule]},
            )

        try:
            settings = cls(
                grade_thresholds=thresholds,
                grade_points=grade_points,
                gpa_cap=float(config.get('gpa_cap', defaults.gpa_cap)),
                grade_precision=int(config.get('grade_precision', defaults.grade_precision)),
                gpa_precision=int(config.get('gpa_precision', defaults.gpa_precision)),
                term_rule=term_rule,
                current_term=config.get('current_term', defaults.current_term),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid engine setting: {e}", error_code="BAD_SETTING")

        if settings.grade_precision < 0 or settings.gpa_precision < 0:
            raise ConfigurationError("Precision settings must be non-negative", error_code="BAD_PRECISION")
        if settings.term_rule is TermRule.EXPLICIT_TERM and not settings.current_term:
            raise ConfigurationError("term_rule 'explicit_term' requires current_term",
                                     error_code="MISSING_CURRENT_TERM")

        # Validates the threshold table.
        settings.build_scale()
        return settings


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Read a JSON config file, falling back to ``$GRADEPILOT_CONFIG``."""
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return {}
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}", error_code="BAD_CONFIG_FILE")
    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object", error_code="BAD_CONFIG_FILE")
    logger.info("Loaded configuration from %s", path)
    return config
