"""
REST API for GradePilot using FastAPI.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .. import __version__
from ..core.entities import (
    Assignment, Category, ClassGrade, ClassGradeTree, GPACalculation, Grade, GradeChange,
    SchoolClass, WhatIfScenario,
)
from ..core.exceptions import ResourceNotFoundError, ValidationError
from ..core.interfaces import GradeRepository
from ..services import GradeService


logger = logging.getLogger(__name__)


# Pydantic models for API
class CategoryPayload(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    weight: float = Field(..., ge=0, le=100)
    color: Optional[str] = None


class AssignmentPayload(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    category_id: str = Field(..., min_length=1)
    points_possible: float = Field(..., gt=0, allow_inf_nan=False)
    points_earned: Optional[float] = Field(None, ge=0, allow_inf_nan=False)


class ClassTreeCreate(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    credit_hours: float = Field(..., gt=0, allow_inf_nan=False)
    is_completed: bool = False
    term: Optional[str] = None
    categories: List[CategoryPayload] = Field(default_factory=list)
    assignments: List[AssignmentPayload] = Field(default_factory=list)


class GradeRecord(BaseModel):
    points_earned: float = Field(..., ge=0, allow_inf_nan=False)


class AssignmentResponse(BaseModel):
    id: str
    name: str
    category_id: str
    points_possible: float
    points_earned: Optional[float] = None
    percentage: Optional[float] = None


class CategoryResultResponse(BaseModel):
    category_id: str
    name: str
    weight: float
    effective_weight: float
    earned_points: float
    possible_points: float
    graded_count: int
    percentage: Optional[float] = None
    eligible: bool


class ClassGradeResponse(BaseModel):
    class_id: str
    class_name: str
    credit_hours: float
    is_completed: bool
    term: Optional[str] = None
    current_grade: Optional[float] = None
    letter_grade: Optional[str] = None
    grade_points: Optional[float] = None
    categories: List[CategoryResultResponse] = []


class GPAResponse(BaseModel):
    current_gpa: float
    semester_gpa: float
    total_credit_hours: float
    semester_credit_hours: float
    class_grades: List[ClassGradeResponse] = []


class GradeChangeRequest(BaseModel):
    assignment_id: str = Field(..., min_length=1)
    new_grade: float = Field(..., allow_inf_nan=False)
    class_id: Optional[str] = None
    current_grade: Optional[float] = None


class WhatIfRequest(BaseModel):
    changes: List[GradeChangeRequest] = Field(default_factory=list)
    semester_class_ids: Optional[List[str]] = None


class AppliedChangeResponse(BaseModel):
    assignment_id: str
    class_id: Optional[str] = None
    new_grade: float
    current_grade: Optional[float] = None


class WhatIfResponse(BaseModel):
    resulting_gpa: float
    gpa_change: float
    baseline_gpa: float
    semester_gpa: float
    class_grades: List[ClassGradeResponse] = []
    applied_changes: int
    changes: List[AppliedChangeResponse] = []
    skipped_assignment_ids: List[str] = []


class GradePilotRestAPI:
    """REST API exposing grade aggregation over a grade repository."""

    def __init__(self, repository: GradeRepository, grade_service: Optional[GradeService] = None):
        self._repository = repository
        self._grade_service = grade_service or GradeService(repository)

        self.app = FastAPI(
            title="GradePilot API",
            description="Grade aggregation and what-if GPA engine",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        @self.app.post("/students/{student_id}/classes", response_model=ClassGradeResponse,
                       status_code=status.HTTP_201_CREATED)
        async def save_class(student_id: str, payload: ClassTreeCreate):
            """Store a class with its categories and assignments."""
            try:
                tree = self._tree_from_payload(payload)
                self._repository.save_class_tree(student_id, tree)
                return self._class_grade_to_response(
                    self._grade_service.get_class_breakdown(student_id, tree.class_id)
                )
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=e.message)
            except Exception as e:
                logger.exception("Failed to save class for student %s", student_id)
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.put("/students/{student_id}/assignments/{assignment_id}/grade",
                      response_model=AssignmentResponse)
        async def record_grade(student_id: str, assignment_id: str, payload: GradeRecord):
            """Record or overwrite an assignment's score."""
            try:
                assignment = self._repository.record_grade(
                    student_id, assignment_id, Grade(points_earned=payload.points_earned)
                )
                return self._assignment_to_response(assignment)
            except ResourceNotFoundError as e:
                raise HTTPException(status_code=404, detail=e.message)
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=e.message)
            except Exception as e:
                logger.exception("Failed to record grade for %s", assignment_id)
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.delete("/students/{student_id}/assignments/{assignment_id}/grade",
                         response_model=AssignmentResponse)
        async def clear_grade(student_id: str, assignment_id: str):
            """Mark an assignment as ungraded."""
            try:
                return self._assignment_to_response(self._repository.clear_grade(student_id, assignment_id))
            except ResourceNotFoundError as e:
                raise HTTPException(status_code=404, detail=e.message)
            except Exception as e:
                logger.exception("Failed to clear grade for %s", assignment_id)
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.get("/students/{student_id}/gpa", response_model=GPAResponse)
        async def get_gpa(student_id: str, semester_class_ids: Optional[List[str]] = Query(None)):
            """Compute the student's cumulative and semester GPA."""
            try:
                calculation = self._grade_service.calculate_full_gpa(student_id, semester_class_ids)
                return self._gpa_to_response(calculation)
            except Exception as e:
                logger.exception("GPA calculation failed for student %s", student_id)
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.get("/students/{student_id}/classes/{class_id}/grade", response_model=ClassGradeResponse)
        async def get_class_grade(student_id: str, class_id: str):
            """Grade breakdown for one class."""
            try:
                class_grade = self._grade_service.get_class_breakdown(student_id, class_id)
                if class_grade is None:
                    raise HTTPException(status_code=404, detail="Class not found")
                return self._class_grade_to_response(class_grade)
            except HTTPException:
                raise
            except Exception as e:
                logger.exception("Class grade failed for %s", class_id)
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

        @self.app.post("/students/{student_id}/what-if", response_model=WhatIfResponse)
        async def what_if(student_id: str, payload: WhatIfRequest):
            """Preview the GPA under hypothetical grades. Nothing is stored."""
            try:
                changes = [
                    GradeChange(
                        assignment_id=change.assignment_id,
                        new_grade=change.new_grade,
                        class_id=change.class_id,
                        current_grade=change.current_grade,
                    )
                    for change in payload.changes
                ]
                scenario = self._grade_service.calculate_what_if_scenario(
                    student_id, changes, payload.semester_class_ids
                )
                return self._scenario_to_response(scenario)
            except Exception as e:
                logger.exception("What-if calculation failed for student %s", student_id)
                raise HTTPException(status_code=500, detail=f"Internal error: {str(e)}")

    def _tree_from_payload(self, payload: ClassTreeCreate) -> ClassGradeTree:
        """Convert a request body to a class tree."""
        return ClassGradeTree(
            school_class=SchoolClass(
                id=payload.id,
                name=payload.name,
                credit_hours=payload.credit_hours,
                is_completed=payload.is_completed,
                term=payload.term,
            ),
            categories=[
                Category(id=c.id, name=c.name, weight=c.weight, color=c.color)
                for c in payload.categories
            ],
            assignments=[
                Assignment(
                    id=a.id,
                    name=a.name,
                    category_id=a.category_id,
                    points_possible=a.points_possible,
                    grade=Grade(points_earned=a.points_earned) if a.points_earned is not None else None,
                )
                for a in payload.assignments
            ],
        )

    def _assignment_to_response(self, assignment: Assignment) -> AssignmentResponse:
        return AssignmentResponse(
            id=assignment.id,
            name=assignment.name,
            category_id=assignment.category_id,
            points_possible=assignment.points_possible,
            points_earned=assignment.grade.points_earned if assignment.grade else None,
            percentage=assignment.percentage,
        )

    def _class_grade_to_response(self, class_grade: ClassGrade) -> ClassGradeResponse:
        """Convert ClassGrade to response model, using the display-rounded grade."""
        return ClassGradeResponse(
            class_id=class_grade.class_id,
            class_name=class_grade.class_name,
            credit_hours=class_grade.credit_hours,
            is_completed=class_grade.is_completed,
            term=class_grade.term,
            current_grade=class_grade.display_grade,
            letter_grade=class_grade.letter_grade,
            grade_points=class_grade.grade_points,
            categories=[
                CategoryResultResponse(
                    category_id=c.category_id,
                    name=c.name,
                    weight=c.weight,
                    effective_weight=c.effective_weight,
                    earned_points=c.earned_points,
                    possible_points=c.possible_points,
                    graded_count=c.graded_count,
                    percentage=c.percentage,
                    eligible=c.is_eligible,
                )
                for c in class_grade.categories
            ],
        )

    def _gpa_to_response(self, calculation: GPACalculation) -> GPAResponse:
        return GPAResponse(
            current_gpa=calculation.current_gpa,
            semester_gpa=calculation.semester_gpa,
            total_credit_hours=calculation.total_credit_hours,
            semester_credit_hours=calculation.semester_credit_hours,
            class_grades=[self._class_grade_to_response(g) for g in calculation.class_grades],
        )

    def _scenario_to_response(self, scenario: WhatIfScenario) -> WhatIfResponse:
        return WhatIfResponse(
            resulting_gpa=scenario.resulting_gpa,
            gpa_change=scenario.gpa_change,
            baseline_gpa=scenario.baseline_gpa,
            semester_gpa=scenario.semester_gpa,
            class_grades=[self._class_grade_to_response(g) for g in scenario.class_grades],
            applied_changes=len(scenario.applied_changes),
            changes=[
                AppliedChangeResponse(
                    assignment_id=change.assignment_id,
                    class_id=change.class_id,
                    new_grade=change.new_grade,
                    current_grade=change.current_grade,
                )
                for change in scenario.applied_changes
            ],
            skipped_assignment_ids=[change.assignment_id for change in scenario.skipped_changes],
        )
