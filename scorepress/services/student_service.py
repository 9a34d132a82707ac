"""
ScorePress Backend — Student Service (Record Store Gateway)
=============================================================

What:  Saves and looks up StudentDetails records.
Why:   Keeps presence checks, normalization and error translation out of
       the route handlers.
How:   Stateless methods that receive the collection handle per call.
Who:   Called by the /saveStudentDetails and /getStudentDetails routes.

Normalization rules:
    - first_name / last_name are lowercased before insert
    - score is stored as a number: 97 → 97, "97" → 97, "97.5" → 97.5
    - lookups lowercase the requested name, so "ADA" finds "ada"

Error translation:
    missing/invalid input → ValidationError (400), raised before any I/O
    no matching document  → NotFoundError (404)
    any PyMongoError      → StorageError (500), driver message included
"""

import logging
import math
from typing import Any, List, Optional

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from scorepress.exceptions import NotFoundError, StorageError, ValidationError
from scorepress.models.student import Score, StudentDetails
from scorepress.schemas.student import (
    SaveStudentResponse,
    StudentLookupResponse,
    StudentRecord,
)

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def coerce_score(value: Any) -> Score:
    """
    Convert a request score to a number.

    Raises:
        ValidationError: value is a bool, non-numeric, NaN, infinite or too
            large even for a double
    """
    if isinstance(value, bool):
        raise ValidationError(message="Score must be a number", field="score")
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                raise ValidationError(
                    message=f"Score must be a number, got '{value}'",
                    field="score",
                )
    if isinstance(number, int) and not INT64_MIN <= number <= INT64_MAX:
        # BSON integers are 8 bytes; larger values are stored as doubles
        try:
            number = float(number)
        except OverflowError:
            raise ValidationError(message="Score is too large", field="score")
    if isinstance(number, float) and not math.isfinite(number):
        raise ValidationError(message="Score must be a finite number", field="score")
    return number


class StudentService:
    """
    Business logic for student score records.

    Stateless: the collection is passed into every call, never stored.
    """

    async def save_student(
        self,
        db: AsyncCollection,
        first_name: Optional[str],
        last_name: Optional[str],
        score: Any,
    ) -> SaveStudentResponse:
        """
        Validate, normalize and insert one StudentDetails document.

        Args:
            db: StudentDetails collection (injected by FastAPI)
            first_name / last_name: required, non-empty
            score: required; number or numeric string

        Returns:
            SaveStudentResponse echoing the caller's original values

        Raises:
            ValidationError: a field is missing or score is not numeric
            StorageError: the insert failed
        """
        missing: List[str] = []
        if not first_name:
            missing.append("first_name")
        if not last_name:
            missing.append("last_name")
        if score is None:
            missing.append("score")
        if missing:
            raise ValidationError(
                message="Missing required fields",
                context={"fields": missing},
            )

        student = StudentDetails(
            first_name=first_name.lower(),
            last_name=last_name.lower(),
            score=coerce_score(score),
        )

        try:
            result = await db.insert_one(student.to_document())
        except PyMongoError as e:
            logger.error("Failed to save student %s: %s", student.first_name, str(e))
            raise StorageError(
                message=f"Failed to save student details: {e}",
                context={"error_type": type(e).__name__},
            )

        logger.info("Student saved: %s (id=%s)", student.first_name, result.inserted_id)
        return SaveStudentResponse(
            message=f"Student Details saved: {first_name} {last_name} with a score of {score}",
            status="OK",
        )

    async def get_student(
        self,
        db: AsyncCollection,
        student_name: Optional[str],
    ) -> StudentLookupResponse:
        """
        Find the first record whose first_name equals the lowercased name.

        When several students share a first name, whichever document the
        store returns first wins; no ordering is imposed.

        Raises:
            ValidationError: name missing or empty
            NotFoundError: no record matches
            StorageError: the query failed
        """
        if not student_name:
            raise ValidationError(message="Student name is required", field="studentName")

        try:
            doc = await db.find_one({"first_name": student_name.lower()})
        except PyMongoError as e:
            logger.error("Failed to look up student %s: %s", student_name, str(e))
            raise StorageError(
                message=f"Failed to look up student: {e}",
                context={"error_type": type(e).__name__},
            )

        if doc is None:
            raise NotFoundError(resource="student", message="Student not found")

        student = StudentDetails.from_document(doc)
        return StudentLookupResponse(
            student=StudentRecord.model_validate(student),
            message=f"{student.first_name} found",
        )


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless; the collection handle comes in with each call
student_service = StudentService()
