"""
ScorePress Backend — Student Request/Response Schemas
=======================================================

What:  Pydantic models for /saveStudentDetails and /getStudentDetails.
Why:   Automatic body parsing, response serialization, and OpenAPI docs.

Design Decision:
    Request fields are Optional on purpose. A missing field must produce
    the service's 400 `validation_error` ("Missing required fields"), not
    FastAPI's generic 422, so presence is checked in StudentService.
    Types are still enforced here: `first_name: 42` is rejected before the
    service runs.
"""

from typing import Optional, Union

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SaveStudentRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, description="Student first name (any case)")
    last_name: Optional[str] = Field(default=None, description="Student last name (any case)")
    score: Optional[Union[int, float, str]] = Field(
        default=None,
        description="Numeric score; numeric strings such as \"42\" are accepted",
    )


class StudentLookupRequest(BaseModel):
    studentName: Optional[str] = Field(
        default=None,
        description="First name to look up (case-insensitive exact match)",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SaveStudentResponse(BaseModel):
    """
    Returned by POST /saveStudentDetails.

    Example:
        {"message": "Student Details saved: Ada Lovelace with a score of 97", "status": "OK"}
    """
    message: str = Field(description="Human-readable confirmation")
    status: str = Field(default="OK", description="Always 'OK' on success")


class StudentRecord(BaseModel):
    """A stored StudentDetails document as exposed by the API."""
    id: Optional[str] = Field(default=None, description="Document id (ObjectId as string)")
    first_name: str = Field(description="Lowercased first name")
    last_name: str = Field(description="Lowercased last name")
    score: Union[int, float] = Field(description="Numeric score")

    model_config = {"from_attributes": True}


class StudentLookupResponse(BaseModel):
    student: StudentRecord
    message: str = Field(description="'<first_name> found'")
