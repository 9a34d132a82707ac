"""
ScorePress Backend — Student Route Handlers
=============================================

What:  POST /saveStudentDetails and POST /getStudentDetails.
How:   Parse the body, hand the collection and fields to StudentService,
       return its response model. Every error path goes through the global
       exception handlers (400 / 404 / 500 envelopes).

Both routes are POST with a JSON body, including the lookup, to keep the
contract existing clients already use.
"""

import logging

from fastapi import APIRouter, Depends
from pymongo.asynchronous.collection import AsyncCollection

from scorepress.database import get_student_collection
from scorepress.schemas.common import ErrorResponse
from scorepress.schemas.student import (
    SaveStudentRequest,
    SaveStudentResponse,
    StudentLookupRequest,
    StudentLookupResponse,
)
from scorepress.services.student_service import student_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Students"])


@router.post(
    "/saveStudentDetails",
    response_model=SaveStudentResponse,
    responses={
        400: {"description": "Missing or invalid field", "model": ErrorResponse},
        500: {"description": "Record store error", "model": ErrorResponse},
    },
    summary="Save a student's score",
)
async def save_student_details(
    body: SaveStudentRequest,
    db: AsyncCollection = Depends(get_student_collection),
) -> SaveStudentResponse:
    return await student_service.save_student(
        db=db,
        first_name=body.first_name,
        last_name=body.last_name,
        score=body.score,
    )


@router.post(
    "/getStudentDetails",
    response_model=StudentLookupResponse,
    responses={
        400: {"description": "Missing student name", "model": ErrorResponse},
        404: {"description": "No student with that first name", "model": ErrorResponse},
        500: {"description": "Record store error", "model": ErrorResponse},
    },
    summary="Look up a student by first name",
    description="Case-insensitive exact match on first name; returns the first match.",
)
async def get_student_details(
    body: StudentLookupRequest,
    db: AsyncCollection = Depends(get_student_collection),
) -> StudentLookupResponse:
    return await student_service.get_student(db=db, student_name=body.studentName)
