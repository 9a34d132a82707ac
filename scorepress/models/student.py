"""
ScorePress Backend — StudentDetails Document Model
====================================================

What:  The shape of one record in the `studentdetails` collection.
Why:   Keeps the mapping between Python objects and BSON documents in one place.
How:   A plain dataclass with to/from document helpers; MongoDB has no schema,
       so this is the only definition of the record's fields.

Document shape:
    {
        "_id": ObjectId(...),
        "first_name": "ada",        # always lowercased before insert
        "last_name": "lovelace",    # always lowercased before insert
        "score": 97                 # int or float, never a string
    }

Lifecycle:
    Created by /saveStudentDetails. Never updated or deleted by this service.
    No uniqueness: many documents may share a first name.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

Score = Union[int, float]


@dataclass
class StudentDetails:
    first_name: str
    last_name: str
    score: Score
    id: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        """Insertable document; `_id` is left to the server."""
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "score": self.score,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "StudentDetails":
        raw_id = doc.get("_id")
        return cls(
            first_name=doc.get("first_name", ""),
            last_name=doc.get("last_name", ""),
            score=doc.get("score", 0),
            id=str(raw_id) if raw_id is not None else None,
        )

    def __repr__(self) -> str:
        return f"<StudentDetails(id={self.id}, first_name='{self.first_name}')>"
