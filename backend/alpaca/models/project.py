"""
Alpaca API — Project Document
==============================

What:  The `projects` collection's document shape.
Who:   Bound to /api/projects by routes/projects.py.

All three text fields are required and must be non-empty strings; creating or
updating a project without them answers 400 "Required fields missing".
"""

from typing import ClassVar, Tuple

from pydantic import Field

from alpaca.models.document import MongoDoc


class Project(MongoDoc):
    """A project tracked by Alpaca."""

    required_fields: ClassVar[Tuple[str, ...]] = ("name", "category", "description")

    name: str = Field(default="", description="Project name")
    category: str = Field(default="", description="Free-form category label")
    description: str = Field(default="", description="What the project is about")

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"
