from __future__ import annotations

from uuid import UUID
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------- nested content (input) ----------


class QuizCreate(BaseModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(default_factory=list)
    answer: Optional[str] = None


class LessonCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = ""
    order_index: int = 1
    quizzes: list[QuizCreate] = Field(default_factory=list)
    children: list[LessonCreate] = Field(default_factory=list)


class ModuleCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    order_index: int = 1
    lessons: list[LessonCreate] = Field(default_factory=list)
    quizzes: list[QuizCreate] = Field(default_factory=list)


# ---------- nested content (output) ----------


class MediaAssetRead(BaseModel):
    id: UUID
    filename: str
    content_type: Optional[str] = None
    size_bytes: int
    url: str

    model_config = ConfigDict(from_attributes=True)


class QuizRead(BaseModel):
    """Quiz as shown to learners; the answer is never serialized."""

    id: UUID
    question: str
    options: list[str]

    model_config = ConfigDict(from_attributes=True)


class LessonRead(BaseModel):
    id: UUID
    title: str
    content: str
    order_index: int
    multimedia: list[MediaAssetRead] = []
    quizzes: list[QuizRead] = []
    children: list[LessonRead] = []

    model_config = ConfigDict(from_attributes=True)


class ModuleRead(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    order_index: int
    lessons: list[LessonRead] = []
    quizzes: list[QuizRead] = []

    model_config = ConfigDict(from_attributes=True)


# ---------- course ----------


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    category_id: Optional[UUID] = None
    duration: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, allow_inf_nan=False)
    max_students: Optional[int] = None
    # replaces the whole module tree when given
    modules: Optional[list[ModuleCreate]] = None


class CourseSummary(BaseModel):
    id: UUID
    title: str
    description: str
    duration: str
    price: float
    max_students: int
    category_id: UUID
    instructor_id: UUID
    enrolled_count: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CourseRead(CourseSummary):
    content: str
    modules: list[ModuleRead] = []
    attachments: list[MediaAssetRead] = []


class CoursePreview(BaseModel):
    id: UUID
    title: str
    description: str
    price: float

    model_config = ConfigDict(from_attributes=True)
