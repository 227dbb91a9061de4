"""
Operations on a course's module/lesson tree.

A module holds top-level lessons; every lesson may hold sub-lessons of the same
shape in ``children``. Lookups walk the tree depth-first and removals delete the
node from the list that contains it, which takes its whole subtree with it
(delete-orphan cascade).
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator
from typing import Optional

from coursemarket.modules.courses.models import Course, Lesson, Module, Quiz
from coursemarket.schemas.course import LessonCreate, ModuleCreate, QuizCreate


def build_quiz(data: QuizCreate) -> Quiz:
    return Quiz(question=data.question, options=list(data.options), answer=data.answer)


def build_lesson(data: LessonCreate) -> Lesson:
    lesson = Lesson(
        title=data.title,
        content=data.content,
        order_index=data.order_index,
    )
    lesson.quizzes = [build_quiz(q) for q in data.quizzes]
    lesson.children = [build_lesson(child) for child in data.children]
    return lesson


def build_module(data: ModuleCreate) -> Module:
    module = Module(
        title=data.title,
        description=data.description,
        order_index=data.order_index,
    )
    module.lessons = [build_lesson(lesson) for lesson in data.lessons]
    module.quizzes = [build_quiz(q) for q in data.quizzes]
    return module


def find_module(course: Course, module_id: uuid.UUID) -> Optional[Module]:
    for module in course.modules:
        if module.id == module_id:
            return module
    return None


def iter_lessons(lessons: Iterable[Lesson]) -> Iterator[Lesson]:
    """Pre-order walk over lessons and all of their sub-lessons."""
    for lesson in lessons:
        yield lesson
        yield from iter_lessons(lesson.children)


def find_lesson(lessons: Iterable[Lesson], lesson_id: uuid.UUID) -> Optional[Lesson]:
    for lesson in iter_lessons(lessons):
        if lesson.id == lesson_id:
            return lesson
    return None


def remove_lesson(lessons: list[Lesson], lesson_id: uuid.UUID) -> bool:
    for index, lesson in enumerate(lessons):
        if lesson.id == lesson_id:
            del lessons[index]
            return True
        if remove_lesson(lesson.children, lesson_id):
            return True
    return False


def remove_module(course: Course, module_id: uuid.UUID) -> bool:
    for index, module in enumerate(course.modules):
        if module.id == module_id:
            del course.modules[index]
            return True
    return False


def media_keys(course: Course) -> list[str]:
    """Storage keys of every file attached to the course or any of its lessons."""
    keys = [asset.key for asset in course.attachments]
    for module in course.modules:
        for lesson in iter_lessons(module.lessons):
            keys.extend(asset.key for asset in lesson.multimedia)
    return keys
