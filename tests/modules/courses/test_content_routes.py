"""Tests for module and lesson routes, including sub-lessons and multimedia."""

from pathlib import Path
from uuid import uuid4

from coursemarket.core.config import settings
from coursemarket.modules.courses.models import Lesson, MediaAsset, Module


def first_module(course):
    return course.modules[0]


def first_lesson(course):
    return course.modules[0].lessons[0]


class TestModules:

    def test_owner_adds_module(self, client, basic_course, instructor_headers):
        response = client.post(
            f"/api/courses/{basic_course.id}/modules",
            json={"title": "Advanced", "order_index": 2, "lessons": [{"title": "Async"}]},
            headers=instructor_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["title"] == "Advanced"
        assert data["lessons"][0]["title"] == "Async"

    def test_non_owner_cannot_add_module(self, client, basic_course, other_instructor, headers_for):
        response = client.post(
            f"/api/courses/{basic_course.id}/modules",
            json={"title": "Sneaky"},
            headers=headers_for(other_instructor),
        )

        assert response.status_code == 403

    def test_list_modules_for_paid_student(self, client, basic_course, paid_enrollment, auth_headers):
        response = client.get(f"/api/courses/{basic_course.id}/modules", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Modules retrieved"
        assert [m["title"] for m in body["data"]] == ["Getting started"]

    def test_list_modules_for_pending_student(self, client, basic_course, pending_enrollment, auth_headers):
        response = client.get(f"/api/courses/{basic_course.id}/modules", headers=auth_headers)

        assert response.status_code == 402
        body = response.json()
        assert body["message"] == "Payment required to view modules"
        assert "data" not in body

    def test_get_module(self, client, basic_course, paid_enrollment, auth_headers):
        module = first_module(basic_course)

        response = client.get(
            f"/api/courses/{basic_course.id}/modules/{module.id}",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(module.id)

    def test_get_unknown_module(self, client, basic_course, instructor_headers):
        response = client.get(
            f"/api/courses/{basic_course.id}/modules/{uuid4()}",
            headers=instructor_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Module not found"

    def test_delete_module_removes_its_lessons(self, client, db, basic_course, instructor_headers):
        module = first_module(basic_course)

        response = client.delete(
            f"/api/courses/{basic_course.id}/modules/{module.id}",
            headers=instructor_headers,
        )

        assert response.status_code == 200
        assert db.query(Module).count() == 0
        assert db.query(Lesson).count() == 0

    def test_delete_module_of_another_course(self, client, basic_course, free_course, instructor_headers):
        module = first_module(basic_course)

        response = client.delete(
            f"/api/courses/{free_course.id}/modules/{module.id}",
            headers=instructor_headers,
        )

        assert response.status_code == 404


class TestLessons:

    def test_list_lessons_includes_sub_lessons(self, client, basic_course, paid_enrollment, auth_headers):
        response = client.get(f"/api/courses/{basic_course.id}/lessons", headers=auth_headers)

        assert response.status_code == 200
        lessons = response.json()["data"]
        assert [lesson["title"] for lesson in lessons] == ["Installing Python"]
        assert lessons[0]["children"][0]["title"] == "Windows"

    def test_get_sub_lesson_by_id(self, client, basic_course, paid_enrollment, auth_headers):
        module = first_module(basic_course)
        child = first_lesson(basic_course).children[0]

        response = client.get(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons/{child.id}",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Windows"

    def test_get_lesson_not_enrolled(self, client, basic_course, auth_headers):
        module = first_module(basic_course)
        lesson = first_lesson(basic_course)

        response = client.get(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons/{lesson.id}",
            headers=auth_headers,
        )

        assert response.status_code == 403

    def test_add_lesson_with_multimedia(self, client, db, basic_course, instructor_headers):
        module = first_module(basic_course)

        response = client.post(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons",
            data={"title": "Virtualenvs", "content": "python -m venv", "order_index": "2"},
            files=[("files", ("cheatsheet.txt", b"venv notes", "text/plain"))],
            headers=instructor_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["title"] == "Virtualenvs"
        assert data["multimedia"][0]["filename"] == "cheatsheet.txt"

        asset = db.query(MediaAsset).one()
        assert (Path(settings.S3_STORAGE_PATH) / asset.key).is_file()

    def test_add_sub_lesson(self, client, db, basic_course, instructor_headers):
        module = first_module(basic_course)
        parent = first_lesson(basic_course)

        response = client.post(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons",
            data={"title": "macOS", "parent_lesson_id": str(parent.id)},
            headers=instructor_headers,
        )

        assert response.status_code == 201
        db.refresh(parent)
        assert sorted(c.title for c in parent.children) == ["Windows", "macOS"]
        # still a single top-level lesson
        db.refresh(module)
        assert len(module.lessons) == 1

    def test_add_lesson_unknown_parent(self, client, basic_course, instructor_headers):
        module = first_module(basic_course)

        response = client.post(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons",
            data={"title": "Orphan", "parent_lesson_id": str(uuid4())},
            headers=instructor_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Lesson not found"

    def test_add_lesson_bad_file_type(self, client, db, basic_course, instructor_headers):
        module = first_module(basic_course)

        response = client.post(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons",
            data={"title": "Script"},
            files=[("files", ("script.sh", b"echo hi", "text/x-sh"))],
            headers=instructor_headers,
        )

        assert response.status_code == 400
        assert db.query(Lesson).count() == 2

    def test_delete_lesson_removes_subtree(self, client, db, basic_course, instructor_headers):
        module = first_module(basic_course)
        lesson = first_lesson(basic_course)

        response = client.delete(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons/{lesson.id}",
            headers=instructor_headers,
        )

        assert response.status_code == 200
        assert db.query(Lesson).count() == 0

    def test_delete_nested_lesson_only(self, client, db, basic_course, instructor_headers):
        module = first_module(basic_course)
        child = first_lesson(basic_course).children[0]

        response = client.delete(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons/{child.id}",
            headers=instructor_headers,
        )

        assert response.status_code == 200
        assert [lesson.title for lesson in db.query(Lesson).all()] == ["Installing Python"]

    def test_delete_unknown_lesson(self, client, basic_course, instructor_headers):
        module = first_module(basic_course)

        response = client.delete(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons/{uuid4()}",
            headers=instructor_headers,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Lesson not found"

    def test_student_cannot_delete_lesson(self, client, basic_course, paid_enrollment, auth_headers):
        module = first_module(basic_course)
        lesson = first_lesson(basic_course)

        response = client.delete(
            f"/api/courses/{basic_course.id}/modules/{module.id}/lessons/{lesson.id}",
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert response.json()["message"] == (
            "Only the instructor who created the course or an admin can delete a lesson"
        )
