"""Tests for course CRUD routes and the content gate on course detail."""

import json
from uuid import uuid4

from coursemarket.core.config import settings
from coursemarket.modules.courses.models import Course, MediaAsset
from coursemarket.modules.enrollments.models import EnrollmentStatus


def course_form(category, **overrides):
    form = {
        "title": "FastAPI in Depth",
        "description": "Build APIs",
        "category_id": str(category.id),
        "duration": "6 weeks",
        "price": "25",
    }
    form.update(overrides)
    return form


class TestCreateCourse:

    def test_instructor_creates_course(self, client, db, instructor_user, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category),
            headers=instructor_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Course created successfully"
        data = body["data"]
        assert data["instructor_id"] == str(instructor_user.id)
        assert data["max_students"] == settings.DEFAULT_MAX_STUDENTS
        assert data["price"] == 25.0
        assert db.query(Course).count() == 1

    def test_create_with_module_tree(self, client, instructor_headers, category):
        modules = [
            {
                "title": "Basics",
                "lessons": [
                    {
                        "title": "Routing",
                        "children": [{"title": "Path params"}],
                        "quizzes": [
                            {"question": "GET or POST?", "options": ["GET", "POST"], "answer": "GET"}
                        ],
                    }
                ],
            }
        ]

        response = client.post(
            "/api/courses/create",
            data=course_form(category, modules=json.dumps(modules)),
            headers=instructor_headers,
        )

        assert response.status_code == 201
        module = response.json()["data"]["modules"][0]
        lesson = module["lessons"][0]
        assert lesson["title"] == "Routing"
        assert lesson["children"][0]["title"] == "Path params"
        assert lesson["quizzes"][0]["options"] == ["GET", "POST"]
        assert "answer" not in lesson["quizzes"][0]

    def test_invalid_modules_json(self, client, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category, modules="[{\"lessons\": 3}]"),
            headers=instructor_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid modules payload"

    def test_missing_required_fields(self, client, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data={"title": "Only a title", "category_id": str(category.id)},
            headers=instructor_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide all required fields"

    def test_unknown_category(self, client, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category, category_id=str(uuid4())),
            headers=instructor_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid category"

    def test_duplicate_title(self, client, instructor_headers, category, basic_course):
        response = client.post(
            "/api/courses/create",
            data=course_form(category, title=basic_course.title),
            headers=instructor_headers,
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Course title already exists."

    def test_negative_price(self, client, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category, price="-1"),
            headers=instructor_headers,
        )

        assert response.status_code == 400

    def test_infinite_price(self, client, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category, price="inf"),
            headers=instructor_headers,
        )

        assert response.status_code == 400

    def test_zero_capacity(self, client, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category, max_students="0"),
            headers=instructor_headers,
        )

        assert response.status_code == 400

    def test_student_cannot_create(self, client, auth_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category),
            headers=auth_headers,
        )

        assert response.status_code == 403

    def test_attachment_is_stored(self, client, db, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category),
            files=[("files", ("syllabus.PDF", b"%PDF-1.4 tiny", "application/pdf"))],
            headers=instructor_headers,
        )

        assert response.status_code == 201
        attachments = response.json()["data"]["attachments"]
        assert len(attachments) == 1
        assert attachments[0]["filename"] == "syllabus.PDF"
        assert attachments[0]["url"].startswith(settings.MEDIA_BASE_URL)
        assert db.query(MediaAsset).count() == 1

    def test_unsupported_file_type(self, client, db, instructor_headers, category):
        response = client.post(
            "/api/courses/create",
            data=course_form(category),
            files=[("files", ("run.exe", b"MZ", "application/octet-stream"))],
            headers=instructor_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File type is not supported"
        assert db.query(Course).count() == 0

    def test_file_too_large(self, client, db, instructor_headers, category):
        big = b"x" * (settings.MAX_UPLOAD_SIZE_BYTES + 1)

        response = client.post(
            "/api/courses/create",
            data=course_form(category),
            files=[("files", ("notes.txt", big, "text/plain"))],
            headers=instructor_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File too large"
        assert db.query(Course).count() == 0


class TestListAndDetail:

    def test_list_is_public_and_has_no_content(self, client, basic_course):
        response = client.get("/api/courses")

        assert response.status_code == 200
        courses = response.json()["data"]
        assert len(courses) == 1
        assert courses[0]["title"] == basic_course.title
        assert "modules" not in courses[0]

    def test_list_filtered_by_category(self, client, basic_course):
        response = client.get("/api/courses", params={"category": str(uuid4())})

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_owner_sees_detail(self, client, basic_course, instructor_headers):
        response = client.get(f"/api/courses/{basic_course.id}", headers=instructor_headers)

        assert response.status_code == 200
        assert response.json()["data"]["modules"][0]["title"] == "Getting started"

    def test_not_enrolled_student_is_forbidden(self, client, basic_course, auth_headers):
        response = client.get(f"/api/courses/{basic_course.id}", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You must enroll in this course first"

    def test_pending_student_gets_preview(self, client, basic_course, pending_enrollment, auth_headers):
        response = client.get(f"/api/courses/{basic_course.id}", headers=auth_headers)

        assert response.status_code == 402
        body = response.json()
        assert body["data"] == {
            "id": str(basic_course.id),
            "title": basic_course.title,
            "description": basic_course.description,
            "price": basic_course.price,
        }

    def test_paid_student_sees_detail(self, client, basic_course, paid_enrollment, auth_headers):
        response = client.get(f"/api/courses/{basic_course.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["content"] == "Course overview"

    def test_pending_student_reads_free_course(self, client, free_course, student_user, enroll, auth_headers):
        enroll(student_user, free_course)

        response = client.get(f"/api/courses/{free_course.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Free Intro"

    def test_unknown_course(self, client, auth_headers):
        response = client.get(f"/api/courses/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404


class TestUpdateCourse:

    def test_partial_update_keeps_other_fields(self, client, basic_course, instructor_headers):
        response = client.put(
            f"/api/courses/{basic_course.id}",
            json={"price": 75},
            headers=instructor_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 75.0
        assert data["title"] == "Python Basics"
        assert data["duration"] == "4 weeks"
        assert len(data["modules"]) == 1

    def test_non_owner_instructor_is_forbidden(self, client, basic_course, other_instructor, headers_for):
        response = client.put(
            f"/api/courses/{basic_course.id}",
            json={"title": "Hijacked"},
            headers=headers_for(other_instructor),
        )

        assert response.status_code == 403

    def test_admin_may_update(self, client, basic_course, admin_headers):
        response = client.put(
            f"/api/courses/{basic_course.id}",
            json={"title": "Renamed by admin"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Renamed by admin"

    def test_title_taken_by_another_course(self, client, basic_course, free_course, instructor_headers):
        response = client.put(
            f"/api/courses/{basic_course.id}",
            json={"title": free_course.title},
            headers=instructor_headers,
        )

        assert response.status_code == 409

    def test_capacity_below_enrollment(
        self, client, basic_course, student_user, other_student, enroll, instructor_headers
    ):
        enroll(student_user, basic_course)
        enroll(other_student, basic_course)

        response = client.put(
            f"/api/courses/{basic_course.id}",
            json={"max_students": 1},
            headers=instructor_headers,
        )

        assert response.status_code == 400

    def test_replace_module_tree(self, client, basic_course, instructor_headers):
        response = client.put(
            f"/api/courses/{basic_course.id}",
            json={"modules": [{"title": "Rewritten"}]},
            headers=instructor_headers,
        )

        assert response.status_code == 200
        modules = response.json()["data"]["modules"]
        assert [m["title"] for m in modules] == ["Rewritten"]


    def test_price_dropped_to_zero_unlocks_pending_students(
        self, client, db, basic_course, pending_enrollment, auth_headers, instructor_headers
    ):
        response = client.put(
            f"/api/courses/{basic_course.id}",
            json={"price": 0},
            headers=instructor_headers,
        )
        assert response.status_code == 200

        response = client.get(f"/api/courses/{basic_course.id}", headers=auth_headers)

        assert response.status_code == 200
        db.refresh(pending_enrollment)
        assert pending_enrollment.status == EnrollmentStatus.paid

    def test_non_finite_price_is_rejected(self, client, db, basic_course, instructor_headers):
        response = client.put(
            f"/api/courses/{basic_course.id}",
            content='{"price": NaN}',
            headers={**instructor_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        db.refresh(basic_course)
        assert basic_course.price == 50.0


class TestDeleteCourse:

    def test_owner_deletes_course(self, client, db, basic_course, instructor_headers):
        response = client.delete(f"/api/courses/{basic_course.id}", headers=instructor_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Course deleted successfully"
        assert db.query(Course).count() == 0

    def test_student_cannot_delete(self, client, db, basic_course, paid_enrollment, auth_headers):
        response = client.delete(f"/api/courses/{basic_course.id}", headers=auth_headers)

        assert response.status_code == 403
        assert db.query(Course).count() == 1

    def test_delete_unknown(self, client, instructor_headers):
        response = client.delete(f"/api/courses/{uuid4()}", headers=instructor_headers)

        assert response.status_code == 404
