"""Tests for enrolling in courses."""

from uuid import uuid4

from coursemarket.modules.enrollments.models import Enrollment, EnrollmentStatus
from coursemarket.modules.payments.models import PaymentStatus, Purchase


class TestEnroll:

    def test_enroll_in_paid_course_is_pending(self, client, basic_course, student_user, auth_headers):
        response = client.post(f"/api/courses/{basic_course.id}/enroll", headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Student enrolled successfully"
        assert body["data"]["status"] == "pending"
        assert body["data"]["user_id"] == str(student_user.id)

    def test_enroll_in_free_course_is_paid(self, client, free_course, auth_headers):
        response = client.post(f"/api/courses/{free_course.id}/enroll", headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "paid"

    def test_enroll_after_successful_purchase_is_paid(
        self, client, db, basic_course, student_user, auth_headers
    ):
        db.add(
            Purchase(
                user_id=student_user.id,
                course_id=basic_course.id,
                reference="ref-paid",
                amount=5000,
                payment_status=PaymentStatus.success,
            )
        )
        db.commit()

        response = client.post(f"/api/courses/{basic_course.id}/enroll", headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "paid"

    def test_duplicate_enrollment_conflicts(self, client, basic_course, pending_enrollment, auth_headers):
        response = client.post(f"/api/courses/{basic_course.id}/enroll", headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["message"] == "You are already enrolled in this course"

    def test_duplicate_reported_before_capacity(
        self, client, db, free_course, student_user, other_student, auth_headers, enroll
    ):
        enroll(student_user, free_course)
        enroll(other_student, free_course)

        response = client.post(f"/api/courses/{free_course.id}/enroll", headers=auth_headers)

        assert response.status_code == 409

    def test_capacity_is_never_exceeded(self, client, db, free_course, user_factory, headers_for):
        statuses = []
        for i in range(free_course.max_students + 2):
            user = user_factory(f"learner{i}@test.com")
            response = client.post(
                f"/api/courses/{free_course.id}/enroll",
                headers=headers_for(user),
            )
            statuses.append(response.status_code)

        assert statuses == [201, 201, 400, 400]
        assert db.query(Enrollment).filter(Enrollment.course_id == free_course.id).count() == 2

    def test_full_course_message(self, client, free_course, user_factory, enroll, auth_headers):
        enroll(user_factory("a@test.com"), free_course)
        enroll(user_factory("b@test.com"), free_course)

        response = client.post(f"/api/courses/{free_course.id}/enroll", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Course is already full"

    def test_unknown_course(self, client, auth_headers):
        response = client.post(f"/api/courses/{uuid4()}/enroll", headers=auth_headers)

        assert response.status_code == 404

    def test_requires_token(self, client, basic_course):
        response = client.post(f"/api/courses/{basic_course.id}/enroll")

        assert response.status_code == 401


class TestMyEnrollments:

    def test_lists_own_enrollments_only(
        self, client, basic_course, free_course, student_user, other_student, enroll, auth_headers
    ):
        enroll(student_user, basic_course)
        enroll(other_student, free_course, EnrollmentStatus.paid)

        response = client.get("/api/courses/enrollments/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [e["course_id"] for e in data] == [str(basic_course.id)]
