# coursemarket/models/__init__.py
# Imports every mapped class so relationship strings resolve

from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.categories.models import Category
from coursemarket.modules.courses.models import Course, Lesson, MediaAsset, Module, Quiz
from coursemarket.modules.enrollments.models import Enrollment, EnrollmentStatus
from coursemarket.modules.payments.models import PaymentStatus, Purchase

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Course",
    "Module",
    "Lesson",
    "Quiz",
    "MediaAsset",
    "Enrollment",
    "EnrollmentStatus",
    "Purchase",
    "PaymentStatus",
]
