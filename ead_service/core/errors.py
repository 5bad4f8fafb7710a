"""Domain error taxonomy.

Services raise these; the HTTP layer (ead_service.api.errors) maps each
``code`` to a status.  Every error carries a stable machine-readable
``code`` plus structured ``details()`` so clients can act on it, e.g.
render "4 of 5 lessons done" from IncompleteProgress.
"""

from __future__ import annotations


class EadError(Exception):
    code = "error"
    message = "request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    def details(self) -> dict[str, object]:
        return {}


# --- Identity / authorization ---


class Unauthenticated(EadError):
    code = "unauthenticated"
    message = "missing, invalid or expired credential"


class ProfileMissing(EadError):
    """The identity provider accepted the token but no local account exists."""

    code = "profile_missing"
    message = "profile not found"


# --- Enrollment ledger ---


class InvalidCourse(EadError):
    code = "invalid_course"
    message = "course does not exist"

    def __init__(self, course_id: object) -> None:
        super().__init__(f"course {course_id} does not exist")
        self.course_id = course_id

    def details(self) -> dict[str, object]:
        return {"course_id": str(self.course_id)}


class InvalidTarget(EadError):
    code = "invalid_target"
    message = "a valid user_id or email is required"


class InvalidDuration(EadError):
    code = "invalid_duration"

    def __init__(self, days_valid: int, limit: int) -> None:
        super().__init__(f"days_valid must be at most {limit} (got {days_valid})")
        self.days_valid = days_valid
        self.limit = limit

    def details(self) -> dict[str, object]:
        return {"days_valid": self.days_valid, "max_days_valid": self.limit}


class EnrollmentNotFound(EadError):
    code = "enrollment_not_found"
    message = "enrollment not found"


class LessonNotFound(EadError):
    code = "lesson_not_found"
    message = "lesson not found"


class AccessExpired(EadError):
    """No effectively active enrollment for the course.

    reason is one of not_enrolled, revoked, expired.
    """

    code = "access_expired"

    def __init__(self, reason: str) -> None:
        super().__init__(f"course access unavailable: {reason}")
        self.reason = reason

    def details(self) -> dict[str, object]:
        return {"reason": self.reason}


# --- Certificates ---


class IncompleteProgress(EadError):
    code = "incomplete_progress"

    def __init__(self, completed: int, total: int) -> None:
        super().__init__(f"Progress incomplete: {completed}/{total}")
        self.completed = completed
        self.total = total

    def details(self) -> dict[str, object]:
        return {"completed": self.completed, "total": self.total}


class CodeGenerationFailed(EadError):
    code = "code_generation_failed"
    message = "could not allocate a unique validation code"


class NotFound(EadError):
    code = "not_found"
    message = "certificate not found"


# --- Storage ---


class StoreUnavailable(EadError):
    code = "store_unavailable"
    message = "storage backend unavailable"


class DuplicateKeyError(Exception):
    """A unique key was already taken at the storage layer.

    Not an EadError: repos raise it and services decide what a duplicate
    means (already issued, code collision, concurrent provisioning).
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"duplicate value for unique key {key!r}")
        self.key = key
