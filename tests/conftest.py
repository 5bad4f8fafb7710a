from __future__ import annotations

import asyncio
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from ead_service.api.dependencies import get_store
from ead_service.api.ratelimit import rate_limiter
from ead_service.main import app
from ead_service.models.account import Account, Role
from ead_service.models.course import Course, Lesson, Module
from ead_service.repos.store import Store, in_memory_store
from ead_service.services import token_service
from ead_service.services.task_queue import task_queue

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def store() -> Iterator[Store]:
    """Fresh in-memory store, injected into the app for this test."""
    s = in_memory_store()
    app.dependency_overrides[get_store] = lambda: s
    yield s
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(rate_limiter, "_buckets"):
        rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture
def client(store: Store) -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def mint_token(account_id: UUID | str, email_verified: bool = True) -> str:
    """Create a valid ES256 access token for testing."""
    return token_service.create_access_token(sub=str(account_id), email_verified=email_verified)


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


def add_account(
    store: Store,
    email: str = "student@example.com",
    role: Role = Role.STUDENT,
    full_name: str = "Ana Souza",
) -> Account:
    account = Account.new(email=email, role=role, full_name=full_name, now=T0)
    asyncio.run(store.accounts.add(account))
    return account


def add_course(
    store: Store, title: str = "Python Basics", lessons: int = 5, modules: int = 1
) -> tuple[Course, list[Lesson]]:
    """Create a course with ``lessons`` lessons spread over ``modules`` modules."""

    async def _seed() -> tuple[Course, list[Lesson]]:
        course = Course.new(title=title)
        await store.courses.add(course)
        created: list[Lesson] = []
        mods = [Module.new(course_id=course.id, title=f"M{i}", position=i) for i in range(modules)]
        for m in mods:
            await store.courses.add_module(m)
        for i in range(lessons):
            lesson = Lesson.new(
                module_id=mods[i % modules].id, title=f"L{i}", position=i, duration_seconds=60
            )
            await store.courses.add_lesson(lesson)
            created.append(lesson)
        return course, created

    return asyncio.run(_seed())


def admin_headers(store: Store) -> tuple[Account, dict[str, str]]:
    admin = add_account(store, email="admin@example.com", role=Role.ADMIN, full_name="Admin")
    return admin, auth(mint_token(admin.id))
