from __future__ import annotations

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import fluency_api` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fluency_api.api.dependencies import memory_uow  # noqa: E402
from fluency_api.api.ratelimit import _rate_limiter  # noqa: E402
from fluency_api.main import app  # noqa: E402
from fluency_api.models.course import STATUS_APPROVED, Course  # noqa: E402
from fluency_api.models.user import User  # noqa: E402
from fluency_api.services import token_service  # noqa: E402


@pytest.fixture(autouse=True)
def reset_store() -> None:
    """Fresh in-memory store (and lock) for every test."""
    memory_uow.reset()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(_rate_limiter, "_buckets"):
        _rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(email: str = "student@example.com") -> str:
    """Create a valid HS256 token for testing."""
    return token_service.create_access_token(email=email)


def auth(email: str | None) -> dict[str, str]:
    """Bearer header for ``email``, or no header at all for None."""
    if email is None:
        return {}
    return {"Authorization": f"Bearer {mint_token(email)}"}


# ---------------------------------------------------------------------------
# Store seeding helpers (write straight to the in-memory repos)
# ---------------------------------------------------------------------------


def seed_user(email: str, role: str | None = None) -> User:
    user = User.new(email=email)
    asyncio.run(memory_uow.users.add(user))
    if role is not None:
        user = asyncio.run(memory_uow.users.set_role(user.id, role))
    return user


def seed_course(
    *,
    name: str = "Conversational Spanish",
    instructor_email: str = "tutor@example.com",
    seats: int = 5,
    price: str = "49.99",
    status: str = STATUS_APPROVED,
) -> Course:
    course = Course.new(
        name=name,
        instructor_email=instructor_email,
        instructor_name="Tutor",
        available_seats=seats,
        price=Decimal(price),
    )
    asyncio.run(memory_uow.courses.add(course))
    if status != course.status:
        course = asyncio.run(memory_uow.courses.update(course.id, status=status))
    return course


@pytest.fixture
def admin_email() -> str:
    seed_user("admin@example.com", role="admin")
    return "admin@example.com"


@pytest.fixture
def instructor_email() -> str:
    seed_user("tutor@example.com", role="instructor")
    return "tutor@example.com"
