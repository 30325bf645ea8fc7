# conftest.py

import os
import pytest

from skill_system.models import Category, Skill, SkillType, UserRole
from skill_system.repository import InMemorySkillRepository
from skill_system.session import SessionContext

# --- Environment Configuration ---

def pytest_configure(config):
    """
    Forcefully sets the correct environment variables for the entire test session.
    This overrides any variables from the CI runner, ensuring consistency.
    """
    os.environ["DATABASE_URL"] = "sqlite://"
    os.environ["NEO4J_URI"] = "neo4j://localhost:7687"
    os.environ["NEO4J_USERNAME"] = "neo4j"
    os.environ["NEO4J_PASSWORD"] = "testpassword"
    os.environ["SECRET_KEY"] = "testsecretkey"
    os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"


# --- Fixtures ---

def make_skill(skill_id, name=None, difficulty=1, category=Category.PUSH, **kwargs):
    """Builds a Skill with sensible defaults for tests."""
    return Skill(
        id=skill_id,
        name=name or f"Skill {skill_id}",
        difficulty=difficulty,
        type=kwargs.pop("type", SkillType.REGULAR),
        category=category,
        **kwargs,
    )


@pytest.fixture
def scenario_repo():
    """
    A(1) with no edges, B(2) previous=[1] and C(3) with no edges.
    B's link to A is only recorded on B, as in the end-to-end scenario.
    """
    return InMemorySkillRepository(
        skills=[
            make_skill("1", "Incline Push-up", difficulty=1),
            make_skill("2", "Push-up", difficulty=2, previous_skills=["1"]),
            make_skill("3", "Diamond Push-up", difficulty=3),
        ]
    )


@pytest.fixture
def admin_context():
    return SessionContext(user_id="admin-1", role=UserRole.ADMIN)


@pytest.fixture
def member_context():
    return SessionContext(user_id="member-1", role=UserRole.MEMBER)
