from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine

from api import achievement_crud
from api.database import metadata


@pytest.fixture
def conn():
    # In-memory sqlite lives as long as this one connection
    engine = create_engine("sqlite://")
    with engine.connect() as connection:
        metadata.create_all(connection)
        connection.commit()
        yield connection


def test_create_and_get_achievement(conn):
    row = achievement_crud.create_achievement(conn, "u1", "pushup")

    assert row.user_id == "u1"
    assert row.skill_id == "pushup"
    assert row.achieved_at is not None
    assert achievement_crud.get_achievement(conn, "u1", "pushup") is not None
    assert achievement_crud.get_achievement(conn, "u2", "pushup") is None


def test_list_achievements_newest_first(conn):
    achievement_crud.create_achievement(conn, "u1", "a", datetime(2024, 1, 1, tzinfo=timezone.utc))
    achievement_crud.create_achievement(conn, "u1", "b", datetime(2024, 3, 1, tzinfo=timezone.utc))
    achievement_crud.create_achievement(conn, "u2", "a", datetime(2024, 2, 1, tzinfo=timezone.utc))

    assert [r.skill_id for r in achievement_crud.list_achievements(conn, user_id="u1")] == ["b", "a"]
    assert [r.user_id for r in achievement_crud.list_achievements(conn, skill_id="a")] == ["u2", "u1"]
    assert len(achievement_crud.list_achievements(conn)) == 3


def test_counts(conn):
    achievement_crud.create_achievement(conn, "u1", "a")
    achievement_crud.create_achievement(conn, "u2", "a")
    achievement_crud.create_achievement(conn, "u1", "b")

    assert achievement_crud.count_achievements_for_skill(conn, "a") == 2
    assert achievement_crud.count_achievements_for_skill(conn, "zzz") == 0
    assert achievement_crud.count_achievements_by_skill(conn) == {"a": 2, "b": 1}


def test_delete_achievement(conn):
    achievement_crud.create_achievement(conn, "u1", "a")

    assert achievement_crud.delete_achievement(conn, "u1", "a") is True
    assert achievement_crud.delete_achievement(conn, "u1", "a") is False


def test_delete_all_achievements(conn):
    achievement_crud.create_achievement(conn, "u1", "a")
    achievement_crud.create_achievement(conn, "u2", "b")

    assert achievement_crud.delete_all_achievements(conn) == 2
    assert achievement_crud.list_achievements(conn) == []
