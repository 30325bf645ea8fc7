# api/achievement_crud.py

from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Connection

from . import database

# We use the SQLAlchemy table object defined in database.py


def get_achievement(conn: Connection, user_id: str, skill_id: str):
    table = database.user_skills
    query = select(table).where(
        table.c.user_id == user_id, table.c.skill_id == skill_id
    )
    return conn.execute(query).first()


def list_achievements(
    conn: Connection, user_id: Optional[str] = None, skill_id: Optional[str] = None
) -> List:
    """Achievements matching the filters, newest first."""
    table = database.user_skills
    query = select(table).order_by(table.c.achieved_at.desc())
    if user_id is not None:
        query = query.where(table.c.user_id == user_id)
    if skill_id is not None:
        query = query.where(table.c.skill_id == skill_id)
    return list(conn.execute(query))


def count_achievements_for_skill(conn: Connection, skill_id: str) -> int:
    table = database.user_skills
    query = select(func.count()).select_from(table).where(table.c.skill_id == skill_id)
    return conn.execute(query).scalar_one()


def count_achievements_by_skill(conn: Connection) -> Dict[str, int]:
    table = database.user_skills
    query = select(table.c.skill_id, func.count()).group_by(table.c.skill_id)
    return {skill_id: count for skill_id, count in conn.execute(query)}


def create_achievement(
    conn: Connection, user_id: str, skill_id: str, achieved_at: Optional[datetime] = None
):
    values = {
        "user_id": user_id,
        "skill_id": skill_id,
        "achieved_at": achieved_at or datetime.now(timezone.utc),
    }
    conn.execute(insert(database.user_skills).values(values))
    conn.commit()
    return get_achievement(conn, user_id, skill_id)


def delete_achievement(conn: Connection, user_id: str, skill_id: str) -> bool:
    table = database.user_skills
    stmt = delete(table).where(table.c.user_id == user_id, table.c.skill_id == skill_id)
    result = conn.execute(stmt)
    conn.commit()
    return result.rowcount > 0


def delete_all_achievements(conn: Connection) -> int:
    result = conn.execute(delete(database.user_skills))
    conn.commit()
    return result.rowcount
