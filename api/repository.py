# api/repository.py

from fastapi import Depends
from neo4j import Driver
from sqlalchemy.engine import Connection

from skill_system.models import Achievement, Skill
from skill_system.repository import SkillRepository

from . import achievement_crud, graph_crud
from .database import get_db, get_graph_db_driver


def _to_achievement(row) -> Achievement:
    return Achievement(user_id=row.user_id, skill_id=row.skill_id, achieved_at=row.achieved_at)


class GraphSkillRepository(SkillRepository):
    """
    Skills in Neo4j, achievements in the SQL database.

    Every method runs in its own Neo4j session/transaction (or SQL commit), so
    each call is atomic on its own and nothing spans several calls.
    """

    def __init__(self, driver: Driver, conn: Connection):
        self.driver = driver
        self.conn = conn

    # --- Skills ---

    def get_skill(self, skill_id):
        with self.driver.session() as session:
            data = session.execute_read(graph_crud.get_skill_by_id, skill_id)
        return Skill.model_validate(data) if data else None

    def list_skills(self, category=None):
        category_value = category.value if category is not None else None
        with self.driver.session() as session:
            rows = session.execute_read(graph_crud.get_all_skills, category_value)
        return [Skill.model_validate(row) for row in rows]

    def insert_skill(self, fields):
        with self.driver.session() as session:
            data = session.execute_write(graph_crud.create_skill, fields)
        return Skill.model_validate(data)

    def update_skill(self, skill_id, fields):
        with self.driver.session() as session:
            data = session.execute_write(graph_crud.update_skill, skill_id, fields)
        return Skill.model_validate(data) if data else None

    def delete_skill(self, skill_id):
        with self.driver.session() as session:
            return session.execute_write(graph_crud.delete_skill, skill_id)

    def delete_all_skills(self):
        with self.driver.session() as session:
            return session.execute_write(graph_crud.delete_all_skills)

    # --- Achievements ---

    def get_achievement(self, user_id, skill_id):
        row = achievement_crud.get_achievement(self.conn, user_id, skill_id)
        return _to_achievement(row) if row else None

    def list_achievements(self, user_id=None, skill_id=None):
        rows = achievement_crud.list_achievements(self.conn, user_id=user_id, skill_id=skill_id)
        return [_to_achievement(row) for row in rows]

    def count_achievements(self, skill_id):
        return achievement_crud.count_achievements_for_skill(self.conn, skill_id)

    def achievement_counts(self):
        return achievement_crud.count_achievements_by_skill(self.conn)

    def insert_achievement(self, user_id, skill_id, achieved_at=None):
        row = achievement_crud.create_achievement(self.conn, user_id, skill_id, achieved_at)
        return _to_achievement(row)

    def delete_achievement(self, user_id, skill_id):
        return achievement_crud.delete_achievement(self.conn, user_id, skill_id)

    def delete_all_achievements(self):
        return achievement_crud.delete_all_achievements(self.conn)


def get_skill_repository(
    conn: Connection = Depends(get_db), driver: Driver = Depends(get_graph_db_driver)
) -> SkillRepository:
    """FastAPI dependency that wires both stores into one repository."""
    return GraphSkillRepository(driver, conn)
