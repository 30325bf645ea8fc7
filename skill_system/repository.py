"""
Storage interface the skill core talks to.

Implementations only promise that a single call is atomic. Nothing here spans
several records, which is why the relationship engine has to cope with partial
failures on its own.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .models import Achievement, Category, Skill


class SkillRepository(ABC):

    # --- Skills ---

    @abstractmethod
    def get_skill(self, skill_id: str) -> Optional[Skill]:
        """Returns the skill, or None when it does not exist."""

    @abstractmethod
    def list_skills(self, category: Optional[Category] = None) -> List[Skill]:
        """All skills ordered by difficulty, optionally limited to one category."""

    @abstractmethod
    def insert_skill(self, fields: dict) -> Skill:
        """Creates a skill from wire-shaped fields and assigns it an id."""

    @abstractmethod
    def update_skill(self, skill_id: str, fields: dict) -> Optional[Skill]:
        """Overwrites the given fields. Returns None when the skill is gone."""

    @abstractmethod
    def delete_skill(self, skill_id: str) -> bool:
        pass

    @abstractmethod
    def delete_all_skills(self) -> int:
        pass

    # --- Achievements ---

    @abstractmethod
    def get_achievement(self, user_id: str, skill_id: str) -> Optional[Achievement]:
        pass

    @abstractmethod
    def list_achievements(
        self, user_id: Optional[str] = None, skill_id: Optional[str] = None
    ) -> List[Achievement]:
        """Achievements matching the filters, newest first."""

    @abstractmethod
    def count_achievements(self, skill_id: str) -> int:
        pass

    @abstractmethod
    def achievement_counts(self) -> Dict[str, int]:
        """Maps skill_id -> number of users who achieved it."""

    @abstractmethod
    def insert_achievement(
        self, user_id: str, skill_id: str, achieved_at: Optional[datetime] = None
    ) -> Achievement:
        pass

    @abstractmethod
    def delete_achievement(self, user_id: str, skill_id: str) -> bool:
        pass

    @abstractmethod
    def delete_all_achievements(self) -> int:
        pass


class InMemorySkillRepository(SkillRepository):
    """Dictionary-backed repository. Records are copied in and out."""

    def __init__(self, skills=(), achievements=()):
        self.skills: Dict[str, Skill] = {}
        self.achievements: Dict[tuple, Achievement] = {}
        for skill in skills:
            self.skills[skill.id] = skill.model_copy(deep=True)
        for achievement in achievements:
            self.achievements[(achievement.user_id, achievement.skill_id)] = achievement

    def get_skill(self, skill_id):
        skill = self.skills.get(skill_id)
        return skill.model_copy(deep=True) if skill else None

    def list_skills(self, category=None):
        skills = [
            s.model_copy(deep=True)
            for s in self.skills.values()
            if category is None or s.category == category
        ]
        # sorted() is stable, so equal difficulties keep insertion order
        return sorted(skills, key=lambda s: s.difficulty)

    def insert_skill(self, fields):
        data = dict(fields)
        data.setdefault("id", str(uuid.uuid4()))
        skill = Skill.model_validate(data)
        self.skills[skill.id] = skill
        return skill.model_copy(deep=True)

    def update_skill(self, skill_id, fields):
        current = self.skills.get(skill_id)
        if current is None:
            return None
        data = current.model_dump()
        data.update(fields)
        updated = Skill.model_validate(data)
        self.skills[skill_id] = updated
        return updated.model_copy(deep=True)

    def delete_skill(self, skill_id):
        return self.skills.pop(skill_id, None) is not None

    def delete_all_skills(self):
        count = len(self.skills)
        self.skills.clear()
        return count

    def get_achievement(self, user_id, skill_id):
        return self.achievements.get((user_id, skill_id))

    def list_achievements(self, user_id=None, skill_id=None):
        matches = [
            a
            for a in self.achievements.values()
            if (user_id is None or a.user_id == user_id)
            and (skill_id is None or a.skill_id == skill_id)
        ]
        return sorted(matches, key=lambda a: a.achieved_at, reverse=True)

    def count_achievements(self, skill_id):
        return len(self.list_achievements(skill_id=skill_id))

    def achievement_counts(self):
        counts: Dict[str, int] = {}
        for _, skill_id in self.achievements:
            counts[skill_id] = counts.get(skill_id, 0) + 1
        return counts

    def insert_achievement(self, user_id, skill_id, achieved_at=None):
        achievement = Achievement(
            user_id=user_id,
            skill_id=skill_id,
            achieved_at=achieved_at or datetime.now(timezone.utc),
        )
        self.achievements[(user_id, skill_id)] = achievement
        return achievement

    def delete_achievement(self, user_id, skill_id):
        return self.achievements.pop((user_id, skill_id), None) is not None

    def delete_all_achievements(self):
        count = len(self.achievements)
        self.achievements.clear()
        return count
