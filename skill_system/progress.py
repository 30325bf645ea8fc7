"""
Progress overlay: how much of each category a user has achieved.

This is presentation only. Achieving a skill does not mark its prerequisites,
and nothing here checks that prerequisites were achieved first.
"""

from typing import AbstractSet, Dict, FrozenSet, Iterable, List, Sequence

from pydantic import BaseModel, computed_field

from .models import Achievement, Category, Skill
from .repository import SkillRepository


class CategoryProgress(BaseModel):
    achieved: int = 0
    total: int = 0

    @computed_field
    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.achieved / self.total


class ProgressOverlay:
    def __init__(self, per_category: Dict[Category, CategoryProgress], achieved_ids: FrozenSet[str]):
        self.per_category = per_category
        self.achieved_ids = achieved_ids

    def is_achieved(self, skill_id: str) -> bool:
        return skill_id in self.achieved_ids

    def to_dict(self) -> dict:
        return {
            category.value: progress.model_dump()
            for category, progress in self.per_category.items()
        }


def overlay(skills: Sequence[Skill], achieved_ids: AbstractSet[str]) -> ProgressOverlay:
    per_category = {category: CategoryProgress() for category in Category}
    for skill in skills:
        progress = per_category[skill.category]
        progress.total += 1
        if skill.id in achieved_ids:
            progress.achieved += 1
    return ProgressOverlay(per_category, frozenset(achieved_ids))


def category_difficulty_totals(skills: Iterable[Skill]) -> Dict[Category, int]:
    """Sum of difficulty per category; empty categories report 0."""
    totals = {category: 0 for category in Category}
    for skill in skills:
        totals[skill.category] += skill.difficulty
    return totals


class SkillTreeProgress(BaseModel):
    skills: List[Skill]
    achievements: List[Achievement]

    @property
    def achieved_ids(self) -> FrozenSet[str]:
        return frozenset(a.skill_id for a in self.achievements)

    def overlay(self) -> ProgressOverlay:
        return overlay(self.skills, self.achieved_ids)


def load_skill_tree_with_progress(repo: SkillRepository, user_id: str) -> SkillTreeProgress:
    """Reads the skill list and the user's achievements in one go."""
    return SkillTreeProgress(
        skills=repo.list_skills(),
        achievements=repo.list_achievements(user_id=user_id),
    )
