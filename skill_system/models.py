from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, Field, field_validator


class SkillType(str, Enum):
    REGULAR = "Regular"
    MILESTONE = "Milestone"
    VARIATION = "Variation"


class Category(str, Enum):
    PUSH = "Push"
    PULL = "Pull"
    LEGS = "Legs"


class UserRole(str, Enum):
    ADMIN = "Admin"
    MEMBER = "Member"


class ExperienceLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10

# Optional skill fields a partial update may set back to null
CLEARABLE_FIELDS = frozenset({"description"})


class Skill(BaseModel):
    """A single skill record as it is stored and transmitted."""

    id: str
    name: str
    difficulty: int
    type: SkillType = SkillType.REGULAR
    category: Category
    description: Optional[str] = None

    # --- Relationship Attributes ---
    # What skills are needed BEFORE this one?
    previous_skills: List[str] = Field(default_factory=list)
    # What skills does this one UNLOCK? (inverse of previous_skills)
    next_skills: List[str] = Field(default_factory=list)
    # Sibling alternatives, not part of the prerequisite graph
    variations: List[str] = Field(default_factory=list)

    @field_validator("previous_skills", "next_skills", "variations", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        # Stores hand back null for lists that were never set
        return [] if value is None else value


class SkillDraft(BaseModel):
    """Validated input for a new skill."""

    name: str = Field(min_length=1)
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    type: SkillType = SkillType.REGULAR
    category: Category
    description: Optional[str] = None
    previous_skills: List[str] = Field(default_factory=list)
    next_skills: List[str] = Field(default_factory=list)
    variations: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class SkillChanges(BaseModel):
    """Validated partial update. Fields left as None are not touched."""

    name: Optional[str] = Field(default=None, min_length=1)
    difficulty: Optional[int] = Field(default=None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    type: Optional[SkillType] = None
    category: Optional[Category] = None
    description: Optional[str] = None
    previous_skills: Optional[List[str]] = None
    next_skills: Optional[List[str]] = None
    variations: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    def scalar_fields(self) -> dict:
        """Fields that can be written straight to the record.

        Only fields that were sent count. An explicit null clears the
        description and is ignored for everything else.
        """
        data = self.model_dump(
            mode="json",
            include=self.model_fields_set,
            exclude={"previous_skills", "next_skills"},
        )
        return {
            field: value
            for field, value in data.items()
            if value is not None or field in CLEARABLE_FIELDS
        }

    @property
    def touches_relationships(self) -> bool:
        return self.previous_skills is not None or self.next_skills is not None


class Achievement(BaseModel):
    user_id: str
    skill_id: str
    achieved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserProfile(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    push_score: int = 0
    pull_score: int = 0
    legs_score: int = 0
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    role: UserRole = UserRole.MEMBER


class SkillGraph:
    """An in-memory view over a skill collection for traversal queries.

    Edges point from a prerequisite to the skill it unlocks. Both edge lists
    of every record contribute, so an edge recorded on only one side is still
    seen here.
    """

    def __init__(self, skills: Iterable[Skill] = ()):
        self.skills: Dict[str, Skill] = {}  # Maps skill_id -> Skill
        self.requires: Dict[str, Set[str]] = {}
        self.unlocks: Dict[str, Set[str]] = {}
        for skill in skills:
            self.add_skill(skill)
        for skill in self.skills.values():
            for prereq_id in skill.previous_skills:
                self.add_dependency(prereq_id, skill.id)
            for next_id in skill.next_skills:
                self.add_dependency(skill.id, next_id)

    def add_skill(self, skill: Skill):
        """Adds a Skill to the graph."""
        if skill.id not in self.skills:
            self.skills[skill.id] = skill
            self.requires.setdefault(skill.id, set())
            self.unlocks.setdefault(skill.id, set())

    def add_dependency(self, source_skill_id: str, target_skill_id: str):
        """Records that source must be learned before target."""
        self.requires.setdefault(target_skill_id, set()).add(source_skill_id)
        self.unlocks.setdefault(source_skill_id, set()).add(target_skill_id)

    def remove_dependency(self, source_skill_id: str, target_skill_id: str):
        self.requires.get(target_skill_id, set()).discard(source_skill_id)
        self.unlocks.get(source_skill_id, set()).discard(target_skill_id)

    def replace_dependencies(
        self, skill_id: str, previous_skills: Iterable[str], next_skills: Iterable[str]
    ):
        """Drops every edge touching skill_id and wires in the given ones."""
        for prereq_id in list(self.requires.get(skill_id, ())):
            self.remove_dependency(prereq_id, skill_id)
        for next_id in list(self.unlocks.get(skill_id, ())):
            self.remove_dependency(skill_id, next_id)
        for prereq_id in previous_skills:
            self.add_dependency(prereq_id, skill_id)
        for next_id in next_skills:
            self.add_dependency(skill_id, next_id)

    def get_prerequisites(self, skill_id: str) -> List[str]:
        """All direct and indirect prerequisites of a skill, nearest first."""
        return self._traverse(self.requires, skill_id)

    def get_skills_unlocked_by(self, skill_id: str) -> List[str]:
        """All skills that a given skill is a direct or indirect prerequisite for."""
        return self._traverse(self.unlocks, skill_id)

    def get_learning_path(self, start_skill_id: str, target_skill_id: str) -> List[str]:
        """Shortest chain of unlocks from start to target, both included.

        Returns an empty list when target cannot be reached from start.
        """
        if start_skill_id == target_skill_id:
            return [start_skill_id]
        came_from = {start_skill_id: None}
        q = deque([start_skill_id])
        while q:
            curr = q.popleft()
            for next_id in sorted(self.unlocks.get(curr, ())):
                if next_id in came_from:
                    continue
                came_from[next_id] = curr
                if next_id == target_skill_id:
                    path = [next_id]
                    while came_from[path[-1]] is not None:
                        path.append(came_from[path[-1]])
                    return list(reversed(path))
                q.append(next_id)
        return []

    def find_cycle_through(self, skill_id: str) -> List[str]:
        """Returns a cycle that starts and ends at skill_id, or [] if none."""
        for next_id in sorted(self.unlocks.get(skill_id, ())):
            path = self.get_learning_path(next_id, skill_id)
            if path:
                return [skill_id] + path
        return []

    def asymmetric_edges(self) -> List[Tuple[str, str]]:
        """Edges (prereq, skill) recorded on one side only.

        Only pairs where both records are present in the graph are reported.
        """
        broken = set()
        for skill in self.skills.values():
            for next_id in skill.next_skills:
                other = self.skills.get(next_id)
                if other is not None and skill.id not in other.previous_skills:
                    broken.add((skill.id, next_id))
            for prereq_id in skill.previous_skills:
                other = self.skills.get(prereq_id)
                if other is not None and skill.id not in other.next_skills:
                    broken.add((prereq_id, skill.id))
        return sorted(broken)

    @staticmethod
    def _traverse(adj: Dict[str, Set[str]], start: str) -> List[str]:
        visited = {start}
        q = deque([start])
        res = []
        while q:
            curr = q.popleft()
            for neighbor in sorted(adj.get(curr, ())):
                if neighbor not in visited:
                    visited.add(neighbor)
                    res.append(neighbor)
                    q.append(neighbor)
        return res
