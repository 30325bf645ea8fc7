# api/schemas.py

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from skill_system.models import (
    Achievement,
    Category,
    ExperienceLevel,
    Skill,
    SkillChanges,
    SkillDraft,
    UserProfile,
    UserRole,
)
from skill_system.progress import CategoryProgress

# Skill-side request bodies are the core's own validated models
SkillCreate = SkillDraft
SkillUpdate = SkillChanges


# --- Users ---


class UserBase(BaseModel):
    email: str
    name: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(min_length=8)


class User(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    is_active: bool = True
    role: UserRole = UserRole.MEMBER
    push_score: int = 0
    pull_score: int = 0
    legs_score: int = 0
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER


class UserScoresUpdate(BaseModel):
    push_score: Optional[int] = Field(default=None, ge=0)
    pull_score: Optional[int] = Field(default=None, ge=0)
    legs_score: Optional[int] = Field(default=None, ge=0)
    experience_level: Optional[ExperienceLevel] = None


class Token(BaseModel):
    access_token: str
    token_type: str


# --- Skills ---


class RelationshipUpdate(BaseModel):
    previous_skills: List[str] = Field(default_factory=list)
    next_skills: List[str] = Field(default_factory=list)


class ActionResult(BaseModel):
    """Outcome of an admin or achievement action.

    ``partial`` is True only when some records were written before the
    failure, e.g. the skill itself but not all of its neighbors.
    """

    success: bool
    message: str = ""
    error: Optional[str] = None
    error_code: Optional[str] = None
    partial: bool = False
    data: Optional[Any] = None


class CategoryTotals(BaseModel):
    push: int = 0
    pull: int = 0
    legs: int = 0


class HierarchyResponse(BaseModel):
    roots: List[Dict[str, Any]]


class ProgressResponse(BaseModel):
    user: UserProfile
    categories: Dict[Category, CategoryProgress]
    achieved_skill_ids: List[str]
    hierarchy: List[Dict[str, Any]]

