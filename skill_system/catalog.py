"""
Skill create/update/delete on top of the relationship engine.

Edge lists are never written directly from here; they always go through
``sync_relationships`` so neighbors get their back-links.
"""

import logging
import uuid
from typing import List, Optional

from pydantic import BaseModel

from .errors import NotFoundError, ReferentialIntegrityError
from .models import Category, Skill, SkillChanges, SkillDraft
from .relationships import ensure_acyclic, sync_relationships, validate_relationship_change
from .repository import SkillRepository

logger = logging.getLogger(__name__)


class SkillRelationships(BaseModel):
    parents: List[Skill]
    children: List[Skill]
    variations: List[Skill]


class SkillWithStats(Skill):
    user_count: int = 0


def _require_skill(repo: SkillRepository, skill_id: str) -> Skill:
    skill = repo.get_skill(skill_id)
    if skill is None:
        raise NotFoundError(skill_id)
    return skill


def create_skill(repo: SkillRepository, draft: SkillDraft) -> Skill:
    # The id is chosen up front so the new edges can be checked before the insert
    skill_id = str(uuid.uuid4())
    for related_id in draft.previous_skills + draft.next_skills:
        if repo.get_skill(related_id) is None:
            raise NotFoundError(related_id, f"Related skill '{related_id}' not found.")
    if draft.previous_skills or draft.next_skills:
        ensure_acyclic(repo, skill_id, draft.previous_skills, draft.next_skills)

    fields = draft.model_dump(mode="json")
    fields["id"] = skill_id
    fields["previous_skills"] = []
    fields["next_skills"] = []
    skill = repo.insert_skill(fields)
    logger.info("Created skill %s (%s)", skill.id, skill.name)

    if draft.previous_skills or draft.next_skills:
        sync_relationships(repo, skill.id, draft.previous_skills, draft.next_skills)
        skill = _require_skill(repo, skill.id)
    return skill


def update_skill(repo: SkillRepository, skill_id: str, changes: SkillChanges) -> Skill:
    existing = _require_skill(repo, skill_id)

    if changes.touches_relationships:
        new_previous = (
            changes.previous_skills
            if changes.previous_skills is not None
            else existing.previous_skills
        )
        new_next = changes.next_skills if changes.next_skills is not None else existing.next_skills
        # A rejected edge change must not leave the scalar fields half-applied
        validate_relationship_change(repo, skill_id, new_previous, new_next)

    scalar_fields = changes.scalar_fields()
    if scalar_fields:
        if repo.update_skill(skill_id, scalar_fields) is None:
            raise NotFoundError(skill_id)

    if changes.touches_relationships:
        sync_relationships(repo, skill_id, new_previous, new_next)
    return _require_skill(repo, skill_id)


def delete_skill(repo: SkillRepository, skill_id: str):
    """Deletes a skill nobody has achieved, detaching its edges first."""
    _require_skill(repo, skill_id)

    references = repo.count_achievements(skill_id)
    if references > 0:
        raise ReferentialIntegrityError(skill_id, references)

    sync_relationships(repo, skill_id, [], [], check_cycles=False)
    repo.delete_skill(skill_id)
    logger.info("Deleted skill %s", skill_id)


def delete_all_skills(repo: SkillRepository) -> int:
    """Removes every achievement and then every skill. No guard."""
    removed_achievements = repo.delete_all_achievements()
    removed_skills = repo.delete_all_skills()
    logger.warning(
        "Deleted all skills (%d) and achievements (%d)", removed_skills, removed_achievements
    )
    return removed_skills


def get_skill_relationships(repo: SkillRepository, skill_id: str) -> SkillRelationships:
    skill = _require_skill(repo, skill_id)
    related_ids = set(skill.previous_skills + skill.next_skills + skill.variations)
    if not related_ids:
        return SkillRelationships(parents=[], children=[], variations=[])

    skills_map = {s.id: s for s in repo.list_skills() if s.id in related_ids}
    return SkillRelationships(
        parents=[skills_map[i] for i in skill.previous_skills if i in skills_map],
        children=[skills_map[i] for i in skill.next_skills if i in skills_map],
        variations=[skills_map[i] for i in skill.variations if i in skills_map],
    )


def skills_with_stats(repo: SkillRepository) -> List[SkillWithStats]:
    counts = repo.achievement_counts()
    return [
        SkillWithStats(**skill.model_dump(), user_count=counts.get(skill.id, 0))
        for skill in repo.list_skills()
    ]


def filter_skills(
    skills: List[Skill], search: Optional[str] = None, category: Optional[Category] = None
) -> List[Skill]:
    filtered = skills
    if search:
        term = search.lower()
        filtered = [
            s
            for s in filtered
            if term in s.name.lower() or term in (s.description or "").lower()
        ]
    if category is not None:
        filtered = [s for s in filtered if s.category == category]
    return filtered
