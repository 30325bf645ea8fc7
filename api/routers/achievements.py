# api/routers/achievements.py

from typing import List

from fastapi import APIRouter, Depends

from skill_system.hierarchy import build_skill_hierarchy
from skill_system.models import UserProfile
from skill_system.progress import load_skill_tree_with_progress
from skill_system.repository import SkillRepository
from skill_system.session import SessionContext

from .. import admin_actions, schemas
from ..repository import get_skill_repository
from .auth import get_current_user, get_session_context
from .skills import raise_for_result

router = APIRouter(
    prefix="/achievements",
    tags=["achievements"],
)


@router.get("/me", response_model=List[schemas.Achievement])
def list_my_achievements(
    current_user: schemas.User = Depends(get_current_user),
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    The current user's achievements, newest first.
    """
    return repo.list_achievements(user_id=current_user.id)


@router.get("/me/progress", response_model=schemas.ProgressResponse)
def get_my_progress(
    current_user: schemas.User = Depends(get_current_user),
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    Category completion for the current user plus the skill trees with
    every node flagged achieved or not.
    """
    tree = load_skill_tree_with_progress(repo, current_user.id)
    progress = tree.overlay()
    roots = build_skill_hierarchy(tree.skills)
    return schemas.ProgressResponse(
        user=UserProfile.model_validate(current_user.model_dump()),
        categories=progress.per_category,
        achieved_skill_ids=sorted(progress.achieved_ids),
        hierarchy=[root.to_dict(progress) for root in roots],
    )


@router.post("/me/{skill_id}", response_model=schemas.ActionResult, status_code=201)
def achieve_skill(
    skill_id: str,
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    result = admin_actions.achieve_skill_action(repo, context, skill_id)
    return raise_for_result(result)


@router.delete("/me/{skill_id}", response_model=schemas.ActionResult)
def unachieve_skill(
    skill_id: str,
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    result = admin_actions.unachieve_skill_action(repo, context, skill_id)
    return raise_for_result(result)
