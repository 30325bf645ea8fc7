# api/routers/skills.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from skill_system import catalog
from skill_system.errors import NotFoundError
from skill_system.hierarchy import build_skill_hierarchy
from skill_system.models import Category, SkillGraph
from skill_system.progress import category_difficulty_totals
from skill_system.repository import SkillRepository
from skill_system.session import SessionContext

from .. import admin_actions, schemas
from ..repository import get_skill_repository
from .auth import get_session_context

# Maps ActionResult.error_code to the HTTP status reported to the client
STATUS_BY_ERROR_CODE = {
    "not_found": 404,
    "referential_integrity": 409,
    "permission_denied": 403,
    "validation": 422,
    "neighbor_sync": 502,
    "storage": 503,
}


def raise_for_result(result: schemas.ActionResult) -> schemas.ActionResult:
    """Returns successful results, turns failed ones into an HTTPException."""
    if result.success:
        return result
    raise HTTPException(
        status_code=STATUS_BY_ERROR_CODE.get(result.error_code, 500),
        detail=result.model_dump(mode="json"),
    )


router = APIRouter(tags=["skills"])


# --- Read Endpoints ---


@router.get("/", response_model=List[schemas.Skill])
def list_skills(
    category: Optional[Category] = None,
    search: Optional[str] = None,
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    Retrieve all skills, easiest first.
    """
    return catalog.filter_skills(repo.list_skills(category), search=search)


@router.get("/stats", response_model=List[catalog.SkillWithStats])
def list_skills_with_stats(
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    Every skill with the number of users who achieved it. Admins only.
    """
    if not context.is_admin:
        raise HTTPException(status_code=403, detail="Only admins can view skill statistics.")
    return catalog.skills_with_stats(repo)


@router.get("/hierarchy", response_model=schemas.HierarchyResponse)
def get_skill_hierarchy(
    category: Optional[Category] = None,
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    The skills arranged as display trees, one per root skill. With a category,
    skills whose display parent is in another category are shown as roots.
    """
    roots = build_skill_hierarchy(repo.list_skills(), category)
    return schemas.HierarchyResponse(roots=[root.to_dict() for root in roots])


@router.get("/category-totals", response_model=schemas.CategoryTotals)
def get_category_totals(repo: SkillRepository = Depends(get_skill_repository)):
    """
    Sum of skill difficulty per category.
    """
    totals = category_difficulty_totals(repo.list_skills())
    return schemas.CategoryTotals(
        push=totals[Category.PUSH],
        pull=totals[Category.PULL],
        legs=totals[Category.LEGS],
    )


@router.get("/{skill_id}", response_model=schemas.Skill)
def get_skill(skill_id: str, repo: SkillRepository = Depends(get_skill_repository)):
    skill = repo.get_skill(skill_id)
    if skill is None:
        raise HTTPException(status_code=404, detail="Skill not found")
    return skill


@router.get("/{skill_id}/relationships", response_model=catalog.SkillRelationships)
def get_skill_relationships(skill_id: str, repo: SkillRepository = Depends(get_skill_repository)):
    """
    The parents, children and variations of a skill as full records.
    """
    try:
        return catalog.get_skill_relationships(repo, skill_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{skill_id}/prerequisites", response_model=List[schemas.Skill])
def get_skill_prerequisites(skill_id: str, repo: SkillRepository = Depends(get_skill_repository)):
    """
    Every direct and indirect prerequisite of a skill, nearest first.
    """
    graph = SkillGraph(repo.list_skills())
    if skill_id not in graph.skills:
        raise HTTPException(status_code=404, detail="Skill not found")
    return [graph.skills[i] for i in graph.get_prerequisites(skill_id) if i in graph.skills]


@router.get("/{skill_id}/path/{target_skill_id}", response_model=List[schemas.Skill])
def get_learning_path(
    skill_id: str, target_skill_id: str, repo: SkillRepository = Depends(get_skill_repository)
):
    """
    Shortest progression from one skill to another.
    """
    graph = SkillGraph(repo.list_skills())
    path = graph.get_learning_path(skill_id, target_skill_id)
    if not path:
        raise HTTPException(
            status_code=404,
            detail=f"No progression from '{skill_id}' to '{target_skill_id}'.",
        )
    return [graph.skills[i] for i in path if i in graph.skills]


# --- Admin Endpoints ---


@router.post("/", response_model=schemas.ActionResult, status_code=201)
def create_skill(
    skill: schemas.SkillCreate,
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    result = admin_actions.create_skill_action(repo, context, skill)
    return raise_for_result(result)


@router.patch("/{skill_id}", response_model=schemas.ActionResult)
def update_skill(
    skill_id: str,
    changes: schemas.SkillUpdate,
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    result = admin_actions.update_skill_action(repo, context, skill_id, changes)
    return raise_for_result(result)


@router.put("/{skill_id}/relationships", response_model=schemas.ActionResult)
def update_skill_relationships(
    skill_id: str,
    relationships: schemas.RelationshipUpdate,
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    Replace a skill's previous and next skills, keeping both sides in sync.
    """
    result = admin_actions.update_skill_relationships_action(
        repo, context, skill_id, relationships.previous_skills, relationships.next_skills
    )
    return raise_for_result(result)


@router.post("/{skill_id}/relationships/reconcile", response_model=schemas.ActionResult)
def reconcile_skill_relationships(
    skill_id: str,
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    Repair neighbor links after a partially applied relationship update.
    """
    result = admin_actions.reconcile_skill_relationships_action(repo, context, skill_id)
    return raise_for_result(result)


@router.delete("/{skill_id}", response_model=schemas.ActionResult)
def delete_skill(
    skill_id: str,
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    result = admin_actions.delete_skill_action(repo, context, skill_id)
    return raise_for_result(result)


@router.delete("/", response_model=schemas.ActionResult)
def delete_all_skills(
    context: SessionContext = Depends(get_session_context),
    repo: SkillRepository = Depends(get_skill_repository),
):
    """
    Delete every skill and every user achievement. Cannot be undone.
    """
    result = admin_actions.delete_all_skills_action(repo, context)
    return raise_for_result(result)
