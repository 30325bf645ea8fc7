"""
Entry points called by the routers.

Each action checks the caller's role from an explicit SessionContext, runs the
core operation and turns the outcome into an ActionResult. Core errors and
unexpected failures are logged and reported in the result; nothing is raised
past this module.
"""

import logging

from pydantic import ValidationError

from skill_system import achievements, catalog
from skill_system.errors import SkillSystemError, SkillValidationError
from skill_system.models import SkillChanges, SkillDraft
from skill_system.relationships import reconcile_relationships, sync_relationships
from skill_system.repository import SkillRepository
from skill_system.session import SessionContext, require_admin

from .schemas import ActionResult

logger = logging.getLogger(__name__)


def _failure(action: str, error: Exception) -> ActionResult:
    if isinstance(error, SkillSystemError):
        logger.warning("%s failed (%s): %s", action, error.code, error.message)
        return ActionResult(
            success=False,
            message=error.message,
            error=error.message,
            error_code=error.code,
            partial=error.partial,
        )
    logger.exception("Unexpected error in %s", action)
    return ActionResult(
        success=False,
        message="Unknown error occurred",
        error=str(error) or "Unknown error occurred",
        error_code="internal",
    )


def _validation_error(error: ValidationError) -> SkillValidationError:
    details = "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()
    )
    return SkillValidationError(f"Invalid skill data: {details}")


def create_skill_action(repo: SkillRepository, context: SessionContext, skill_data) -> ActionResult:
    try:
        require_admin(context, "create skills")
        try:
            draft = SkillDraft.model_validate(skill_data)
        except ValidationError as e:
            raise _validation_error(e) from e
        skill = catalog.create_skill(repo, draft)
        return ActionResult(success=True, message=f"Created skill '{skill.name}'.", data=skill)
    except Exception as e:
        return _failure("create_skill", e)


def update_skill_action(
    repo: SkillRepository, context: SessionContext, skill_id: str, changes
) -> ActionResult:
    try:
        require_admin(context, "update skills")
        try:
            changes = SkillChanges.model_validate(changes)
        except ValidationError as e:
            raise _validation_error(e) from e
        skill = catalog.update_skill(repo, skill_id, changes)
        return ActionResult(success=True, message=f"Updated skill '{skill.name}'.", data=skill)
    except Exception as e:
        return _failure("update_skill", e)


def delete_skill_action(repo: SkillRepository, context: SessionContext, skill_id: str) -> ActionResult:
    try:
        require_admin(context, "delete skills")
        catalog.delete_skill(repo, skill_id)
        return ActionResult(success=True, message=f"Deleted skill '{skill_id}'.")
    except Exception as e:
        return _failure("delete_skill", e)


def delete_all_skills_action(repo: SkillRepository, context: SessionContext) -> ActionResult:
    try:
        require_admin(context, "delete skills")
        deleted = catalog.delete_all_skills(repo)
        return ActionResult(
            success=True,
            message=f"Deleted {deleted} skills and all user achievements.",
            data={"deleted_count": deleted},
        )
    except Exception as e:
        return _failure("delete_all_skills", e)


def update_skill_relationships_action(
    repo: SkillRepository,
    context: SessionContext,
    skill_id: str,
    new_previous_skills,
    new_next_skills,
) -> ActionResult:
    try:
        require_admin(context, "edit skill relationships")
        report = sync_relationships(repo, skill_id, new_previous_skills, new_next_skills)
        return ActionResult(
            success=True,
            message=f"Relationships of '{skill_id}' updated.",
            data=report,
        )
    except Exception as e:
        return _failure("update_skill_relationships", e)


def reconcile_skill_relationships_action(
    repo: SkillRepository, context: SessionContext, skill_id: str
) -> ActionResult:
    try:
        require_admin(context, "edit skill relationships")
        report = reconcile_relationships(repo, skill_id)
        return ActionResult(
            success=True,
            message=f"Repaired {len(report.updated_neighbors)} neighbor(s) of '{skill_id}'.",
            data=report,
        )
    except Exception as e:
        return _failure("reconcile_skill_relationships", e)


def achieve_skill_action(repo: SkillRepository, context: SessionContext, skill_id: str) -> ActionResult:
    try:
        achievement = achievements.achieve_skill(repo, context, skill_id)
        return ActionResult(success=True, message="Skill achieved.", data=achievement)
    except Exception as e:
        return _failure("achieve_skill", e)


def unachieve_skill_action(repo: SkillRepository, context: SessionContext, skill_id: str) -> ActionResult:
    try:
        removed = achievements.unachieve_skill(repo, context, skill_id)
        message = "Achievement removed." if removed else "Skill was not achieved."
        return ActionResult(success=True, message=message, data={"removed": removed})
    except Exception as e:
        return _failure("unachieve_skill", e)
