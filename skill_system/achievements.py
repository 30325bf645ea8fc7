import logging
from typing import Optional

from .errors import NotFoundError
from .models import Achievement
from .repository import SkillRepository
from .session import SessionContext, require_owner

logger = logging.getLogger(__name__)


def achieve_skill(
    repo: SkillRepository,
    context: SessionContext,
    skill_id: str,
    user_id: Optional[str] = None,
) -> Achievement:
    """Marks a skill achieved for the calling user. Marking twice is a no-op."""
    user_id = user_id or context.user_id
    require_owner(context, user_id)

    if repo.get_skill(skill_id) is None:
        raise NotFoundError(skill_id)

    existing = repo.get_achievement(user_id, skill_id)
    if existing is not None:
        return existing

    achievement = repo.insert_achievement(user_id, skill_id)
    logger.info("User %s achieved skill %s", user_id, skill_id)
    return achievement


def unachieve_skill(
    repo: SkillRepository,
    context: SessionContext,
    skill_id: str,
    user_id: Optional[str] = None,
) -> bool:
    """Removes the achievement. Returns False when there was none."""
    user_id = user_id or context.user_id
    require_owner(context, user_id)

    if repo.get_skill(skill_id) is None:
        raise NotFoundError(skill_id)

    removed = repo.delete_achievement(user_id, skill_id)
    if removed:
        logger.info("User %s unmarked skill %s", user_id, skill_id)
    return removed
