"""
Keeps previous_skills / next_skills symmetric across skill records.

The target skill is written first and its neighbors afterwards, one record per
repository call. There is no transaction around the whole change: when a
neighbor step fails the error says so (``partial``) and the writes already
made stay in place. ``reconcile_relationships`` repairs the neighbors from the
target's own record.
"""

import logging
from typing import Iterable, List

from pydantic import BaseModel, Field

from .errors import (
    CycleError,
    NeighborFetchError,
    NeighborWriteError,
    NotFoundError,
    SelfReferenceError,
    StorageError,
)
from .models import Skill, SkillGraph
from .repository import SkillRepository

logger = logging.getLogger(__name__)

PREVIOUS = "previous_skills"
NEXT = "next_skills"


class RelationshipDiff(BaseModel):
    added_previous: List[str] = Field(default_factory=list)
    removed_previous: List[str] = Field(default_factory=list)
    added_next: List[str] = Field(default_factory=list)
    removed_next: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.added_previous
            or self.removed_previous
            or self.added_next
            or self.removed_next
        )

    @property
    def neighbor_write_count(self) -> int:
        return (
            len(self.added_previous)
            + len(self.removed_previous)
            + len(self.added_next)
            + len(self.removed_next)
        )


class SyncReport(BaseModel):
    skill_id: str
    diff: RelationshipDiff = Field(default_factory=RelationshipDiff)
    # Neighbors whose record was written, in write order
    updated_neighbors: List[str] = Field(default_factory=list)
    # Neighbors that should have been touched but no longer exist
    skipped_neighbors: List[str] = Field(default_factory=list)


def _unique(ids: Iterable[str]) -> List[str]:
    seen = set()
    res = []
    for skill_id in ids:
        if skill_id not in seen:
            seen.add(skill_id)
            res.append(skill_id)
    return res


def compute_relationship_diff(old_previous, old_next, new_previous, new_next) -> RelationshipDiff:
    """Which neighbors gain or lose a back-link. Order follows the input lists."""
    return RelationshipDiff(
        added_previous=[i for i in new_previous if i not in old_previous],
        removed_previous=[i for i in old_previous if i not in new_previous],
        added_next=[i for i in new_next if i not in old_next],
        removed_next=[i for i in old_next if i not in new_next],
    )


class RelationshipChange(BaseModel):
    skill: Skill
    previous_skills: List[str]
    next_skills: List[str]
    diff: RelationshipDiff


def ensure_acyclic(
    repo: SkillRepository, skill_id: str, previous_skills: Iterable[str], next_skills: Iterable[str]
):
    """Raises CycleError if giving skill_id these edges would close a loop.

    skill_id does not have to be stored yet.
    """
    graph = SkillGraph(_read(repo.list_skills))
    graph.replace_dependencies(skill_id, previous_skills, next_skills)
    cycle = graph.find_cycle_through(skill_id)
    if cycle:
        raise CycleError(skill_id, cycle)


def validate_relationship_change(
    repo: SkillRepository,
    skill_id: str,
    new_previous_skills: Iterable[str],
    new_next_skills: Iterable[str],
    check_cycles: bool = True,
) -> RelationshipChange:
    """Every check a sync makes before its first write. Writes nothing."""
    new_previous = _unique(new_previous_skills)
    new_next = _unique(new_next_skills)

    if skill_id in new_previous or skill_id in new_next:
        raise SelfReferenceError(skill_id)

    skill = _read(repo.get_skill, skill_id)
    if skill is None:
        raise NotFoundError(skill_id)

    diff = compute_relationship_diff(
        skill.previous_skills, skill.next_skills, new_previous, new_next
    )

    for neighbor_id in _unique(diff.added_previous + diff.added_next):
        if _read(repo.get_skill, neighbor_id) is None:
            raise NotFoundError(
                neighbor_id, f"Related skill '{neighbor_id}' not found."
            )

    if check_cycles and (diff.added_previous or diff.added_next):
        ensure_acyclic(repo, skill_id, new_previous, new_next)

    return RelationshipChange(
        skill=skill, previous_skills=new_previous, next_skills=new_next, diff=diff
    )


def sync_relationships(
    repo: SkillRepository,
    skill_id: str,
    new_previous_skills: Iterable[str],
    new_next_skills: Iterable[str],
    check_cycles: bool = True,
) -> SyncReport:
    """
    Replaces a skill's previous/next lists and updates every affected neighbor.

    Neighbors present in both the old and the new lists are read and only
    written when their back-link is missing, so an unchanged request makes no
    neighbor writes on a consistent graph.

    Errors raised before the target is written (validation, missing skills,
    cycles, a failed primary write) mean nothing changed. A NeighborSyncError
    means the target and possibly some neighbors were written.
    """
    change = validate_relationship_change(
        repo, skill_id, new_previous_skills, new_next_skills, check_cycles
    )
    skill, diff = change.skill, change.diff
    new_previous, new_next = change.previous_skills, change.next_skills

    try:
        repo.update_skill(skill_id, {PREVIOUS: new_previous, NEXT: new_next})
    except Exception as e:
        raise StorageError(f"Failed to update skill '{skill_id}': {e}") from e

    report = SyncReport(skill_id=skill_id, diff=diff)
    # Kept neighbors are only written when their back-link is missing
    kept_previous = [i for i in new_previous if i in skill.previous_skills]
    kept_next = [i for i in new_next if i in skill.next_skills]

    # Previous side: the neighbor lists this skill among its next_skills
    for neighbor_id in diff.removed_previous:
        _unlink(repo, report, neighbor_id, NEXT)
    for neighbor_id in diff.added_previous:
        _link(repo, report, neighbor_id, NEXT)
    for neighbor_id in kept_previous:
        _link(repo, report, neighbor_id, NEXT)

    # Next side: the neighbor lists this skill among its previous_skills
    for neighbor_id in diff.removed_next:
        _unlink(repo, report, neighbor_id, PREVIOUS)
    for neighbor_id in diff.added_next:
        _link(repo, report, neighbor_id, PREVIOUS)
    for neighbor_id in kept_next:
        _link(repo, report, neighbor_id, PREVIOUS)

    logger.info(
        "Synced relationships of %s: %d neighbor(s) updated, %d skipped",
        skill_id,
        len(report.updated_neighbors),
        len(report.skipped_neighbors),
    )
    return report


def _read(func, *args):
    # Reads before the target write: a failure here changed nothing
    try:
        return func(*args)
    except Exception as e:
        raise StorageError(f"Failed to read skills: {e}") from e


def _fetch_neighbor(repo, report: SyncReport, neighbor_id: str, field: str):
    try:
        return repo.get_skill(neighbor_id)
    except Exception as e:
        logger.warning("Could not read neighbor %s of %s: %s", neighbor_id, report.skill_id, e)
        raise NeighborFetchError(
            report.skill_id, neighbor_id, field, report.updated_neighbors
        ) from e


def _write_neighbor(repo, report: SyncReport, neighbor_id: str, fields: dict):
    try:
        repo.update_skill(neighbor_id, fields)
    except Exception as e:
        logger.warning("Could not write neighbor %s of %s: %s", neighbor_id, report.skill_id, e)
        raise NeighborWriteError(
            report.skill_id, neighbor_id, ",".join(fields), report.updated_neighbors
        ) from e
    report.updated_neighbors.append(neighbor_id)


def _unlink(repo, report: SyncReport, neighbor_id: str, field: str):
    neighbor = _fetch_neighbor(repo, report, neighbor_id, field)
    if neighbor is None:
        report.skipped_neighbors.append(neighbor_id)
        return
    current = getattr(neighbor, field)
    if report.skill_id not in current:
        return
    remaining = [i for i in current if i != report.skill_id]
    _write_neighbor(repo, report, neighbor_id, {field: remaining})


def _link(repo, report: SyncReport, neighbor_id: str, field: str):
    neighbor = _fetch_neighbor(repo, report, neighbor_id, field)
    if neighbor is None:
        report.skipped_neighbors.append(neighbor_id)
        return
    current = getattr(neighbor, field)
    if report.skill_id in current:
        # Already linked; a write would change nothing
        return
    _write_neighbor(repo, report, neighbor_id, {field: current + [report.skill_id]})


def reconcile_relationships(repo: SkillRepository, skill_id: str) -> SyncReport:
    """
    Makes every neighbor agree with the target's own previous/next lists.

    Missing back-links are appended, stale ones removed. Ids in the target's
    lists that no longer exist are reported as skipped and left alone.
    """
    skill = repo.get_skill(skill_id)
    if skill is None:
        raise NotFoundError(skill_id)

    report = SyncReport(skill_id=skill_id)
    skills = {s.id: s for s in repo.list_skills()}
    report.skipped_neighbors = [
        i for i in _unique(skill.previous_skills + skill.next_skills) if i not in skills
    ]

    for other in skills.values():
        if other.id == skill_id:
            continue
        fields = {}
        wants_next = other.id in skill.previous_skills
        has_next = skill_id in other.next_skills
        if wants_next and not has_next:
            fields[NEXT] = other.next_skills + [skill_id]
            report.diff.added_previous.append(other.id)
        elif has_next and not wants_next:
            fields[NEXT] = [i for i in other.next_skills if i != skill_id]
            report.diff.removed_previous.append(other.id)

        wants_previous = other.id in skill.next_skills
        has_previous = skill_id in other.previous_skills
        if wants_previous and not has_previous:
            fields[PREVIOUS] = other.previous_skills + [skill_id]
            report.diff.added_next.append(other.id)
        elif has_previous and not wants_previous:
            fields[PREVIOUS] = [i for i in other.previous_skills if i != skill_id]
            report.diff.removed_next.append(other.id)

        if fields:
            _write_neighbor(repo, report, other.id, fields)

    if report.updated_neighbors:
        logger.info(
            "Reconciled %s: repaired %d neighbor(s)", skill_id, len(report.updated_neighbors)
        )
    return report
