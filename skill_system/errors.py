from typing import List, Optional


class SkillSystemError(Exception):
    """Base class for every error the skill core raises on purpose."""

    code = "error"
    # True when some records were already written before the failure
    partial = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(SkillSystemError):
    code = "not_found"

    def __init__(self, skill_id: str, message: Optional[str] = None):
        self.skill_id = skill_id
        super().__init__(message or f"Skill '{skill_id}' not found.")


class ReferentialIntegrityError(SkillSystemError):
    code = "referential_integrity"

    def __init__(self, skill_id: str, reference_count: int):
        self.skill_id = skill_id
        self.reference_count = reference_count
        super().__init__(
            "Cannot delete skill that has been achieved by users. "
            "Consider archiving instead."
        )


class PermissionDeniedError(SkillSystemError):
    code = "permission_denied"


class SkillValidationError(SkillSystemError):
    code = "validation"


class SelfReferenceError(SkillValidationError):
    def __init__(self, skill_id: str):
        self.skill_id = skill_id
        super().__init__(f"Skill '{skill_id}' cannot be its own previous or next skill.")


class CycleError(SkillValidationError):
    def __init__(self, skill_id: str, cycle: List[str]):
        self.skill_id = skill_id
        self.cycle = cycle
        super().__init__(
            f"Relationship change for '{skill_id}' would create a cycle: "
            + " -> ".join(cycle)
        )


class StorageError(SkillSystemError):
    """The primary record write failed; nothing was changed."""

    code = "storage"


class NeighborSyncError(SkillSystemError):
    """A back-link update failed after the target record was written."""

    code = "neighbor_sync"
    partial = True
    step = "sync"

    def __init__(self, skill_id: str, neighbor_id: str, field: str, completed: List[str]):
        self.skill_id = skill_id
        self.neighbor_id = neighbor_id
        self.field = field
        self.completed = list(completed)
        super().__init__(
            f"Skill '{skill_id}' was updated, but the {self.step} of neighbor "
            f"'{neighbor_id}' ({field}) failed. Some neighbor links may be stale; "
            "retry or reconcile the relationships."
        )


class NeighborFetchError(NeighborSyncError):
    step = "fetch"


class NeighborWriteError(NeighborSyncError):
    step = "write"
