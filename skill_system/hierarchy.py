"""
Builds display trees from a flat skill list.

The tree view needs exactly one parent per skill, while the stored graph allows
several prerequisites. ``display_parent_id`` performs that reduction: the
lowest-difficulty prerequisite present in the collection wins, ties going to
the one listed first.
"""

from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence

from .models import Category, Skill


class ParentedSkill(NamedTuple):
    skill: Skill
    parent_id: Optional[str]


class HierarchyNode:
    """A skill and its ordered children. Rebuilt on every read."""

    def __init__(self, skill: Skill):
        self.skill = skill
        self.children: List["HierarchyNode"] = []

    def __repr__(self):
        return f"HierarchyNode(id='{self.skill.id}', children={len(self.children)})"

    def walk(self) -> Iterator["HierarchyNode"]:
        """Pre-order traversal of this node and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self, overlay=None) -> dict:
        data = self.skill.model_dump(mode="json")
        if overlay is not None:
            data["achieved"] = overlay.is_achieved(self.skill.id)
        data["children"] = [child.to_dict(overlay) for child in self.children]
        return data


def build_hierarchy(entries: Sequence[ParentedSkill]) -> List[HierarchyNode]:
    """
    Turns single-parent entries into root nodes, preserving input order.

    An entry whose parent id is unknown is neither a child nor a root, so it
    does not appear in the result.
    """
    nodes: Dict[str, HierarchyNode] = {}
    for entry in entries:
        nodes[entry.skill.id] = HierarchyNode(entry.skill)

    for entry in entries:
        if entry.parent_id is not None:
            parent = nodes.get(entry.parent_id)
            if parent is not None:
                parent.children.append(nodes[entry.skill.id])

    return [nodes[entry.skill.id] for entry in entries if entry.parent_id is None]


def display_parent_id(skill: Skill, skills_by_id: Dict[str, Skill]) -> Optional[str]:
    candidates = [
        (skills_by_id[prereq_id].difficulty, position, prereq_id)
        for position, prereq_id in enumerate(skill.previous_skills)
        if prereq_id in skills_by_id and prereq_id != skill.id
    ]
    if candidates:
        return min(candidates)[2]
    if skill.previous_skills:
        # Every prerequisite is missing; keep the pointer so the skill is dropped
        return skill.previous_skills[0]
    return None


def to_parented(skills: Sequence[Skill]) -> List[ParentedSkill]:
    skills_by_id = {skill.id: skill for skill in skills}
    return [ParentedSkill(skill, display_parent_id(skill, skills_by_id)) for skill in skills]


def build_skill_hierarchy(
    skills: Sequence[Skill], category: Optional[Category] = None
) -> List[HierarchyNode]:
    """
    Display trees for the whole collection, or for one category of it.

    Parents are chosen over the whole collection first. In a category view a
    skill whose parent exists but belongs to another category becomes a root
    of that view; a skill whose parent does not exist at all is still dropped.
    """
    entries = to_parented(skills)
    if category is None:
        return build_hierarchy(entries)

    known_ids = {skill.id for skill in skills}
    shown_ids = {skill.id for skill in skills if skill.category == category}
    view = []
    for entry in entries:
        if entry.skill.id not in shown_ids:
            continue
        if entry.parent_id in known_ids and entry.parent_id not in shown_ids:
            entry = ParentedSkill(entry.skill, None)
        view.append(entry)
    return build_hierarchy(view)
