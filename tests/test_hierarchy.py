from skill_system.hierarchy import (
    ParentedSkill,
    build_hierarchy,
    build_skill_hierarchy,
    display_parent_id,
)
from skill_system.models import Category
from skill_system.progress import overlay

from conftest import make_skill


def _ids(nodes):
    return [node.skill.id for node in nodes]


def test_build_hierarchy_orders_roots_and_children_by_input():
    a, b, c, d = (make_skill(i) for i in "abcd")
    entries = [
        ParentedSkill(a, None),
        ParentedSkill(c, "a"),
        ParentedSkill(d, None),
        ParentedSkill(b, "a"),
    ]

    roots = build_hierarchy(entries)

    assert _ids(roots) == ["a", "d"]
    assert _ids(roots[0].children) == ["c", "b"]
    assert roots[1].children == []


def test_build_hierarchy_is_deterministic():
    entries = [
        ParentedSkill(make_skill("a"), None),
        ParentedSkill(make_skill("b"), "a"),
        ParentedSkill(make_skill("c"), "b"),
    ]

    first = [root.to_dict() for root in build_hierarchy(entries)]
    second = [root.to_dict() for root in build_hierarchy(entries)]

    assert first == second


def test_dangling_parent_is_dropped():
    entries = [
        ParentedSkill(make_skill("a"), None),
        ParentedSkill(make_skill("orphan"), "deleted"),
        ParentedSkill(make_skill("child"), "orphan"),
    ]

    roots = build_hierarchy(entries)

    assert _ids(roots) == ["a"]
    assert [node.skill.id for root in roots for node in root.walk()] == ["a"]


def test_walk_is_preorder():
    entries = [
        ParentedSkill(make_skill("a"), None),
        ParentedSkill(make_skill("b"), "a"),
        ParentedSkill(make_skill("c"), "b"),
        ParentedSkill(make_skill("d"), "a"),
    ]

    root = build_hierarchy(entries)[0]

    assert [node.skill.id for node in root.walk()] == ["a", "b", "c", "d"]


def test_display_parent_prefers_lowest_difficulty():
    skills = {
        "hard": make_skill("hard", difficulty=5),
        "easy": make_skill("easy", difficulty=2),
        "also_easy": make_skill("also_easy", difficulty=2),
    }
    skill = make_skill("target", difficulty=6, previous_skills=["hard", "also_easy", "easy"])

    assert display_parent_id(skill, skills) == "also_easy"


def test_display_parent_skips_missing_prerequisites():
    skills = {"easy": make_skill("easy", difficulty=1)}
    skill = make_skill("target", previous_skills=["gone", "easy"])

    assert display_parent_id(skill, skills) == "easy"


def test_display_parent_all_missing_keeps_first():
    skill = make_skill("target", previous_skills=["gone", "also_gone"])

    assert display_parent_id(skill, {}) == "gone"
    assert display_parent_id(make_skill("root"), {}) is None


def test_build_skill_hierarchy_with_multiple_prerequisites():
    skills = [
        make_skill("pushup", difficulty=2),
        make_skill("rows", difficulty=3),
        make_skill("muscle_up", difficulty=8, previous_skills=["rows", "pushup"]),
        make_skill("stray", difficulty=4, previous_skills=["removed"]),
    ]

    roots = build_skill_hierarchy(skills)

    assert _ids(roots) == ["pushup", "rows"]
    assert _ids(roots[0].children) == ["muscle_up"]
    assert roots[1].children == []


def test_to_dict_with_overlay():
    skills = [make_skill("a"), make_skill("b", previous_skills=["a"])]
    root = build_skill_hierarchy(skills)[0]

    data = root.to_dict(overlay(skills, {"b"}))

    assert data["id"] == "a"
    assert data["achieved"] is False
    assert data["children"][0]["id"] == "b"
    assert data["children"][0]["achieved"] is True
    assert data["children"][0]["children"] == []


def test_to_dict_without_overlay_has_no_achieved_key():
    root = build_skill_hierarchy([make_skill("a")])[0]

    data = root.to_dict()

    assert "achieved" not in data
    assert data["category"] == "Push"


def test_category_view_keeps_skills_with_parent_in_other_category():
    skills = [
        make_skill("pullup", difficulty=3, category=Category.PULL),
        make_skill("muscle_up", difficulty=8, category=Category.PULL, previous_skills=["dips"]),
        make_skill("dips", difficulty=4, category=Category.PUSH),
        make_skill("ring_dips", difficulty=6, category=Category.PUSH, previous_skills=["dips"]),
        make_skill("stray", difficulty=2, category=Category.PULL, previous_skills=["removed"]),
    ]

    pull_roots = build_skill_hierarchy(skills, Category.PULL)
    push_roots = build_skill_hierarchy(skills, Category.PUSH)

    assert _ids(pull_roots) == ["pullup", "muscle_up"]
    assert _ids(push_roots) == ["dips"]
    assert _ids(push_roots[0].children) == ["ring_dips"]


def test_category_view_uses_parent_chosen_over_all_skills():
    # "rows" is easier than "pushup", so it stays the parent even in the Push view
    skills = [
        make_skill("rows", difficulty=1, category=Category.PULL),
        make_skill("pushup", difficulty=2, category=Category.PUSH),
        make_skill("muscle_up", difficulty=8, category=Category.PUSH, previous_skills=["pushup", "rows"]),
    ]

    assert _ids(build_skill_hierarchy(skills)[0].children) == ["muscle_up"]
    assert _ids(build_skill_hierarchy(skills, Category.PUSH)) == ["pushup", "muscle_up"]
