# tests/test_models.py

import pytest
from pydantic import ValidationError

from skill_system.models import Category, SkillChanges, SkillDraft, SkillGraph

from conftest import make_skill


@pytest.fixture
def push_chain():
    return [
        make_skill("wall", "Wall Push-up", difficulty=1, next_skills=["incline"]),
        make_skill("incline", "Incline Push-up", difficulty=2, previous_skills=["wall"], next_skills=["pushup"]),
        make_skill("pushup", "Push-up", difficulty=3, previous_skills=["incline"]),
        make_skill("dips", "Dips", difficulty=4, previous_skills=["pushup"]),
    ]


def test_add_skill_to_graph():
    """Tests that a Skill object is correctly added to the SkillGraph's skills dictionary."""
    # 1. Arrange: Set up the objects we need for the test.
    graph = SkillGraph()
    skill_to_add = make_skill("pushup", "Push-up")

    # 2. Act:  Call the method you are testing
    graph.add_skill(skill_to_add)

    # 3. Assert:  Check that the outcome is what you expect.
    assert "pushup" in graph.skills
    assert graph.skills["pushup"] == skill_to_add
    assert len(graph.skills) == 1


def test_add_dependency():
    graph = SkillGraph([make_skill("incline"), make_skill("pushup")])

    graph.add_dependency("incline", "pushup")

    assert "incline" in graph.requires["pushup"]
    assert "pushup" in graph.unlocks["incline"]


def test_graph_reads_both_edge_lists(push_chain):
    # dips -> pushup is only recorded on dips
    graph = SkillGraph(push_chain)

    assert graph.requires["dips"] == {"pushup"}
    assert graph.unlocks["pushup"] == {"dips"}


def test_prerequisites_and_unlocks(push_chain):
    graph = SkillGraph(push_chain)

    assert graph.get_prerequisites("dips") == ["pushup", "incline", "wall"]
    assert graph.get_skills_unlocked_by("wall") == ["incline", "pushup", "dips"]
    assert graph.get_prerequisites("wall") == []


def test_learning_path(push_chain):
    graph = SkillGraph(push_chain)

    assert graph.get_learning_path("wall", "dips") == ["wall", "incline", "pushup", "dips"]
    assert graph.get_learning_path("dips", "wall") == []
    assert graph.get_learning_path("pushup", "pushup") == ["pushup"]


def test_find_cycle_through(push_chain):
    graph = SkillGraph(push_chain)
    assert graph.find_cycle_through("incline") == []

    graph.replace_dependencies("wall", ["dips"], ["incline"])

    assert graph.find_cycle_through("wall") == ["wall", "incline", "pushup", "dips", "wall"]


def test_replace_dependencies_drops_old_edges(push_chain):
    graph = SkillGraph(push_chain)

    graph.replace_dependencies("incline", [], [])

    assert graph.requires["incline"] == set()
    assert "incline" not in graph.unlocks["wall"]
    assert "incline" not in graph.requires["pushup"]


def test_asymmetric_edges(push_chain):
    graph = SkillGraph(push_chain)

    assert graph.asymmetric_edges() == [("pushup", "dips")]


def test_skill_lists_default_to_empty():
    skill = make_skill("x", previous_skills=None, next_skills=None, variations=None)

    assert skill.previous_skills == []
    assert skill.next_skills == []
    assert skill.variations == []


@pytest.mark.parametrize("difficulty", [0, 11])
def test_draft_rejects_difficulty_out_of_range(difficulty):
    with pytest.raises(ValidationError):
        SkillDraft(name="Planche", difficulty=difficulty, category=Category.PUSH)


def test_draft_rejects_blank_name():
    with pytest.raises(ValidationError):
        SkillDraft(name="   ", difficulty=5, category=Category.PUSH)


def test_changes_scalar_fields():
    changes = SkillChanges(name=" L-sit ", next_skills=["v-sit"], category=Category.LEGS)

    assert changes.scalar_fields() == {"name": "L-sit", "category": "Legs"}
    assert changes.touches_relationships
    assert not SkillChanges(description="hold").touches_relationships
