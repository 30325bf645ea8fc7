import pytest

from skill_system.errors import (
    CycleError,
    NeighborFetchError,
    NeighborWriteError,
    NotFoundError,
    SelfReferenceError,
    StorageError,
)
from skill_system.models import SkillGraph
from skill_system.relationships import (
    compute_relationship_diff,
    reconcile_relationships,
    sync_relationships,
)
from skill_system.repository import InMemorySkillRepository

from conftest import make_skill


class FlakyRepository(InMemorySkillRepository):
    """Fails reads or writes for selected skill ids."""

    def __init__(self, *args, fail_get=(), fail_update=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_get = set(fail_get)
        self.fail_update = set(fail_update)
        self.update_calls = []

    def get_skill(self, skill_id):
        if skill_id in self.fail_get:
            raise ConnectionError(f"read of {skill_id} timed out")
        return super().get_skill(skill_id)

    def update_skill(self, skill_id, fields):
        self.update_calls.append(skill_id)
        if skill_id in self.fail_update:
            raise ConnectionError(f"write of {skill_id} timed out")
        return super().update_skill(skill_id, fields)


def _scenario(**kwargs):
    return FlakyRepository(
        skills=[
            make_skill("1", "Incline Push-up", difficulty=1),
            make_skill("2", "Push-up", difficulty=2, previous_skills=["1"]),
            make_skill("3", "Diamond Push-up", difficulty=3),
        ],
        **kwargs,
    )


def _assert_symmetric(repo):
    assert SkillGraph(repo.list_skills()).asymmetric_edges() == []


def test_compute_relationship_diff_keeps_input_order():
    diff = compute_relationship_diff(["a", "b"], ["x"], ["b", "d", "c"], [])

    assert diff.added_previous == ["d", "c"]
    assert diff.removed_previous == ["a"]
    assert diff.added_next == []
    assert diff.removed_next == ["x"]
    assert diff.neighbor_write_count == 4
    assert not diff.is_empty


def test_sync_links_both_sides(scenario_repo):
    report = sync_relationships(scenario_repo, "2", ["1"], ["3"])

    a, b, c = (scenario_repo.get_skill(i) for i in ("1", "2", "3"))
    assert a.next_skills == ["2"]
    assert b.previous_skills == ["1"]
    assert b.next_skills == ["3"]
    assert c.previous_skills == ["2"]
    assert report.diff.added_next == ["3"]
    assert report.diff.added_previous == []
    assert sorted(report.updated_neighbors) == ["1", "3"]
    _assert_symmetric(scenario_repo)


def test_sync_is_idempotent(scenario_repo):
    sync_relationships(scenario_repo, "2", ["1"], ["3"])
    before = [s.model_dump() for s in scenario_repo.list_skills()]

    report = sync_relationships(scenario_repo, "2", ["1"], ["3"])

    assert report.diff.is_empty
    assert report.updated_neighbors == []
    assert [s.model_dump() for s in scenario_repo.list_skills()] == before


def test_sync_removes_back_links(scenario_repo):
    sync_relationships(scenario_repo, "2", ["1"], ["3"])

    report = sync_relationships(scenario_repo, "2", [], ["3"])

    assert scenario_repo.get_skill("1").next_skills == []
    assert scenario_repo.get_skill("2").previous_skills == []
    assert scenario_repo.get_skill("3").previous_skills == ["2"]
    assert report.diff.removed_previous == ["1"]
    assert report.updated_neighbors == ["1"]
    _assert_symmetric(scenario_repo)


def test_sync_deduplicates_input(scenario_repo):
    sync_relationships(scenario_repo, "2", ["1", "1"], ["3", "3"])

    assert scenario_repo.get_skill("2").previous_skills == ["1"]
    assert scenario_repo.get_skill("2").next_skills == ["3"]
    assert scenario_repo.get_skill("3").previous_skills == ["2"]


@pytest.mark.parametrize(
    "previous, next_",
    [
        (["2"], []),
        ([], ["3", "2"]),
    ],
)
def test_sync_rejects_self_reference(previous, next_):
    repo = _scenario()

    with pytest.raises(SelfReferenceError) as exc:
        sync_relationships(repo, "2", previous, next_)

    assert exc.value.code == "validation"
    assert repo.update_calls == []
    assert repo.get_skill("2").next_skills == []


def test_sync_missing_target():
    repo = _scenario()

    with pytest.raises(NotFoundError) as exc:
        sync_relationships(repo, "404", ["1"], [])

    assert exc.value.skill_id == "404"
    assert repo.update_calls == []


def test_sync_missing_added_neighbor_changes_nothing():
    repo = _scenario()

    with pytest.raises(NotFoundError) as exc:
        sync_relationships(repo, "2", ["1"], ["3", "99"])

    assert exc.value.skill_id == "99"
    assert repo.update_calls == []
    assert repo.get_skill("3").previous_skills == []


def test_sync_rejects_cycle(scenario_repo):
    sync_relationships(scenario_repo, "2", ["1"], ["3"])

    with pytest.raises(CycleError) as exc:
        sync_relationships(scenario_repo, "1", ["3"], ["2"])

    assert exc.value.cycle[0] == "1"
    assert exc.value.cycle[-1] == "1"
    assert scenario_repo.get_skill("1").previous_skills == []
    assert scenario_repo.get_skill("3").next_skills == []


def test_sync_without_cycle_check_allows_detaching(scenario_repo):
    sync_relationships(scenario_repo, "2", ["1"], ["3"])

    report = sync_relationships(scenario_repo, "2", [], [], check_cycles=False)

    assert sorted(report.updated_neighbors) == ["1", "3"]
    assert scenario_repo.get_skill("1").next_skills == []
    assert scenario_repo.get_skill("3").previous_skills == []


def test_sync_skips_neighbor_deleted_meanwhile(scenario_repo):
    sync_relationships(scenario_repo, "2", ["1"], ["3"])
    scenario_repo.delete_skill("3")

    report = sync_relationships(scenario_repo, "2", ["1"], [])

    assert report.skipped_neighbors == ["3"]
    assert scenario_repo.get_skill("2").next_skills == []


def test_sync_primary_write_failure_is_not_partial():
    repo = _scenario(fail_update={"2"})

    with pytest.raises(StorageError) as exc:
        sync_relationships(repo, "2", ["1"], ["3"])

    assert exc.value.partial is False
    assert repo.get_skill("3").previous_skills == []


def test_sync_read_failure_before_write_is_storage_error():
    repo = _scenario(fail_get={"3"})

    with pytest.raises(StorageError):
        sync_relationships(repo, "2", ["1"], ["3"])

    assert repo.update_calls == []


def test_sync_neighbor_write_failure_is_partial():
    repo = _scenario(fail_update={"3"})

    with pytest.raises(NeighborWriteError) as exc:
        sync_relationships(repo, "2", ["1"], ["3"])

    err = exc.value
    assert err.partial is True
    assert err.step == "write"
    assert err.neighbor_id == "3"
    assert err.completed == ["1"]
    # The target and the first neighbor keep their new state
    assert repo.get_skill("2").next_skills == ["3"]
    assert repo.get_skill("1").next_skills == ["2"]
    assert repo.get_skill("3").previous_skills == []

    repo.fail_update.clear()
    report = sync_relationships(repo, "2", ["1"], ["3"])

    assert report.diff.is_empty
    assert report.updated_neighbors == ["3"]
    _assert_symmetric(repo)


def test_sync_neighbor_fetch_failure_is_partial():
    repo = _scenario(fail_get={"1"})

    with pytest.raises(NeighborFetchError) as exc:
        sync_relationships(repo, "2", ["1"], ["3"])

    assert exc.value.step == "fetch"
    assert exc.value.partial is True
    assert exc.value.completed == []
    assert repo.get_skill("3").previous_skills == []


def test_reconcile_repairs_stale_back_link():
    repo = _scenario()
    sync_relationships(repo, "2", ["1"], [])
    repo.fail_update.add("1")

    with pytest.raises(NeighborWriteError):
        sync_relationships(repo, "2", [], [])

    repo.fail_update.clear()
    assert repo.get_skill("1").next_skills == ["2"]

    report = reconcile_relationships(repo, "2")

    assert report.updated_neighbors == ["1"]
    assert report.diff.removed_previous == ["1"]
    assert repo.get_skill("1").next_skills == []
    _assert_symmetric(repo)


def test_reconcile_adds_missing_back_links_and_reports_dangling():
    repo = InMemorySkillRepository(
        skills=[
            make_skill("1"),
            make_skill("2", previous_skills=["1", "ghost"], next_skills=["3"]),
            make_skill("3"),
        ]
    )

    report = reconcile_relationships(repo, "2")

    assert report.skipped_neighbors == ["ghost"]
    assert report.diff.added_previous == ["1"]
    assert report.diff.added_next == ["3"]
    assert repo.get_skill("1").next_skills == ["2"]
    assert repo.get_skill("3").previous_skills == ["2"]


def test_reconcile_consistent_graph_writes_nothing(scenario_repo):
    sync_relationships(scenario_repo, "2", ["1"], ["3"])

    report = reconcile_relationships(scenario_repo, "2")

    assert report.updated_neighbors == []
    assert report.diff.is_empty


def test_reconcile_missing_skill(scenario_repo):
    with pytest.raises(NotFoundError):
        reconcile_relationships(scenario_repo, "404")
