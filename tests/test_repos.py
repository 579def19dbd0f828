"""Tests for the in-process item directory and build history."""

import pytest

from conductor.errors import ConflictError, NotFoundError
from conductor.events import ItemEventBus
from conductor.repos.build_repo import BuildHistoryRepository, QueueScheduler
from conductor.repos.item_repo import ItemRepository, SubProject


# ---------------------------------------------------------------------------
# ItemRepository
# ---------------------------------------------------------------------------


class TestItemRepository:
    def test_add_and_find(self):
        repo = ItemRepository(ItemEventBus())
        item = repo.add_item("jobA")
        assert repo.find_project("jobA") is item
        assert repo.find_project("missing") is None

    def test_all_items_in_insertion_order(self):
        repo = ItemRepository(ItemEventBus())
        for name in ("b", "a", "c"):
            repo.add_item(name)
        assert [name for name, _ in repo.all_items()] == ["b", "a", "c"]

    def test_duplicate_add_conflicts(self):
        repo = ItemRepository(ItemEventBus())
        repo.add_item("jobA")
        with pytest.raises(ConflictError):
            repo.add_item("jobA")

    def test_delete_missing_raises(self):
        repo = ItemRepository(ItemEventBus())
        with pytest.raises(NotFoundError):
            repo.delete_item("ghost")

    def test_rename_keeps_handle_identity(self):
        repo = ItemRepository(ItemEventBus())
        item = repo.add_item("old")
        repo.rename_item("old", "new")
        assert repo.find_project("new") is item
        assert item.name == "new"
        assert repo.find_project("old") is None

    def test_rename_onto_existing_conflicts(self):
        repo = ItemRepository(ItemEventBus())
        repo.add_item("a")
        repo.add_item("b")
        with pytest.raises(ConflictError):
            repo.rename_item("a", "b")
        assert repo.find_project("a") is not None

    def test_rename_to_same_name_publishes_nothing(self):
        bus = ItemEventBus()
        repo = ItemRepository(bus)
        repo.add_item("a")
        assert repo.rename_item("a", "a") == []

    def test_delete_publishes_after_removal(self):
        bus = ItemEventBus()
        repo = ItemRepository(bus)
        repo.add_item("a")
        seen = []

        class _Probe:
            def on_deleted(self, item):
                seen.append(repo.find_project(item.name))
                return True

            def on_renamed(self, item, old_name, new_name):
                return False

        probe = _Probe()
        bus.subscribe(probe)
        assert repo.delete_item("a") == [probe]
        assert seen == [None]


# ---------------------------------------------------------------------------
# BuildHistoryRepository
# ---------------------------------------------------------------------------


class TestBuildHistory:
    def test_numbers_are_per_master(self):
        history = BuildHistoryRepository(QueueScheduler())
        assert history.new_build("m1").number == 1
        assert history.new_build("m1").number == 2
        assert history.new_build("m2").number == 1

    def test_lookup_by_number(self):
        history = BuildHistoryRepository(QueueScheduler())
        build = history.new_build("m1")
        assert history.get_build_by_number("m1", 1) is build
        assert history.get_build_by_number("m1", 2) is None
        assert history.get_build_by_number("other", 1) is None

    def test_list_builds_newest_first(self):
        history = BuildHistoryRepository(QueueScheduler())
        for _ in range(3):
            history.new_build("m1")
        assert [b.number for b in history.list_builds("m1")] == [3, 2, 1]

    def test_forget_keeps_numbering_monotonic(self):
        history = BuildHistoryRepository(QueueScheduler())
        history.new_build("m1")
        history.forget("m1")
        assert history.get_build_by_number("m1", 1) is None
        assert history.new_build("m1").number == 2

    def test_rebuild_records_and_schedules(self):
        scheduler = QueueScheduler()
        history = BuildHistoryRepository(scheduler)
        build = history.new_build("m1")
        build.rebuild(SubProject("jobA"))
        assert build.rebuilds == ["jobA"]
        assert scheduler.entries()[0].sub_project == "jobA"
        assert build.to_dict()["rebuilds"] == ["jobA"]
