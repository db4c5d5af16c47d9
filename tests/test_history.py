from __future__ import annotations

import pytest

from geo_annotator.context import AnnotationContext
from geo_annotator.core import HistorySnapshot, Marker, MarkerDraft
from geo_annotator.services import HistoryManager


def snapshot_of(*titles: str) -> HistorySnapshot:
    markers = [Marker(id=str(i), lat=0.0, lng=0.0, title=title) for i, title in enumerate(titles)]
    return HistorySnapshot.from_markers(markers)


@pytest.fixture()
def context() -> AnnotationContext:
    return AnnotationContext.in_memory().bootstrap()


def test_empty_history_has_nothing_to_undo_or_redo():
    history = HistoryManager()
    assert history.index == -1
    assert history.undo() is None
    assert history.redo() is None
    assert history.current is None


def test_undo_redo_walk_the_cursor():
    history = HistoryManager()
    for titles in [(), ("A",), ("A", "B")]:
        history.record(snapshot_of(*titles))

    assert history.undo() == snapshot_of("A")
    assert history.undo() == snapshot_of()
    assert history.undo() is None
    assert history.index == 0

    assert history.redo() == snapshot_of("A")
    assert history.redo() == snapshot_of("A", "B")
    assert history.redo() is None


def test_recording_after_undo_discards_redo_branch():
    history = HistoryManager()
    history.record(snapshot_of())
    history.record(snapshot_of("A"))
    history.record(snapshot_of("A", "B"))

    history.undo()
    history.record(snapshot_of("A", "C"))

    assert history.redo() is None
    assert history.entries == (snapshot_of(), snapshot_of("A"), snapshot_of("A", "C"))


def test_history_is_capped_at_fifty_entries():
    history = HistoryManager()
    snapshots = [snapshot_of(f"S{i}") for i in range(60)]
    for snapshot in snapshots:
        history.record(snapshot)

    assert len(history) == 50
    assert history.entries == tuple(snapshots[10:])
    assert history.index == 49
    assert history.current == snapshots[-1]
    assert not history.can_redo


def test_cursor_tracks_same_snapshot_when_oldest_is_dropped():
    history = HistoryManager(limit=3)
    for name in "ABC":
        history.record(snapshot_of(name))
    history.record(snapshot_of("D"))

    assert history.entries == (snapshot_of("B"), snapshot_of("C"), snapshot_of("D"))
    assert history.undo() == snapshot_of("C")


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        HistoryManager(limit=0)


def test_snapshot_excludes_identity():
    snapshot = snapshot_of("A")
    assert '"id"' not in snapshot.payload
    assert snapshot.drafts() == [MarkerDraft(0.0, 0.0, "A")]
    assert len(snapshot) == 1


def test_context_undo_restores_state_after_first_add(context: AnnotationContext):
    context.store.add(MarkerDraft(1.0, 1.0, "A"))
    after_a = context.store.snapshot()
    context.store.add(MarkerDraft(2.0, 2.0, "B"))

    assert context.undo() is True
    assert context.store.snapshot() == after_a

    assert context.redo() is True
    assert [marker.title for marker in context.store.list()] == ["A", "B"]


def test_context_add_after_undo_makes_redo_a_noop(context: AnnotationContext):
    context.store.add(MarkerDraft(1.0, 1.0, "A"))
    context.store.add(MarkerDraft(2.0, 2.0, "B"))
    context.undo()
    context.store.add(MarkerDraft(3.0, 3.0, "C"))

    assert context.redo() is False
    assert [marker.title for marker in context.store.list()] == ["A", "C"]


def test_undo_reassigns_ids_and_persists(context: AnnotationContext):
    context.store.add(MarkerDraft(1.0, 1.0, "A"))
    original_id = context.store.list()[0].id
    context.store.remove(original_id)

    context.undo()

    restored = context.store.list()
    assert [marker.title for marker in restored] == ["A"]
    assert restored[0].id != original_id
    assert [draft.title for draft in context.persistence.load()] == ["A"]


def test_undo_past_initial_state_is_noop(context: AnnotationContext):
    assert context.undo() is False
    assert context.history_state() == {"index": 0, "size": 1, "can_undo": False, "can_redo": False}
