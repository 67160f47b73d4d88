from vim_repeat.config import RepeatSettings
from vim_repeat.core import UNSYNCED, Revision
from vim_repeat.core.undo_redo import UNDO_PURPOSE
from vim_repeat.host import InputQueue, MemoryDocument
from vim_repeat.host.editor import REDO_KEY, UNDO_KEY, MemoryEditor
from vim_repeat.session import SessionManager


def make_editor(*, settings: RepeatSettings | None = None) -> MemoryEditor:
    editor = MemoryEditor(settings=settings)
    editor.open("main", "first")
    editor.append_line("second")
    editor.append_line("third")
    return editor


def test_undo_while_synced_stays_synced_to_new_revision() -> None:
    editor = make_editor()
    action = editor.session.register("main", "X", 2)

    carried = editor.session.wrap_undo_redo("main", UNDO_KEY)
    editor.process_input()

    revision = editor.document.current_revision()
    assert carried is True
    assert editor.session.tracker.state == Revision("main", revision)
    assert editor.session.last_action == action
    assert editor.document.text == "first\nsecond"


def test_repeat_after_undo_still_replays_action() -> None:
    editor = make_editor()
    editor.session.register("main", "X", 2)
    editor.session.wrap_undo_redo("main", UNDO_KEY)
    editor.process_input()

    outcome = editor.session.repeat("main")

    assert outcome.status == "replay"
    assert outcome.keys == "2X"


def test_undo_while_unsynced_stays_unsynced() -> None:
    editor = make_editor()

    carried = editor.session.wrap_undo_redo("main", UNDO_KEY)
    editor.process_input()

    assert carried is False
    assert editor.session.tracker.state == UNSYNCED
    assert editor.session.deferred.pending(UNDO_PURPOSE) is None
    assert editor.session.repeat("main").status == "fallback"


def test_undo_does_not_unlock_stale_action() -> None:
    editor = make_editor()
    editor.session.register("main", "X")
    editor.move_cursor(0, 1)
    editor.append_line("typed by hand")

    editor.session.wrap_undo_redo("main", UNDO_KEY)
    editor.process_input()

    assert editor.session.repeat("main").status == "fallback"


def test_redo_with_count_is_fed_before_execution() -> None:
    editor = make_editor()
    editor.session.register("main", "X")
    editor.session.wrap_undo_redo("main", UNDO_KEY, 2)
    editor.process_input()

    editor.session.wrap_undo_redo("main", REDO_KEY, 2)
    executed = editor.process_input()

    assert executed == ["2<C-R>"]
    assert editor.document.text == "first\nsecond\nthird"
    revision = editor.document.current_revision()
    assert editor.session.tracker.is_synced("main", revision)


def test_undo_appends_behind_pending_input() -> None:
    editor = make_editor()
    editor.input.feed(("j",), remap=True, insert=False)

    editor.session.wrap_undo_redo("main", UNDO_KEY)

    assert editor.input.keys == "ju"


def test_foldopen_undo_reveals_cursor() -> None:
    editor = make_editor(settings=RepeatSettings(foldopen="hor,undo"))

    editor.session.wrap_undo_redo("main", UNDO_KEY)

    assert editor.input.keys == "uzv"


def test_invalidate_cancels_pending_undo_resync() -> None:
    editor = make_editor()
    editor.session.register("main", "X")
    editor.session.wrap_undo_redo("main", UNDO_KEY)

    editor.session.invalidate()
    editor.process_input()

    assert editor.session.tracker.state == UNSYNCED


def test_refused_undo_is_reported_not_raised() -> None:
    document = MemoryDocument("main", "first")
    queue = InputQueue(limit=0)
    session = SessionManager(queue, settings=RepeatSettings())
    session.open_document("main", document)
    session.register("main", "X")

    carried = session.wrap_undo_redo("main", UNDO_KEY)

    assert carried is False
    assert queue.chunks() == ()
    assert session.deferred.pending(UNDO_PURPOSE) is None
    assert session.tracker.state == Revision("main", document.current_revision())


def test_refused_reveal_keeps_undo_out_of_queue() -> None:
    document = MemoryDocument("main", "first")
    queue = InputQueue(limit=1)
    session = SessionManager(queue, settings=RepeatSettings(foldopen="undo"))
    session.open_document("main", document)

    carried = session.wrap_undo_redo("main", UNDO_KEY)

    assert carried is False
    assert queue.keys == ""
