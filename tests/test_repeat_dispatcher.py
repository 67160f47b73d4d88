from typing import Sequence

import pytest

from vim_repeat.config import RepeatSettings
from vim_repeat.core import LifecycleEvent
from vim_repeat.host import (
    InputQueue,
    MemoryDocument,
    RegisterBank,
    ReplayRejectedError,
)
from vim_repeat.session import SessionManager


def make_session(
    *,
    settings: RepeatSettings | None = None,
    registers: RegisterBank | None = None,
) -> tuple[SessionManager, MemoryDocument, InputQueue]:
    document = MemoryDocument("main", "one\ntwo")
    queue = InputQueue()
    session = SessionManager(
        queue, settings=settings or RepeatSettings(), expressions=registers
    )
    session.open_document("main", document)
    return session, document, queue


class RejectingSink:
    def feed(self, tokens: Sequence[str], *, remap: bool, insert: bool) -> None:
        raise ReplayRejectedError("input locked", tokens=tokens)

    def reserve(self, tokens: Sequence[str]) -> None:
        raise ReplayRejectedError("input locked", tokens=tokens)


@pytest.mark.parametrize("count, expected", [(0, "."), (3, "3."), (12, "12.")])
def test_fallback_without_registration(count: int, expected: str) -> None:
    session, _, queue = make_session()

    outcome = session.repeat("main", count)

    assert outcome.status == "fallback"
    assert outcome.keys == expected
    assert queue.keys == expected
    assert queue.chunks()[0].remap is False


def test_fallback_after_out_of_band_change() -> None:
    session, document, queue = make_session()
    session.register("main", "X", 2)
    document.append_line("operator finished")
    session.notify("main", LifecycleEvent.TEXT_CHANGED)
    document.append_line("typed by hand")
    session.notify("main", LifecycleEvent.TEXT_CHANGED)

    outcome = session.repeat("main")

    assert outcome.status == "fallback"
    assert queue.keys == "."


@pytest.mark.parametrize(
    "explicit, recorded, expected",
    [(4, 2, 4), (4, 0, 4), (0, 2, 2), (0, 0, 0)],
)
def test_count_precedence(explicit: int, recorded: int, expected: int) -> None:
    session, _, _ = make_session()
    session.register("main", "X", recorded)

    outcome = session.repeat("main", explicit)

    assert outcome.status == "replay"
    assert outcome.count == expected
    assert outcome.keys == (str(expected) if expected else "") + "X"


def test_replay_is_inserted_ahead_of_pending_input() -> None:
    session, _, queue = make_session()
    queue.feed(("j",), remap=True, insert=False)
    session.register("main", "<Plug>(Swap)", 3)

    session.repeat("main")

    chunks = queue.chunks()
    assert [chunk.tokens for chunk in chunks] == [("3",), ("<Plug>(Swap)",), ("j",)]
    assert chunks[0].remap is False
    assert chunks[1].remap is True


def test_replay_only_uses_latest_registration() -> None:
    session, _, queue = make_session()
    session.register("main", "A", 5)
    session.register("main", "B")

    outcome = session.repeat("main")

    assert outcome.keys == "B"
    assert "A" not in queue.keys


def test_explicit_register_overrides_association() -> None:
    session, _, _ = make_session()
    session.register("main", "Y")
    session.associate_register("Y", "b")

    outcome = session.repeat("main", 0, "a")

    assert outcome.register == "a"
    assert outcome.keys == '"aY'


def test_matching_association_supplies_register() -> None:
    session, _, _ = make_session()
    session.register("main", "Y", 2)
    session.associate_register("Y", "b")

    outcome = session.repeat("main", 0, '"')

    assert outcome.keys == '"b2Y'


def test_association_for_other_sequence_is_ignored() -> None:
    session, _, _ = make_session()
    session.associate_register("Z", "b")
    session.register("main", "Y")

    outcome = session.repeat("main")

    assert outcome.register is None
    assert outcome.keys == "Y"


@pytest.mark.parametrize("name", ["", '"'])
def test_association_with_empty_or_default_name_adds_no_prefix(name: str) -> None:
    session, _, _ = make_session()
    session.register("main", "Y")
    session.associate_register("Y", name)

    outcome = session.repeat("main")

    assert outcome.register is None
    assert outcome.keys == "Y"


def test_clipboard_register_counts_as_default() -> None:
    session, _, _ = make_session(settings=RepeatSettings(clipboard="unnamedplus"))
    session.register("main", "Y")
    session.associate_register("Y", "c")

    plus = session.repeat("main", 0, "+")
    unnamed = session.repeat("main", 0, '"')

    assert plus.keys == '"cY'
    assert unnamed.register == '"'


def test_expression_register_is_read_fresh() -> None:
    registers = RegisterBank()
    session, _, _ = make_session(registers=registers)
    session.register("main", "Y")
    session.associate_register("Y", "=")

    registers.yank_to("=", "1+1")
    first = session.repeat("main")
    registers.yank_to("=", "strftime('%H')")
    second = session.repeat("main")

    assert first.keys == '"=1+1<CR>Y'
    assert second.keys == "\"=strftime('%H')<CR>Y"
    assert second.tokens[-2:] == ("<CR>", "Y")


def test_native_repeat_token_is_configurable() -> None:
    session, _, _ = make_session(settings=RepeatSettings(native_repeat="<Plug>(Dot)"))

    outcome = session.repeat("main", 2)

    assert outcome.tokens == ("2", "<Plug>(Dot)")


def test_rejected_input_becomes_error_outcome() -> None:
    document = MemoryDocument("main")
    session = SessionManager(RejectingSink(), settings=RepeatSettings())
    session.open_document("main", document)
    session.register("main", "X")

    outcome = session.repeat("main")

    assert outcome.status == "error"
    assert outcome.message == "input locked"


def test_refused_replay_queues_nothing() -> None:
    queue = InputQueue(limit=3)
    session = SessionManager(queue, settings=RepeatSettings())
    session.open_document("main", MemoryDocument("main"))
    session.register("main", "abc")

    outcome = session.repeat("main", 5)

    assert outcome.status == "error"
    assert outcome.tokens == ("5", "a", "b", "c")
    assert queue.chunks() == ()


def test_replay_survives_deferred_resync() -> None:
    session, document, _ = make_session()
    session.register("main", "X", 2)
    document.append_line("operator finished")
    session.notify("main", LifecycleEvent.TEXT_CHANGED)

    outcome = session.repeat("main", 0)

    assert outcome.status == "replay"
    assert outcome.keys == "2X"
