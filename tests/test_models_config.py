import pytest

from vim_repeat.config import DEFAULT_RESYNC_EVENTS, RepeatSettings
from vim_repeat.core import ActionSequence, LifecycleEvent
from vim_repeat.core.models import normalize_count
from vim_repeat.host import RegisterBank


def test_parse_keeps_key_notation_as_single_tokens() -> None:
    sequence = ActionSequence.parse('<Plug>(SurroundRepeat)"<CR>x')

    assert sequence.tokens == ("<Plug>(SurroundRepeat)", '"', "<CR>", "x")
    assert str(sequence) == '<Plug>(SurroundRepeat)"<CR>x'


def test_parse_treats_unclosed_angle_as_literal() -> None:
    assert ActionSequence.parse("a<b").tokens == ("a", "<", "b")


def test_empty_sequence_is_rejected() -> None:
    with pytest.raises(ValueError):
        ActionSequence.parse("")


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0), (0, 0), (-2, 0), (True, 0), ("", 0), ("x", 0), (" 9 ", 9), (14, 14)],
)
def test_normalize_count(value: object, expected: int) -> None:
    assert normalize_count(value) == expected


@pytest.mark.parametrize(
    "clipboard, expected",
    [("", '"'), ("unnamed", "*"), ("unnamedplus", "+"), ("unnamed,unnamedplus", "+")],
)
def test_default_register_follows_clipboard(clipboard: str, expected: str) -> None:
    assert RepeatSettings(clipboard=clipboard).default_register == expected


def test_settings_from_env() -> None:
    settings = RepeatSettings.from_env(
        {
            "VIM_REPEAT_CLIPBOARD": "unnamed",
            "VIM_REPEAT_FOLDOPEN": "all",
            "VIM_REPEAT_NATIVE_REPEAT": "<Plug>(Dot)",
            "VIM_REPEAT_RESYNC_EVENTS": "CursorMoved",
        }
    )

    assert settings.default_register == "*"
    assert settings.reveal_on_undo is True
    assert settings.native_repeat == "<Plug>(Dot)"
    assert settings.resync_events == (LifecycleEvent.CURSOR_MOVED,)


def test_settings_from_empty_env_uses_defaults() -> None:
    settings = RepeatSettings.from_env({})

    assert settings == RepeatSettings()
    assert settings.resync_events == DEFAULT_RESYNC_EVENTS
    assert settings.reveal_on_undo is False


def test_settings_reject_unknown_resync_event() -> None:
    with pytest.raises(ValueError):
        RepeatSettings.from_env({"VIM_REPEAT_RESYNC_EVENTS": "CursorMoved,Bogus"})


def test_register_bank_keeps_expression_apart() -> None:
    bank = RegisterBank()

    bank.yank_to("a", "word")
    bank.yank_to("=", "3*4")

    assert bank.get("a") == "word"
    assert bank.get('"') == "word"
    assert bank.expression_source() == "3*4"
