"""Tests for prompt assembly from conversation history."""
from __future__ import annotations

import copy

from sidekick.core import Role, Turn, build_conversation_context


def turns(*pairs):
    return [Turn(role=Role(role), content=content) for role, content in pairs]


def test_last_user_turn_uses_enhanced_text():
    history = turns(("user", "hi"), ("assistant", "hello"))

    context = build_conversation_context(history, "hi [file: x]")

    assert "User: hi [file: x]" in context
    assert "User: hi\n" not in context
    assert context == "User: hi [file: x]\n\nAssistant: hello\n\n"


def test_exact_rendering_when_user_speaks_last():
    history = turns(("user", "one"), ("assistant", "two"), ("user", "three"))

    context = build_conversation_context(history, "three + files")

    assert context == "User: one\n\nAssistant: two\n\nUser: three + files\n\n"


def test_only_the_most_recent_user_turn_is_replaced():
    history = turns(("user", "first"), ("assistant", "reply"), ("user", "second"))

    context = build_conversation_context(history, "ENHANCED")

    assert context.count("ENHANCED") == 1
    assert "User: first" in context


def test_history_is_not_mutated():
    history = turns(("user", "hi"), ("assistant", "hello"))
    snapshot = copy.deepcopy(history)

    build_conversation_context(history, "hi plus files")

    assert history == snapshot


def test_empty_history():
    assert build_conversation_context([], "ignored") == ""


def test_history_without_user_turns_is_rendered_verbatim():
    history = turns(("assistant", "welcome"))

    assert build_conversation_context(history, "ignored") == "Assistant: welcome\n\n"


def test_turn_round_trips_through_dict():
    turn = Turn(role=Role.ASSISTANT, content="done")

    restored = Turn.from_dict(turn.to_dict())

    assert restored == turn
