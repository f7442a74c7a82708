import asyncio

import pytest
from fakes import (
    GENERIC_URL,
    MESSENGER_URL,
    WA_EDITABLE,
    WHATSAPP_URL,
    FakeDocument,
    FakeNode,
    composer,
    plain_input,
)

from chataide.errors import InjectionUnverified, NoInputFound
from chataide.injector import inject_reply, verified
from chataide.models import InjectionStrategy

ROLE_TEXTBOX = "div[role='textbox'][contenteditable='true']"


def inject(document, text):
    return asyncio.run(inject_reply(document, text))


def test_plain_input_single_attempt():
    field = plain_input()
    result = inject(FakeDocument(GENERIC_URL, [field]), "see you soon")

    assert result.success is True
    assert len(result.log) == 1
    assert result.log[0].strategy is InjectionStrategy.VALUE_ASSIGN
    assert result.log[0].observed_content == "see you soon"
    assert result.selector == "input[type='text']"
    assert field.calls == ["focus", "value_assign", "input"]


def test_plain_input_readback_mismatch_fails():
    field = plain_input(effective=set())
    result = inject(FakeDocument(GENERIC_URL, [field]), "hello")

    assert result.success is False
    assert isinstance(result.error, InjectionUnverified)
    assert [a.succeeded for a in result.log] == [False]


def test_no_target_means_no_attempt():
    result = inject(FakeDocument(GENERIC_URL, [FakeNode("text", matches=("div",))]), "hi")

    assert result.success is False
    assert isinstance(result.error, NoInputFound)
    assert result.log == []
    assert result.site == "generic"


def test_native_insert_wins_first():
    box = composer()
    result = inject(FakeDocument(GENERIC_URL, [box]), "hey")

    assert result.success is True
    assert [a.strategy for a in result.log] == [InjectionStrategy.NATIVE_INSERT]
    assert box.content == "hey"
    # caret + notifications after the write
    assert box.calls == ["focus", "native_insert", "caret", "input"]


def test_substring_readback_counts_as_verified():
    box = composer("draft ")
    result = inject(FakeDocument(GENERIC_URL, [box]), "hello")
    assert result.success is True
    assert result.log[0].observed_content == "draft hello"


def test_falls_through_to_content_replacement():
    box = composer(effective={"content_replace"}, native_result=False)
    result = inject(FakeDocument(GENERIC_URL, [box]), "ok!")

    assert result.success is True
    assert [(a.strategy, a.succeeded) for a in result.log] == [
        (InjectionStrategy.NATIVE_INSERT, False),
        (InjectionStrategy.CONTENT_REPLACE, True),
    ]
    assert result.log[0].detail == "insertText meldete false"
    assert result.log[1].detail == "text_content"


def test_content_replacement_prefers_single_text_child():
    box = composer("old", effective={"content_replace"}, single_text_child=True)
    result = inject(FakeDocument(GENERIC_URL, [box]), "new")
    assert result.log[1].detail == "single_text_node"
    assert box.content == "new"


def test_range_splice_is_last_resort():
    box = composer(effective={"range_splice"})
    result = inject(FakeDocument(GENERIC_URL, [box]), "spliced")

    assert result.success is True
    assert [a.strategy for a in result.log] == [
        InjectionStrategy.NATIVE_INSERT,
        InjectionStrategy.CONTENT_REPLACE,
        InjectionStrategy.RANGE_SPLICE,
    ]


def test_thrown_error_is_logged_and_next_strategy_runs():
    box = composer(raises={"native_insert"})
    result = inject(FakeDocument(GENERIC_URL, [box]), "fine")

    assert result.success is True
    assert result.log[0].error == "native_insert kaputt"
    assert result.log[0].succeeded is False
    assert result.log[1].succeeded is True


def test_all_strategies_unverified_returns_full_log():
    box = composer("something else", effective=set())
    result = inject(FakeDocument(GENERIC_URL, [box]), "reply")

    assert result.success is False
    assert len(result.log) == 3
    assert all(not a.succeeded for a in result.log)
    assert all(a.observed_content == "something else" for a in result.log)
    assert isinstance(result.error, InjectionUnverified)
    assert result.error.attempts == result.log


def test_whatsapp_prefers_footer_composer_over_search():
    search = composer(within=("header",))
    chat = composer(within=("footer",))
    result = inject(FakeDocument(WHATSAPP_URL, [search, chat]), "hi")

    assert result.success is True
    assert result.selector == "whatsapp-preferred"
    assert chat.content == "hi"
    assert search.content == ""


def test_whatsapp_excludes_search_even_with_message_label():
    box = composer(attrs={"title": "Type a message"})
    search = composer(attrs={"aria-label": "Search messages"}, within=("[role='search']",))
    result = inject(FakeDocument(WHATSAPP_URL, [box, search]), "yo")

    assert result.selector == "whatsapp-preferred"
    assert box.content == "yo"
    assert search.content == ""


def test_whatsapp_falls_back_to_last_visible_editable():
    first = composer()
    last = composer()
    hidden = composer(visible=False)
    result = inject(FakeDocument(WHATSAPP_URL, [first, last, hidden]), "x")

    assert result.selector == "whatsapp-fallback"
    assert last.content == "x"
    assert first.content == ""


def test_whatsapp_ignores_detached_candidates():
    gone = composer(within=("footer",), detached=True)
    result = inject(FakeDocument(WHATSAPP_URL, [gone]), "x")
    assert isinstance(result.error, NoInputFound)


def test_whatsapp_drops_node_detached_after_visibility_check():
    gone = composer(within=("footer",), detaches_after_visible=True)
    box = composer(within=("footer",))
    result = inject(FakeDocument(WHATSAPP_URL, [box, gone]), "hi")

    assert result.success is True
    assert result.selector == "whatsapp-preferred"
    assert box.content == "hi"


def test_whatsapp_all_nodes_detaching_is_a_typed_failure():
    gone = composer(attrs={"title": "Nachricht"}, detaches_after_visible=True)
    result = inject(FakeDocument(WHATSAPP_URL, [gone]), "hi")

    assert result.success is False
    assert isinstance(result.error, NoInputFound)


def test_messenger_uses_selector_priority():
    generic_box = composer()
    textbox = composer(matches=(ROLE_TEXTBOX, WA_EDITABLE))
    result = inject(FakeDocument(MESSENGER_URL, [generic_box, textbox]), "sure")

    assert result.selector == ROLE_TEXTBOX
    assert textbox.content == "sure"


def test_messenger_skips_invisible_matches():
    hidden = composer(matches=(ROLE_TEXTBOX,), visible=False)
    visible_box = composer()
    result = inject(FakeDocument(MESSENGER_URL, [hidden, visible_box]), "sure")
    assert result.selector == WA_EDITABLE
    assert visible_box.content == "sure"


def test_focus_failure_does_not_abort():
    box = composer(focus_fails=5)
    result = inject(FakeDocument(GENERIC_URL, [box]), "still")
    assert result.success is True
    assert box.calls.count("focus") == 3


@pytest.mark.parametrize(
    "observed, expected, ok",
    [
        ("hello", "hello", True),
        ("  hello\n", "hello", True),
        ("hello\xa0world", "hello world", True),
        ("prefix hello", "hello", True),
        ("", "hello", False),
        (None, "hello", False),
        ("hel", "hello", False),
        ("anything", "", False),
    ],
)
def test_verified(observed, expected, ok):
    assert verified(observed, expected) is ok
