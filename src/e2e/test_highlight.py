import html

import pytest
from markupsafe import Markup

from chatsearch.highlight import find_matches, highlight


def _strip(marked: str) -> str:
    return html.unescape(marked.replace("<mark>", "").replace("</mark>", ""))


def test_empty_query_returns_text_untouched():
    text = "<b>Tom & Jerry</b>"
    out = highlight(text, "")
    assert out == text
    assert not isinstance(out, Markup)


def test_wraps_each_occurrence_case_insensitively():
    assert highlight("Hello hello HELLO", "hello") == (
        "<mark>Hello</mark> <mark>hello</mark> <mark>HELLO</mark>"
    )


def test_escapes_plain_and_marked_text_once():
    out = highlight("a<b> & <b>c", "<b>")
    assert out == "a<mark>&lt;b&gt;</mark> &amp; <mark>&lt;b&gt;</mark>c"
    assert isinstance(out, Markup)


def test_no_occurrence_escapes_whole_text():
    assert highlight("5 > 3", "zzz") == "5 &gt; 3"


def test_overlapping_hits_are_detected_but_consumed_once():
    assert find_matches("aaaa", "aa") == [0, 1, 2]
    assert highlight("aaaa", "aa") == "<mark>aa</mark><mark>aa</mark>"
    assert highlight("aaa", "aa") == "<mark>aa</mark>a"


def test_regex_metacharacters_are_literal():
    assert find_matches("cost (USD) $5.00", "(usd)") == [5]
    assert highlight("1+1=2", "+") == "1<mark>+</mark>1=2"


def test_whitespace_query_marks_spaces():
    assert highlight("a b", " ") == "a<mark> </mark>b"


@pytest.mark.parametrize("text,query", [
    ("Tom & \"Jerry\" <3 it's fine", "jerry"),
    ("<mark>literal</mark> markers", "mark"),
    ("Привіт, світ! привіт", "ПРИВІТ"),
    ("aaaaa", "aa"),
    ("x&amp;y", "&"),
])
def test_strip_and_unescape_restores_text(text, query):
    assert find_matches(text, query)
    assert _strip(highlight(text, query)) == text
