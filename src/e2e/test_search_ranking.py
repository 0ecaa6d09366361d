import random

import pytest

from chatsearch.index import build_index
from chatsearch.search import count_matches, search, search_scored, select_candidates
from chatsearch.normalize import generate_grams


@pytest.fixture
def small_index():
    return build_index(["Hello world", "Goodbye world", "asdf"], str)


def test_world_returns_both_exact_matches_in_id_order(small_index):
    assert search(small_index, "world", 10) == ["Hello world", "Goodbye world"]
    scored = search_scored(small_index, "world", 10)
    assert [r.exact_match for r in scored] == [True, True]
    assert all(1.0 < r.score <= 2.0 for r in scored)


@pytest.mark.parametrize("n", [0, 1, 2, 3, 10])
def test_blank_query_passes_items_through(small_index, n):
    assert search(small_index, "", n) == list(small_index.items[:n])
    assert search(small_index, "   ", n) == list(small_index.items[:n])


def test_limit_zero_or_negative_is_empty(small_index):
    assert search(small_index, "world", 0) == []
    assert search(small_index, "world", -5) == []
    assert search(small_index, "", -1) == []


def test_no_overlap_is_empty(small_index):
    assert search(small_index, "zzqx", 10) == []
    assert search_scored(small_index, "ЖЖЖЖ", 10) == []


def test_unique_exact_match_ranks_first():
    corpus = [
        "the quick brown fox",
        "quick brown dogs",
        "a quick brownie recipe",
        "slow green turtle",
    ]
    idx = build_index(corpus, str)
    scored = search_scored(idx, "BROWN FOX", 10)
    assert scored[0].item == "the quick brown fox"
    assert scored[0].exact_match is True
    assert all(not r.exact_match for r in scored[1:])


def test_fuzzy_match_without_exact_hit():
    idx = build_index(["meeting tomorrow at noon", "lunch today"], str)
    scored = search_scored(idx, "meetng tomorow", 5)
    assert scored and scored[0].item == "meeting tomorrow at noon"
    assert scored[0].exact_match is False
    assert 0.1 < scored[0].score < 1.0


def test_weak_fuzzy_matches_are_dropped():
    # shares only the padding-edge grams with the query
    idx = build_index(["a very long message about many different unrelated topics"], str)
    assert search(idx, "axe", 5) == []


def test_exact_hit_is_kept_even_with_low_similarity():
    # 400 distinct CJK characters give the text hundreds of unrelated grams
    long_text = "ab " + "".join(chr(0x4E00 + i) for i in range(400))
    idx = build_index([long_text], str)
    scored = search_scored(idx, "ab", 5)
    assert len(scored) == 1
    assert scored[0].exact_match
    assert 1.0 < scored[0].score < 1.1


def test_ties_break_by_ascending_item_id():
    idx = build_index(["same text", "other", "same text", "same text"], str)
    assert [r.item_id for r in search_scored(idx, "same text", 10)] == [0, 2, 3]


def test_search_is_deterministic():
    rng = random.Random(7)
    words = ["alpha", "beta", "gamma", "delta", "omega", "sigma"]
    corpus = [" ".join(rng.choice(words) for _ in range(4)) for _ in range(300)]
    idx = build_index(corpus, str)
    first = search_scored(idx, "gamma delt", 25)
    for _ in range(3):
        assert search_scored(idx, "gamma delt", 25) == first


def test_results_are_sorted_exact_then_score():
    corpus = ["world", "worlds apart", "word", "old world order", "wordl"]
    idx = build_index(corpus, str)
    scored = search_scored(idx, "world", 10)
    keys = [(not r.exact_match, -r.score, r.item_id) for r in scored]
    assert keys == sorted(keys)


def test_candidate_selection_orders_by_count_then_id(small_index):
    counts = count_matches(small_index, generate_grams("world"))
    assert set(counts) == {0, 1}
    picked = select_candidates(counts, 1)
    assert [c.item_id for c in picked] == [0]
    assert select_candidates(counts, 0) == []


def test_projection_failure_during_query_skips_candidate():
    state = {"broken": False}

    def project(item):
        if state["broken"] and item == "Goodbye world":
            raise ValueError("malformed record")
        return item

    idx = build_index(["Hello world", "Goodbye world"], project)
    state["broken"] = True
    skipped = []
    assert search(idx, "world", 10, on_skip=skipped.append) == ["Hello world"]
    assert [(s.item_id, s.stage) for s in skipped] == [(1, "query")]


def test_large_corpus_bounds_recomputation():
    rng = random.Random(42)
    filler = ["lorem", "ipsum", "dolor", "sit", "amet", "consectetur", "adipiscing"]
    corpus = []
    for i in range(10_000):
        words = [rng.choice(filler) for _ in range(5)]
        if i % 100 == 0:
            words.insert(2, "xylophone")
        corpus.append(" ".join(words))

    calls = {"n": 0}

    def project(text):
        calls["n"] += 1
        return text

    idx = build_index(corpus, project)
    calls["n"] = 0

    scored = search_scored(idx, "xylophone", 50)
    assert len(scored) <= 50
    assert calls["n"] <= 50 * 3
    flags = [r.exact_match for r in scored]
    assert flags == sorted(flags, reverse=True)
    assert sum(flags) == 50


def test_non_string_projection_during_query_is_reported():
    state = {"broken": False}

    def project(item):
        return None if state["broken"] and item == "Goodbye world" else item

    idx = build_index(["Hello world", "Goodbye world"], project)
    state["broken"] = True
    skipped = []
    assert search(idx, "world", 10, on_skip=skipped.append) == ["Hello world"]
    assert [(s.item_id, s.stage) for s in skipped] == [(1, "query")]
    assert skipped[0].error.startswith("TypeError:")
