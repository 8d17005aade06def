import logging

from doc_assistant.models import Query, Section
from doc_assistant.query.scoring import (
    HEADING_BONUS,
    TERM_HIT_POINTS,
    looks_like_heading,
    rank_sections,
    sample_indices,
    score_sections,
)


def _sections(*texts):
    return [Section(index=i, text=t) for i, t in enumerate(texts)]


def test_whole_word_case_insensitive_hits():
    query = Query.from_text("photosynthesis")
    sections = _sections(
        "plants use photosynthesis; PHOTOSYNTHESIS needs light",
        "photosynthesisX is not a whole word",
        "nothing relevant here",
    )
    scored = score_sections(query, sections)
    assert [s.score for s in scored] == [2 * TERM_HIT_POINTS, 0, 0]


def test_heading_bonus_applies_to_short_capitalised_sections():
    query = Query.from_text("photosynthesis")
    sections = _sections("Photosynthesis", "Overview", "a" * 120)
    scored = score_sections(query, sections)
    assert scored[0].score == TERM_HIT_POINTS + HEADING_BONUS
    assert scored[1].score == HEADING_BONUS
    assert scored[2].score == 0


def test_heading_bonus_can_require_term_hits():
    query = Query.from_text("photosynthesis")
    sections = _sections("Photosynthesis", "Chapter 7", "photosynthesis in the leaf")
    scored = score_sections(query, sections, heading_requires_hits=True)
    assert [s.score for s in scored] == [TERM_HIT_POINTS + HEADING_BONUS, 0, TERM_HIT_POINTS]


def test_looks_like_heading():
    assert looks_like_heading("Chapter One")
    assert not looks_like_heading("chapter one")
    assert not looks_like_heading("C" + "x" * 120)
    assert not looks_like_heading("")


def test_scoring_is_deterministic():
    query = Query.from_text("light energy chlorophyll")
    sections = _sections(
        "light drives the energy conversion in chlorophyll",
        "energy energy energy",
        "Chlorophyll",
        "unrelated text about rocks",
    )
    first = score_sections(query, sections)
    second = score_sections(query, sections)
    assert first == second
    assert rank_sections(first) == rank_sections(second)


def test_scored_sections_keep_input_order_and_indices():
    query = Query.from_text("energy")
    sections = _sections("no match", "energy", "no match", "energy energy")
    scored = score_sections(query, sections)
    assert [s.index for s in scored] == [0, 1, 2, 3]
    assert [s.text for s in scored] == [s.text for s in sections]


def test_ranking_is_stable_for_equal_scores():
    sections = [
        Section(index=0, text="a", score=2),
        Section(index=1, text="b", score=4),
        Section(index=2, text="c", score=2),
        Section(index=3, text="d", score=4),
        Section(index=4, text="e", score=0),
    ]
    ranked = rank_sections(sections)
    assert [s.index for s in ranked] == [1, 3, 0, 2, 4]


def test_sample_indices_uniform_stride():
    assert sample_indices(5, 10) == [0, 1, 2, 3, 4]
    assert sample_indices(10, 5) == [0, 2, 4, 6, 8]
    assert sample_indices(10, 0) == []
    sample = sample_indices(2500, 1000)
    assert len(sample) == 1000
    assert sample == sorted(set(sample))


def test_unsampled_sections_score_zero():
    query = Query.from_text("energy")
    sections = _sections(*(["energy"] * 10))
    scored = score_sections(query, sections, sample_cap=5)
    sampled = set(sample_indices(10, 5))
    for pos, section in enumerate(scored):
        if pos in sampled:
            assert section.score > 0
        else:
            assert section.score == 0


def test_score_sections_logs_summary(caplog):
    caplog.set_level(logging.DEBUG)
    logger = logging.getLogger("test_scoring")
    score_sections(Query.from_text("energy"), _sections("energy", "rocks"), logger=logger)
    assert "Scored 2/2 sections" in caplog.text
