"""Tests for zenreader.extractors.candidates."""

from __future__ import annotations

from bs4 import BeautifulSoup


def _dense_page() -> BeautifulSoup:
    paragraph = "x" * 200
    paragraphs = "".join(f"<p>{paragraph}</p>" for _ in range(10))
    main_links = f'<a href="/a">{"l" * 25}</a><a href="/b">{"m" * 25}</a>'
    nav_links = "".join(f'<a href="/{i}">{"n" * 30}</a>' for i in range(10))
    return BeautifulSoup(
        f"<html><body><nav>{nav_links}</nav><main>{paragraphs}{main_links}</main></body></html>",
        "lxml",
    )


class TestScoring:
    def test_link_text_is_penalised(self):
        from zenreader.extractors.candidates import score_element

        soup = BeautifulSoup(f'<div>{"t" * 100}<a href="#">{"l" * 40}</a></div>', "lxml")
        assert score_element(soup.div) == 140 - 40 * 0.5

    def test_dense_main_selected_over_nav(self):
        from zenreader.extractors.candidates import select_candidate

        soup = _dense_page()
        assert select_candidate(soup) is soup.main

    def test_dense_main_score(self):
        from zenreader.extractors.candidates import rank_candidates

        ranked = rank_candidates(_dense_page())
        assert ranked[0].element.name == "main"
        assert ranked[0].score == 2000 + 50 - 25
        assert all(c.element.name != "nav" for c in ranked)

    def test_only_positive_scores_ranked(self):
        from zenreader.extractors.candidates import rank_candidates

        soup = BeautifulSoup('<div class="content"><a href="#">only links here</a></div>', "lxml")
        assert len(rank_candidates(soup)) == 1
        empty = BeautifulSoup('<div class="content"></div>', "lxml")
        assert rank_candidates(empty) == []


class TestCandidatePool:
    def test_paragraph_parent_added(self):
        from zenreader.extractors.candidates import candidate_pool

        soup = BeautifulSoup(f'<div id="story"><p>{"w" * 80}</p></div>', "lxml")
        assert soup.find(id="story") in candidate_pool(soup)

    def test_short_paragraphs_ignored(self):
        from zenreader.extractors.candidates import candidate_pool

        soup = BeautifulSoup('<div id="story"><p>short</p></div>', "lxml")
        assert candidate_pool(soup) == []

    def test_unwanted_and_chrome_excluded(self):
        from zenreader.extractors.candidates import candidate_pool

        long_text = "w" * 80
        soup = BeautifulSoup(
            f'<div class="related-stories"><p>{long_text}</p></div>'
            f'<aside><div><p>{long_text}</p></div></aside>'
            f'<footer><section><p>{long_text}</p></section></footer>',
            "lxml",
        )
        assert candidate_pool(soup) == []

    def test_deduplicated(self):
        from zenreader.extractors.candidates import candidate_pool

        soup = BeautifulSoup(
            f'<article><p>{"a" * 80}</p><p>{"b" * 80}</p></article>', "lxml",
        )
        pool = candidate_pool(soup)
        assert len(pool) == 1
        assert pool[0] is soup.article

    def test_no_candidates(self):
        from zenreader.extractors.candidates import select_candidate

        soup = BeautifulSoup("<div>tiny</div>", "lxml")
        assert select_candidate(soup) is None
