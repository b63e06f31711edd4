"""Tests for zenreader.extractors.sanitizer."""

from __future__ import annotations

from bs4 import BeautifulSoup


def _sanitize(html: str):
    from zenreader.extractors.sanitizer import sanitize

    soup = BeautifulSoup(f"<html><body><div id='root'>{html}</div></body></html>", "lxml")
    return sanitize(soup.find(id="root"))


class TestAllowList:
    def test_container(self):
        from zenreader.extractors.sanitizer import CONTAINER_CLASS

        out = _sanitize("<p>Hello</p>")
        assert out.name == "div"
        assert out["class"] == [CONTAINER_CLASS]

    def test_only_allowed_tags_in_output(self):
        from zenreader.extractors.sanitizer import ALLOWED_TAGS

        out = _sanitize(
            "<section><h2>Title</h2><p>Text <u>under</u> <font>old</font></p>"
            "<ul><li>one</li></ul><table><tr><td>cell</td></tr></table></section>",
        )
        assert {tag.name for tag in out.find_all(True)} <= ALLOWED_TAGS

    def test_disallowed_tags_unwrapped(self):
        out = _sanitize("<p>Text <u>under</u></p>")
        assert out.find("u") is None
        assert "under" in out.get_text()

    def test_words_do_not_run_together(self):
        out = _sanitize("<p><span>one</span><span>two</span></p>")
        assert "one two" in out.get_text()

    def test_stripped_elements_vanish_with_children(self):
        out = _sanitize(
            "<p>keep</p><script>bad()</script><form><p>form text</p></form>"
            "<nav><p>nav text</p></nav><div class='ads'><p>ad text</p></div>"
            "<div class='related-links'><p>more</p></div><button>Click</button>",
        )
        text = out.get_text()
        assert "keep" in text
        for gone in ("bad()", "form text", "nav text", "ad text", "more", "Click"):
            assert gone not in text

    def test_empty_elements_dropped(self):
        out = _sanitize("<p></p><p>   </p><span></span><p>kept</p>")
        assert len(out.find_all("p")) == 1
        assert out.find("span") is None

    def test_empty_table_scaffolding_kept(self):
        out = _sanitize("<table><tr><td></td><td>x</td></tr></table>")
        assert len(out.find_all("td")) == 2

    def test_image_without_src_dropped(self):
        out = _sanitize('<figure><img alt="no source"><figcaption>cap</figcaption></figure>')
        assert out.find("img") is None
        assert out.find("figcaption") is not None

    def test_comments_dropped(self):
        out = _sanitize("<p>text<!-- secret --></p>")
        assert "secret" not in str(out)


class TestAttributes:
    def test_event_handlers_and_styles_removed(self):
        out = _sanitize(
            '<p onclick="evil()" style="color:red" class="lead">Hi</p>'
            '<img src="a.jpg" onerror="evil()" onload="x()">',
        )
        for tag in out.find_all(True):
            assert not any(name.startswith("on") for name in tag.attrs)
            assert "style" not in tag.attrs
        assert out.p["class"] == ["lead"]

    def test_script_urls_removed(self):
        out = _sanitize('<p><a href="javascript:alert(1)">bad</a> <a href="/ok">ok</a></p>')
        links = out.find_all("a")
        assert "href" not in links[0].attrs
        assert links[1]["href"] == "/ok"

    def test_obfuscated_script_urls_removed(self):
        out = _sanitize(
            '<p><a href="java&#9;script:alert(1)">tab</a> '
            '<a href="&#10;JaVa&#9;Script:alert(2)">newline</a> '
            '<a href=" vbscript:msgbox(3)">space</a></p>',
        )
        for link in out.find_all("a"):
            assert "href" not in link.attrs

    def test_script_url_helpers(self):
        from zenreader.extractors.sanitizer import is_script_url, is_web_url

        assert is_script_url(" java\tscript:alert(1)")
        assert not is_script_url("/posts/javascript-tips")
        assert is_web_url("//player.vimeo.com/video/1")
        assert is_web_url("HTTPS://www.youtube.com/embed/x")
        assert not is_web_url("javascript://www.youtube.com/%0Aalert(1)")

    def test_input_not_mutated(self):
        from zenreader.extractors.sanitizer import sanitize

        soup = BeautifulSoup('<div id="root"><p onclick="x()">Hi</p><script>s()</script></div>', "lxml")
        before = str(soup)
        sanitize(soup.find(id="root"))
        assert str(soup) == before


class TestEmbeds:
    def test_trusted_iframe_kept(self):
        out = _sanitize('<iframe src="https://www.youtube.com/embed/abc"></iframe>')
        iframe = out.find("iframe")
        assert iframe is not None
        assert iframe["loading"] == "lazy"
        assert iframe["referrerpolicy"] == "no-referrer-when-downgrade"

    def test_untrusted_iframe_removed(self):
        out = _sanitize('<iframe src="https://tracker.example.net/frame"></iframe><p>x</p>')
        assert out.find("iframe") is None

    def test_lazy_iframe_gets_src(self):
        out = _sanitize('<iframe data-src="https://player.vimeo.com/video/1"></iframe>')
        assert out.find("iframe")["src"] == "https://player.vimeo.com/video/1"

    def test_script_url_in_lazy_iframe_never_becomes_src(self):
        out = _sanitize(
            '<iframe data-src="javascript://www.youtube.com/%0Aalert(1)"></iframe><p>x</p>',
        )
        assert out.find("iframe") is None
        assert "javascript" not in str(out)

    def test_trusted_lazy_src_replaces_placeholder(self):
        out = _sanitize(
            '<iframe src="about:blank" data-src="https://www.youtube.com/embed/abc"></iframe>',
        )
        assert out.find("iframe")["src"] == "https://www.youtube.com/embed/abc"

    def test_non_web_iframe_src_removed(self):
        out = _sanitize('<iframe src="data:text/html,//www.youtube.com/x"></iframe><p>x</p>')
        assert out.find("iframe") is None

    def test_video_with_source_kept(self):
        out = _sanitize('<video><source src="clip.mp4" type="video/mp4"></video>')
        video = out.find("video")
        assert video["controls"] == "controls"
        assert video["preload"] == "metadata"
        assert video.find("source")["src"] == "clip.mp4"

    def test_video_without_source_removed(self):
        out = _sanitize("<video></video><p>x</p>")
        assert out.find("video") is None

    def test_object_and_embed_removed(self):
        out = _sanitize('<object data="x.swf"></object><embed src="y.swf"><p>x</p>')
        assert out.find(["object", "embed"]) is None


class TestPreformatted:
    def test_pre_kept_with_whitespace(self):
        out = _sanitize('<pre><code class="language-python">def f():\n    return 1\n</code></pre>')
        pre = out.find("pre")
        assert pre is not None
        assert pre.code["class"] == ["language-python"]
        assert "def f():\n    return 1\n" in pre.get_text()


class TestIdempotence:
    def test_sanitize_twice_is_identical(self, article_html):
        from zenreader.extractors.sanitizer import sanitize

        soup = BeautifulSoup(article_html, "lxml")
        once = sanitize(soup.find("article"))
        twice = sanitize(once)
        assert str(twice) == str(once)

    def test_sanitize_html_fragment(self):
        from zenreader.extractors.sanitizer import sanitize_html

        out = sanitize_html("<p>Hello <b>there</b></p>")
        assert out is not None
        assert out.find("b").get_text().strip() == "there"
        assert sanitize_html("   ") is None
