"""Tests for the ``python -m zenreader`` command line."""

from __future__ import annotations

import io
import json


class TestCli:
    def test_json_output(self, article_path, capsys):
        from zenreader.__main__ import EXIT_OK, main

        code = main([str(article_path), "--url", "https://coastal.example/x"])
        assert code == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["title"] == "Reading the Tide Pools of the Northern Coast"
        assert data["url"] == "https://coastal.example/x"
        assert data["extraction_method_used"] == "candidate"

    def test_markdown_output(self, article_path, capsys):
        from zenreader.__main__ import main

        assert main([str(article_path), "--format", "markdown"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("# Reading the Tide Pools of the Northern Coast")

    def test_html_output(self, article_path, capsys):
        from zenreader.__main__ import main

        assert main([str(article_path), "--format", "html"]) == 0
        out = capsys.readouterr().out
        assert out.startswith('<div class="rm-reader-article">')

    def test_outline_goes_to_stderr(self, article_path, capsys):
        from zenreader.__main__ import main

        assert main([str(article_path), "--format", "html", "--outline"]) == 0
        captured = capsys.readouterr()
        assert "Where to Look" in captured.err
        assert captured.out.startswith("<div")

    def test_stdin(self, article_html, monkeypatch, capsys):
        from zenreader.__main__ import main

        monkeypatch.setattr("sys.stdin", io.StringIO(article_html))
        assert main(["-", "--format", "html"]) == 0
        assert "Every low tide" in capsys.readouterr().out

    def test_no_content_exit_code(self, tmp_path, no_content_html, capsys):
        from zenreader.__main__ import EXIT_NO_CONTENT, main

        path = tmp_path / "login.html"
        path.write_text(no_content_html, encoding="utf-8")
        assert main([str(path)]) == EXIT_NO_CONTENT
        assert "No readable content" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        from zenreader.__main__ import EXIT_ERROR, main

        assert main([str(tmp_path / "missing.html")]) == EXIT_ERROR
        assert "ERROR" in capsys.readouterr().err

    def test_unknown_extractor(self, article_path, capsys):
        from zenreader.__main__ import EXIT_ERROR, main

        assert main([str(article_path), "--extractor", "nope"]) == EXIT_ERROR
        assert "nope" in capsys.readouterr().err

    def test_config_profile(self, article_path, tmp_path, capsys):
        from zenreader.__main__ import main

        profile = tmp_path / "profile.yaml"
        profile.write_text("default:\n  primary_threshold: 100000\n", encoding="utf-8")
        assert main([str(article_path), "--config", str(profile)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["extraction_method_used"] == "candidate_salvage"

    def test_bad_config(self, article_path, tmp_path, capsys):
        from zenreader.__main__ import EXIT_ERROR, main

        profile = tmp_path / "profile.yaml"
        profile.write_text("default:\n  primary_threshold: -5\n", encoding="utf-8")
        assert main([str(article_path), "--config", str(profile)]) == EXIT_ERROR
