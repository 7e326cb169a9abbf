"""
Unit tests for response body rendering.
"""

import io
import re
from datetime import datetime
from pathlib import Path

import pytest

from httpworker.handlers.static import Resource, ResourceNotFoundError
from httpworker.http.mime_types import ContentType
from httpworker.http.renderer import (
    NOT_FOUND_BODY,
    TEMPLATE_RULES,
    TemplateContext,
    format_template_date,
    render,
    render_line,
    render_text,
    server_identification,
)


CONTEXT = TemplateContext(timestamp="Sun Oct 18 07:06:00 UTC 2026", identification="ID")


class TestRenderLine:
    """Tests for template substitution on a single line."""

    def test_date_marker(self):
        """Test that the marker becomes timestamp + <br>, text preserved."""
        assert render_line("Hello <cs371date> World", CONTEXT) == (
            "Hello Sun Oct 18 07:06:00 UTC 2026<br> World"
        )

    def test_date_marker_any_case(self):
        assert render_line("<CS371Date>", CONTEXT) == "Sun Oct 18 07:06:00 UTC 2026<br>"

    def test_date_marker_every_occurrence(self):
        rendered = render_line("<cs371date>|<CS371DATE>", CONTEXT)
        assert rendered == f"{CONTEXT.timestamp}<br>|{CONTEXT.timestamp}<br>"

    def test_server_marker_replaces_whole_line(self):
        """Test that other text on the server line is discarded."""
        assert render_line("<p>before <cs371server> after</p>", CONTEXT) == "ID"

    def test_server_marker_any_case(self):
        assert render_line("<CS371SERVER>", CONTEXT) == "ID"

    def test_date_rule_wins_over_server_rule(self):
        """Test that only the first matching rule applies."""
        rendered = render_line("<cs371date> <cs371server>", CONTEXT)

        assert rendered == f"{CONTEXT.timestamp}<br> <cs371server>"

    def test_plain_line_unchanged(self):
        assert render_line("<h1>Title</h1>", CONTEXT) == "<h1>Title</h1>"

    def test_backslashes_in_timestamp(self):
        context = TemplateContext(timestamp=r"a\1b", identification="ID")
        assert render_line("<cs371date>", context) == "a\\1b<br>"

    def test_rule_order(self):
        assert [rule.marker for rule in TEMPLATE_RULES] == ["<cs371date>", "<cs371server>"]


class TestRenderText:
    """Tests for rendering a sequence of lines."""

    def test_terminators_preserved(self):
        out = io.BytesIO()
        written = render_text(out, ["a\r\n", "b\n", "c"], CONTEXT)

        assert out.getvalue() == b"a\r\nb\nc"
        assert written == 6

    def test_terminator_kept_after_substitution(self):
        out = io.BytesIO()
        render_text(out, ["x <cs371server> y\n", "z\n"], CONTEXT)

        assert out.getvalue() == b"ID\nz\n"

    def test_non_ascii(self):
        out = io.BytesIO()
        render_text(out, ["café <cs371date>\n"], CONTEXT)

        assert out.getvalue().startswith("café ".encode("utf-8"))


class TestRender:
    """Tests for render() against real files."""

    def test_html_file(self, site: Path):
        out = io.BytesIO()
        now = datetime(2026, 10, 18, 7, 6, 0)

        with Resource.open(str(site), "index.html") as resource:
            render(out, ContentType.HTML, resource, "test/1.0", now=now)

        body = out.getvalue().decode("utf-8")
        stamp = format_template_date(now)
        assert f"Hello {stamp}<br> World\n" in body
        assert "Server's identification string : test/1.0\n" in body
        assert "ignored" not in body
        assert body.startswith("<html>\n<body>\n")

    def test_html_without_tags_is_byte_identical(self, site: Path):
        out = io.BytesIO()

        with Resource.open(str(site), "plain.html") as resource:
            render(out, ContentType.HTML, resource, "test")

        assert out.getvalue() == (site / "plain.html").read_bytes()

    def test_undecodable_bytes_pass_through(self, tmp_path: Path):
        (tmp_path / "latin.html").write_bytes(b"caf\xe9\n")
        out = io.BytesIO()

        with Resource.open(str(tmp_path), "latin.html") as resource:
            render(out, ContentType.HTML, resource, "test")

        assert out.getvalue() == b"caf\xe9\n"

    def test_missing_html_error_page(self, site: Path):
        out = io.BytesIO()

        with Resource.open(str(site), "missing.html") as resource:
            written = render(out, ContentType.HTML, resource, "test")

        assert out.getvalue() == NOT_FOUND_BODY
        assert b"<h3>Error: 404 Not Found</h3>" in out.getvalue()
        assert written == len(NOT_FOUND_BODY)

    def test_directory_error_page(self, site: Path):
        out = io.BytesIO()

        with Resource.open(str(site), "docs") as resource:
            render(out, ContentType.HTML, resource, "test")

        assert out.getvalue() == NOT_FOUND_BODY

    def test_image_bytes_identical(self, site: Path):
        """Test that an image of N bytes produces exactly those N bytes."""
        expected = (site / "photo.PNG").read_bytes()
        out = io.BytesIO()

        with Resource.open(str(site), "photo.PNG") as resource:
            written = render(out, ContentType.PNG, resource, "test", chunk_size=16)

        assert out.getvalue() == expected
        assert written == len(expected)

    def test_missing_image_raises(self, site: Path):
        out = io.BytesIO()

        with Resource.open(str(site), "missing.png") as resource:
            with pytest.raises(ResourceNotFoundError):
                render(out, ContentType.PNG, resource, "test")

        assert out.getvalue() == b""


class TestTemplateHelpers:
    """Tests for the template value helpers."""

    def test_format_template_date(self):
        stamp = format_template_date(datetime(2026, 10, 18, 7, 6, 0))

        assert re.fullmatch(r"Sun Oct 18 07:06:00 \S* ?2026", stamp)

    def test_server_identification(self):
        assert server_identification("srv") == "Server's identification string : srv"

    def test_context_create(self):
        context = TemplateContext.create("srv", datetime(2026, 10, 18, 7, 6, 0))

        assert context.identification == "Server's identification string : srv"
        assert context.timestamp.startswith("Sun Oct 18 07:06:00")
