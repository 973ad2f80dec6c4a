"""Tests for path containment and normalization."""
from __future__ import annotations

import pytest

from app.errors import PathRejectedError
from app.services.path_policy import (
    compose_path,
    derive_name_and_type,
    is_directory_path,
    normalize_extension,
    resolve_path,
)

ROOT = "/srv/files"


class TestResolvePath:
    def test_relative_path_is_resolved_under_root(self):
        assert resolve_path("docs/a.txt", ROOT) == "/srv/files/docs/a.txt"

    def test_absolute_path_inside_root_is_accepted(self):
        assert resolve_path("/srv/files/a.txt", ROOT) == "/srv/files/a.txt"

    def test_backslashes_are_normalized(self):
        assert resolve_path("docs\\sub\\a.txt", ROOT) == "/srv/files/docs/sub/a.txt"

    def test_dot_segments_inside_root_collapse(self):
        assert resolve_path("docs/../b.txt", ROOT) == "/srv/files/b.txt"

    def test_comparison_is_case_insensitive(self):
        assert resolve_path("/SRV/Files/a.txt", ROOT) == "/srv/files/a.txt"

    def test_root_spelling_is_kept_below_the_root(self):
        assert resolve_path("/SRV/FILES/Docs/A.txt", ROOT) == "/srv/files/Docs/A.txt"
        assert resolve_path("/srv/files/x.txt", "/SRV/Files") == "/SRV/Files/x.txt"

    @pytest.mark.parametrize(
        "candidate",
        [
            "../escape.txt",
            "docs/../../escape.txt",
            "..\\..\\etc\\passwd",
            "/etc/passwd",
            "/srv/files2/a.txt",
            "/srv/files",
            "/srv",
        ],
    )
    def test_paths_outside_root_are_rejected(self, candidate):
        with pytest.raises(PathRejectedError) as exc_info:
            resolve_path(candidate, ROOT)
        assert exc_info.value.candidate == candidate
        assert exc_info.value.root == ROOT

    def test_root_with_trailing_separator(self):
        assert resolve_path("a.txt", ROOT + "/") == "/srv/files/a.txt"


class TestHelpers:
    def test_compose_path(self):
        assert compose_path("/srv/files/", "a", ".txt") == "/srv/files/a.txt"
        assert compose_path("C:\\data", "a", "txt") == "C:/data/a.txt"

    def test_is_directory_path(self):
        assert is_directory_path("docs/")
        assert is_directory_path("docs\\")
        assert not is_directory_path("docs/a.txt")

    @pytest.mark.parametrize(
        "raw, expected",
        [(".txt", ".txt"), ("txt", ".txt"), ("..txt", ".txt"), (" .md ", ".md"), ("", ""), (None, "")],
    )
    def test_normalize_extension(self, raw, expected):
        assert normalize_extension(raw) == expected

    def test_derive_name_and_type(self):
        assert derive_name_and_type("/srv/files/report.final.pdf") == ("report.final", ".pdf")
        assert derive_name_and_type("notes") == ("notes", ".file")
