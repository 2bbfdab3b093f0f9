"""Tests for diff utilities and pull request URL parsing."""

import pytest

from reviewsync_core.utils.diff import ChangedFile, normalize_path, parse_changed_files, truncate_diff
from reviewsync_core.utils.url import PullRequestRef, parse_pr_url

DIFF = """diff --git a/src/app.py b/src/app.py
index 1..2 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,3 +1,3 @@
 x
-y
+z
+w
diff --git a/new.txt b/new.txt
new file mode 100644
--- /dev/null
+++ b/new.txt
@@ -0,0 +1 @@
+hello
diff --git a/gone.txt b/gone.txt
deleted file mode 100644
--- a/gone.txt
+++ /dev/null
@@ -1 +0,0 @@
-bye
diff --git a/old_name.py b/new_name.py
similarity index 100%
rename from old_name.py
rename to new_name.py"""


class TestParseChangedFiles:
    def test_statuses_and_counts(self):
        assert parse_changed_files(DIFF) == [
            ChangedFile(path="src/app.py", status="modified", additions=2, deletions=1),
            ChangedFile(path="new.txt", status="added", additions=1, deletions=0),
            ChangedFile(path="gone.txt", status="deleted", additions=0, deletions=1),
            ChangedFile(path="new_name.py", status="renamed", additions=0, deletions=0),
        ]

    def test_no_files(self):
        assert parse_changed_files("not a diff") == []


class TestNormalizePath:
    @pytest.mark.parametrize("path, expected", [("a/x.py", "x.py"), ("b/src/y.py", "src/y.py"), ("lib/z.py", "lib/z.py")])
    def test_strips_git_prefixes(self, path, expected):
        assert normalize_path(path) == expected


class TestTruncateDiff:
    def test_short_diff_unchanged(self):
        assert truncate_diff("abc\ndef", 100) == "abc\ndef"

    def test_cuts_at_line_boundary(self):
        result = truncate_diff("line one\nline two\nline three", 14)
        assert result == "line one\n\n... (diff truncated)"


class TestParsePrUrl:
    def test_github(self):
        assert parse_pr_url("https://github.com/octo/hello-world/pull/42") == PullRequestRef(
            "github", "octo", "hello-world", 42
        )

    def test_github_with_trailing_path(self):
        ref = parse_pr_url("https://github.com/octo/repo/pull/42/files")
        assert ref.number == 42

    def test_gitlab_nested_group(self):
        ref = parse_pr_url("https://gitlab.com/group/sub/project/-/merge_requests/7")
        assert ref == PullRequestRef("gitlab", "group", "sub/project", 7, base_url="https://gitlab.com")
        assert ref.slug == "group/sub/project"

    def test_self_hosted_gitlab(self):
        ref = parse_pr_url("https://gitlab.example.org/team/app/-/merge_requests/3")
        assert ref.base_url == "https://gitlab.example.org"

    def test_bitbucket(self):
        assert parse_pr_url("https://bitbucket.org/ws/repo/pull-requests/5") == PullRequestRef(
            "bitbucket", "ws", "repo", 5
        )

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/o/r/pull/1",
            "https://github.com/o/r/issues/1",
            "https://github.com/o;rm/r/pull/1",
            "not a url",
        ],
    )
    def test_unrecognised(self, url):
        assert parse_pr_url(url) is None
