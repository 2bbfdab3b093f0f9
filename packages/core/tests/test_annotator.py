"""Tests for diff line-number annotation."""

from reviewsync_core.annotator import LineAnnotation, annotate, parse_annotation, strip_annotation

SIMPLE_DIFF = """diff --git a/src/app.py b/src/app.py
index 1234567..89abcde 100644
--- a/src/app.py
+++ b/src/app.py
@@ -10,4 +10,5 @@ def main():
 context one
-removed line
+added line
+another added
 context two"""

TWO_FILE_DIFF = """diff --git a/a.py b/a.py
--- a/a.py
+++ b/a.py
@@ -1,2 +1,2 @@
-old
+new
 same
@@ -20 +20,2 @@
 keep
+extra
diff --git a/b.py b/b.py
new file mode 100644
--- /dev/null
+++ b/b.py
@@ -0,0 +1 @@
+hello"""


class TestAnnotate:
    def test_context_lines_carry_both_numbers(self):
        lines = annotate(SIMPLE_DIFF).annotated.split("\n")
        assert lines[5] == "[OLD:10|NEW:10]  context one"
        assert lines[9] == "[OLD:12|NEW:13]  context two"

    def test_deleted_and_added_lines(self):
        lines = annotate(SIMPLE_DIFF).annotated.split("\n")
        assert lines[6] == "[OLD:11|DEL] -removed line"
        assert lines[7] == "[NEW:11|ADD] +added line"
        assert lines[8] == "[NEW:12|ADD] +another added"

    def test_headers_pass_through_unchanged(self):
        lines = annotate(SIMPLE_DIFF).annotated.split("\n")
        assert lines[:5] == SIMPLE_DIFF.split("\n")[:5]

    def test_counts_files_and_hunks(self):
        result = annotate(TWO_FILE_DIFF)
        assert result.file_count == 2
        assert result.hunk_count == 3

    def test_hunk_without_count_starts_at_header_line(self):
        lines = annotate(TWO_FILE_DIFF).annotated.split("\n")
        assert "[OLD:20|NEW:20]  keep" in lines
        assert "[NEW:21|ADD] +extra" in lines

    def test_new_file_hunk_numbers_from_one(self):
        assert "[NEW:1|ADD] +hello" in annotate(TWO_FILE_DIFF).annotated.split("\n")

    def test_original_is_kept(self):
        assert annotate(SIMPLE_DIFF).original == SIMPLE_DIFF

    def test_no_newline_marker_is_not_annotated(self):
        diff = "@@ -1 +1 @@\n-a\n\\ No newline at end of file\n+b"
        lines = annotate(diff).annotated.split("\n")
        assert lines[2] == "\\ No newline at end of file"
        assert lines[3] == "[NEW:1|ADD] +b"

    def test_empty_line_inside_hunk_counts_as_context(self):
        diff = "@@ -5,3 +5,3 @@\n a\n\n b"
        lines = annotate(diff).annotated.split("\n")
        assert lines[2] == "[OLD:6|NEW:6] "
        assert lines[3] == "[OLD:7|NEW:7]  b"

    def test_lines_before_any_hunk_are_untouched(self):
        diff = "some preamble\n-not a deletion"
        assert annotate(diff).annotated == diff

    def test_empty_diff(self):
        result = annotate("")
        assert result.annotated == ""
        assert result.file_count == 0
        assert result.hunk_count == 0


class TestStripAnnotation:
    def test_stripping_every_line_restores_the_diff(self):
        for diff in (SIMPLE_DIFF, TWO_FILE_DIFF):
            annotated = annotate(diff).annotated
            restored = "\n".join(strip_annotation(line) for line in annotated.split("\n"))
            assert restored == diff

    def test_only_leading_prefix_is_removed(self):
        line = "[NEW:3|ADD] +x = '[NEW:9|ADD] '"
        assert strip_annotation(line) == "+x = '[NEW:9|ADD] '"

    def test_unannotated_line_unchanged(self):
        assert strip_annotation("@@ -1 +1 @@") == "@@ -1 +1 @@"


class TestParseAnnotation:
    def test_deleted(self):
        assert parse_annotation("[OLD:11|DEL] -x") == LineAnnotation(type="del", old_line=11)

    def test_added(self):
        assert parse_annotation("[NEW:7|ADD] +x") == LineAnnotation(type="add", new_line=7)

    def test_context(self):
        assert parse_annotation("[OLD:3|NEW:4]  x") == LineAnnotation(type="context", old_line=3, new_line=4)

    def test_unannotated_returns_none(self):
        assert parse_annotation("diff --git a/x b/x") is None
        assert parse_annotation("[NEW:x|ADD] +y") is None

    def test_parse_agrees_with_annotate(self):
        for line in annotate(SIMPLE_DIFF).annotated.split("\n")[5:]:
            assert parse_annotation(line) is not None


def test_first_lines_after_header_use_header_numbers():
    diff = "@@ -10,5 +12,7 @@\n context\n-gone\n+new"
    lines = annotate(diff).annotated.split("\n")
    assert lines[1].startswith("[OLD:10|NEW:12]")
    assert lines[2].startswith("[OLD:11|DEL]")
    assert lines[3].startswith("[NEW:13|ADD]")
