from reviewsync_core.dedupe import dedupe, is_duplicate
from reviewsync_core.models import ReviewComment


def _comment(id, file="src/a.py", line=10, side="RIGHT", source="ai"):
    return ReviewComment(id=id, file=file, line=line, side=side, severity="medium", issue="x", source=source)


class TestDedupe:
    def test_drops_same_line(self):
        existing = [_comment("host-gh-1", line=10, source="host")]
        assert dedupe([_comment("ai-1", line=10)], existing) == []

    def test_drops_adjacent_lines(self):
        existing = [_comment("host-gh-1", line=10, source="host")]
        assert dedupe([_comment("ai-1", line=9), _comment("ai-2", line=11)], existing) == []

    def test_keeps_two_lines_away(self):
        existing = [_comment("host-gh-1", line=10, source="host")]
        kept = dedupe([_comment("ai-1", line=8), _comment("ai-2", line=12)], existing)
        assert [c.id for c in kept] == ["ai-1", "ai-2"]

    def test_other_file_never_collides(self):
        existing = [_comment("host-gh-1", file="src/b.py", line=10, source="host")]
        assert len(dedupe([_comment("ai-1", line=10)], existing)) == 1

    def test_side_is_ignored(self):
        existing = [_comment("host-gh-1", line=10, side="LEFT", source="host")]
        assert dedupe([_comment("ai-1", line=10, side="RIGHT")], existing) == []

    def test_preserves_order(self):
        incoming = [_comment(f"ai-{n}", line=n * 10) for n in range(5)]
        assert dedupe(incoming, []) == incoming

    def test_incoming_are_not_deduped_against_each_other(self):
        incoming = [_comment("ai-1", line=5), _comment("ai-2", line=5)]
        assert len(dedupe(incoming, [])) == 2


def test_is_duplicate():
    assert is_duplicate(_comment("ai-1", line=4), [1, 5])
    assert not is_duplicate(_comment("ai-1", line=3), [1, 5])
    assert not is_duplicate(_comment("ai-1", line=3), [])


def test_drops_same_and_next_line_keeps_three_away():
    existing = [_comment("host-gh-1", file="a.ts", line=10, source="host")]
    incoming = [_comment("ai-1", file="a.ts", line=10), _comment("ai-2", file="a.ts", line=11),
                _comment("ai-3", file="a.ts", line=13)]
    assert [c.id for c in dedupe(incoming, existing)] == ["ai-3"]
