"""Tests for GitHub REST comment mapping and the GraphQL thread overlay."""

from unittest.mock import MagicMock

from reviewsync_core.hosts.github import PER_PAGE, fetch_github_comments, map_github_comments
from reviewsync_core.hosts.github_graphql import ThreadState, apply_thread_states, fetch_thread_states
from reviewsync_core.models import ReviewComment


def _gh(id, node_id=None, path="src/app.py", line=10, **extra):
    item = {
        "id": id,
        "node_id": node_id or f"PRRC_{id}",
        "path": path,
        "line": line,
        "original_line": line,
        "side": "RIGHT",
        "position": 3,
        "body": f"comment {id}",
        "user": {"login": "octocat"},
    }
    item.update(extra)
    return item


class TestMapGithubComments:
    def test_basic_fields(self):
        [c] = map_github_comments([_gh(1)])
        assert c.id == "host-gh-PRRC_1"
        assert (c.file, c.line, c.side) == ("src/app.py", 10, "RIGHT")
        assert c.issue == "comment 1"
        assert c.source == "host"
        assert c.severity == "medium"
        assert c.status == "pending"
        assert c.host_comment_id == 1
        assert c.host_resolved is False
        assert c.host_outdated is False
        assert c.author == "octocat"

    def test_reply_links_to_parent_by_rest_id(self):
        comments = map_github_comments([_gh(1), _gh(2, in_reply_to_id=1)])
        assert comments[1].parent_id == "host-gh-PRRC_1"
        assert comments[0].parent_id is None

    def test_reply_before_parent_still_links(self):
        comments = map_github_comments([_gh(2, in_reply_to_id=1), _gh(1)])
        assert comments[0].parent_id == "host-gh-PRRC_1"

    def test_reply_to_missing_parent_becomes_root(self):
        [c] = map_github_comments([_gh(2, in_reply_to_id=99)])
        assert c.parent_id is None

    def test_self_reply_is_not_linked(self):
        [c] = map_github_comments([_gh(5, in_reply_to_id=5)])
        assert c.parent_id is None

    def test_comment_without_path_is_dropped(self):
        assert map_github_comments([_gh(1, path=None), _gh(2, path="")]) == []

    def test_repeated_ids_are_dropped(self):
        assert len(map_github_comments([_gh(1), _gh(1)])) == 1

    def test_left_side(self):
        [c] = map_github_comments([_gh(1, side="LEFT")])
        assert c.side == "LEFT"

    def test_line_falls_back_to_original_then_one(self):
        [a, b] = map_github_comments([_gh(1, line=None, original_line=7), _gh(2, line=None, original_line=None)])
        assert a.line == 7
        assert b.line == 1

    def test_line_comment_without_position_is_outdated(self):
        [c] = map_github_comments([_gh(1, position=None)])
        assert c.host_outdated is True

    def test_file_comment_without_position_is_current(self):
        [c] = map_github_comments([_gh(1, position=None, subject_type="file")])
        assert c.host_outdated is False

    def test_empty_body(self):
        [c] = map_github_comments([_gh(1, body="   ")])
        assert c.issue == "(No content)"

    def test_missing_node_id_falls_back_to_rest_id(self):
        item = _gh(8)
        del item["node_id"]
        [c] = map_github_comments([item])
        assert c.id == "host-gh-8"


class TestFetchGithubComments:
    def test_pages_until_short_page(self):
        requester = MagicMock()
        full = [_gh(n) for n in range(PER_PAGE)]
        requester.requestJsonAndCheck.side_effect = [({}, full), ({}, [_gh(500)])]

        items = fetch_github_comments(requester, "o", "r", 7)

        assert len(items) == PER_PAGE + 1
        first, second = requester.requestJsonAndCheck.call_args_list
        assert first.args == ("GET", "/repos/o/r/pulls/7/comments")
        assert first.kwargs["parameters"] == {"per_page": PER_PAGE, "page": 1}
        assert second.kwargs["parameters"]["page"] == 2

    def test_empty_pr(self):
        requester = MagicMock()
        requester.requestJsonAndCheck.return_value = ({}, [])
        assert fetch_github_comments(requester, "o", "r", 7) == []


def _thread(thread_id, comment_ids, resolved=False, outdated=False):
    return {
        "id": thread_id,
        "isResolved": resolved,
        "isOutdated": outdated,
        "comments": {"nodes": [{"id": cid} for cid in comment_ids]},
    }


def _page(threads, cursor=None):
    return (
        {},
        {
            "data": {
                "repository": {
                    "pullRequest": {
                        "reviewThreads": {
                            "pageInfo": {"hasNextPage": cursor is not None, "endCursor": cursor},
                            "nodes": threads,
                        }
                    }
                }
            }
        },
    )


class TestFetchThreadStates:
    def test_follows_cursor(self):
        requester = MagicMock()
        requester.graphql_query.side_effect = [
            _page([_thread("T1", ["C1", "C2"], resolved=True)], cursor="abc"),
            _page([_thread("T2", ["C3"], outdated=True)]),
        ]

        states = fetch_thread_states(requester, "o", "r", 7)

        assert states["C1"] == ThreadState(is_resolved=True, is_outdated=False, thread_id="T1")
        assert states["C2"].is_resolved is True
        assert states["C3"] == ThreadState(is_resolved=False, is_outdated=True, thread_id="T2")
        assert requester.graphql_query.call_count == 2
        second_variables = requester.graphql_query.call_args_list[1].args[1]
        assert second_variables == {"owner": "o", "name": "r", "number": 7, "after": "abc"}

    def test_missing_pull_request_yields_nothing(self):
        requester = MagicMock()
        requester.graphql_query.return_value = ({}, {"data": {"repository": {"pullRequest": None}}})
        assert fetch_thread_states(requester, "o", "r", 7) == {}


def _comment(id, source="host"):
    return ReviewComment(id=id, file="a.py", line=1, side="RIGHT", severity="medium", issue="x", source=source,
                         host_resolved=False, host_outdated=False)


class TestApplyThreadStates:
    def test_overlays_resolution(self):
        states = {"C1": ThreadState(is_resolved=True, is_outdated=True, thread_id="T1")}
        [c] = apply_thread_states([_comment("host-gh-C1")], states)
        assert c.host_resolved is True
        assert c.host_outdated is True
        assert c.host_thread_id == "T1"

    def test_does_not_mutate_input(self):
        original = _comment("host-gh-C1")
        apply_thread_states([original], {"C1": ThreadState(is_resolved=True, is_outdated=False)})
        assert original.host_resolved is False

    def test_unmatched_and_foreign_comments_pass_through(self):
        gh = _comment("host-gh-C9")
        gl = _comment("host-gl-C1")
        ai = _comment("ai-1-0", source="ai")
        result = apply_thread_states([gh, gl, ai], {"C1": ThreadState(is_resolved=True, is_outdated=False)})
        assert result[0] is gh
        assert result[1] is gl
        assert result[2] is ai

    def test_empty_state_map_is_identity(self):
        comments = [_comment("host-gh-C1"), _comment("host-gh-C2")]
        assert apply_thread_states(comments, {}) == comments


def test_overlay_on_prrc_id_keeps_input_intact():
    comments = [_comment("host-gh-PRRC_1"), _comment("host-gl-7")]
    result = apply_thread_states(comments, {"PRRC_1": ThreadState(is_resolved=True, is_outdated=False)})
    assert (result[0].host_resolved, result[0].host_outdated) == (True, False)
    assert result[1] is comments[1]
    assert comments[0].host_resolved is False
