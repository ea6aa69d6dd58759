"""Tests for the collect / filter / format pipeline."""

from dataclasses import replace

from prnotify_core.models import CommitRecord, GitHubUser, NotifyContext, ReviewRecord
from prnotify_core.notifier import collect_users_to_notify, exclusion_reason, filter_users, format_comment


def _context(**overrides) -> NotifyContext:
    base = NotifyContext(
        repo="owner/repo",
        pr_number=1,
        event_name="pull_request",
        event_action="closed",
        pr_merged=True,
        actor="actor",
    )
    return replace(base, **overrides)


def _user(login):
    return GitHubUser(login, f"/{login}") if login else None


def _commit(committer, authors=()):
    return CommitRecord(committer=_user(committer), authors=[_user(a) for a in authors], oid="abc123")


def _review(login, state):
    return ReviewRecord(state=state, author=_user(login), commit_oid="abc123")


class TestCollectUsersToNotify:
    def test_collects_committer(self):
        result = collect_users_to_notify(_context(), [_commit("committer1")], [], [])
        assert "committer1" in result

    def test_collects_authors(self):
        result = collect_users_to_notify(_context(), [_commit(None, ["author1", "author2"])], [], [])
        assert list(result) == ["author1", "author2"]

    def test_collects_committer_and_co_authors_from_one_commit(self):
        result = collect_users_to_notify(_context(), [_commit("committer1", ["author1", "author2"])], [], [])
        assert list(result) == ["committer1", "author1", "author2"]

    def test_skips_absent_users(self):
        result = collect_users_to_notify(_context(), [_commit(None, [None])], [_review(None, "APPROVED")], [None])
        assert len(result) == 0

    def test_collects_approvers_on_closed_pull_request(self):
        result = collect_users_to_notify(_context(), [], [_review("approver1", "APPROVED")], [])
        assert "approver1" in result

    def test_ignores_non_approving_reviews(self):
        reviews = [_review("reviewer1", "COMMENTED"), _review("reviewer2", "CHANGES_REQUESTED")]
        result = collect_users_to_notify(_context(), [], reviews, [])
        assert len(result) == 0

    def test_approved_state_is_case_sensitive(self):
        result = collect_users_to_notify(_context(), [], [_review("approver1", "approved")], [])
        assert "approver1" not in result

    def test_no_approvers_on_review_event(self):
        context = _context(event_name="pull_request_review", event_action="submitted")
        result = collect_users_to_notify(context, [], [_review("approver1", "APPROVED")], [])
        assert "approver1" not in result

    def test_no_approvers_on_other_pull_request_actions(self):
        context = _context(event_action="synchronize", pr_merged=False)
        result = collect_users_to_notify(context, [], [_review("approver1", "APPROVED")], [])
        assert "approver1" not in result

    def test_collects_assignees(self):
        result = collect_users_to_notify(_context(), [], [], [_user("assignee1")])
        assert "assignee1" in result

    def test_collects_assignees_on_review_event(self):
        context = _context(event_name="pull_request_review", event_action="submitted")
        result = collect_users_to_notify(context, [], [], [_user("assignee1")])
        assert "assignee1" in result

    def test_deduplicates_users(self):
        result = collect_users_to_notify(
            _context(), [_commit("user1", ["user1"])], [_review("user1", "APPROVED")], [_user("user1")]
        )
        assert list(result) == ["user1"]

    def test_same_set_regardless_of_input_order(self):
        commits = [_commit("a", ["b"]), _commit("c")]
        assignees = [_user("d"), _user("a")]
        forward = collect_users_to_notify(_context(), commits, [], assignees)
        backward = collect_users_to_notify(_context(), commits[::-1], [], assignees[::-1])
        assert set(forward) == set(backward) == {"a", "b", "c", "d"}


class TestFilterUsers:
    def test_filters_out_actor(self):
        assert filter_users({"actor": None, "other": None}, "actor", set()) == ["other"]

    def test_filters_out_bot_accounts(self):
        assert filter_users(["dependabot[bot]", "user1"], "actor", set()) == ["user1"]

    def test_filters_out_logins_containing_bot_marker(self):
        assert filter_users(["a[bot]b", "[bot]runner", "user1"], "actor", set()) == ["user1"]

    def test_bot_lookalikes_kept(self):
        assert filter_users(["robot", "bot-user", "user[bot"], "actor", set()) == ["robot", "bot-user", "user[bot"]

    def test_filters_out_machine_users(self):
        assert filter_users(["ci-bot", "user1"], "actor", frozenset({"ci-bot"})) == ["user1"]

    def test_keeps_normal_users_in_order(self):
        assert filter_users(["user2", "user1", "user3"], "actor", set()) == ["user2", "user1", "user3"]

    def test_empty_input(self):
        assert filter_users({}, "actor", set()) == []

    def test_actor_match_is_exact(self):
        assert filter_users(["Actor", "actor2"], "actor", set()) == ["Actor", "actor2"]


class TestExclusionReason:
    def test_actor(self):
        assert exclusion_reason("alice", "alice", set()) == "actor"

    def test_bot(self):
        assert exclusion_reason("renovate[bot]", "alice", set()) == "bot"

    def test_machine_user(self):
        assert exclusion_reason("deploy-user", "alice", {"deploy-user"}) == "machine user"

    def test_actor_takes_precedence(self):
        assert exclusion_reason("ci[bot]", "ci[bot]", {"ci[bot]"}) == "actor"

    def test_none_for_regular_user(self):
        assert exclusion_reason("bob", "alice", {"deploy-user"}) is None


class TestFormatComment:
    def test_merged(self):
        result = format_comment(["user1", "user2"], _context(pr_merged=True))
        assert result == "@user1 @user2 Merged the pull request."

    def test_merged_takes_precedence_over_closed(self):
        result = format_comment(["user1"], _context(pr_merged=True, event_action="closed"))
        assert result == "@user1 Merged the pull request."

    def test_closed(self):
        result = format_comment(["user1"], _context(pr_merged=False, event_action="closed"))
        assert result == "@user1 Closed the pull request."

    def test_other_pull_request_action(self):
        result = format_comment(["user1"], _context(pr_merged=False, event_action="reopened"))
        assert result == "@user1 Pull request reopened."

    def test_review_approved(self):
        context = _context(event_name="pull_request_review", review_state="approved", pr_merged=False)
        assert format_comment(["user1"], context) == "@user1 The pull request was approved."

    def test_review_changes_requested(self):
        context = _context(event_name="pull_request_review", review_state="changes_requested")
        assert format_comment(["user1"], context) == "@user1 Changes were requested."

    def test_review_commented(self):
        context = _context(event_name="pull_request_review", review_state="commented")
        assert format_comment(["user1"], context) == "@user1 A comment was left on the pull request."

    def test_review_unknown_state(self):
        context = _context(event_name="pull_request_review", review_state="dismissed")
        assert format_comment(["user1"], context) == "@user1 A review was submitted."

    def test_other_event(self):
        context = _context(event_name="workflow_run", event_action="completed")
        assert format_comment(["user1"], context) == "@user1 Event: workflow_run/completed."

    def test_includes_all_mentions_in_order(self):
        assert format_comment(["a", "b", "c"], _context()).startswith("@a @b @c ")

    def test_empty_users_leaves_only_the_sentence(self):
        assert format_comment([], _context(pr_merged=True)) == " Merged the pull request."


def test_merged_pr_end_to_end():
    context = _context(event_name="pull_request", event_action="closed", pr_merged=True, actor="alice")
    candidates = collect_users_to_notify(
        context, [_commit("alice")], [_review("bob", "APPROVED")], [_user("carol")]
    )
    assert list(candidates) == ["alice", "bob", "carol"]

    users = filter_users(candidates, context.actor, context.machine_users)
    assert users == ["bob", "carol"]

    assert format_comment(users, context) == "@bob @carol Merged the pull request."
