import pytest

from app.models.manuscript import ManuscriptStatus, normalize_status


def test_normalize_status_accepts_case_and_underscore_variants():
    assert normalize_status("Under Review") == ManuscriptStatus.UNDER_REVIEW
    assert normalize_status("under_review") == ManuscriptStatus.UNDER_REVIEW
    assert normalize_status("ACCEPTED") == ManuscriptStatus.ACCEPTED
    assert normalize_status("final submitted") == ManuscriptStatus.FINAL_SUBMITTED
    assert normalize_status(ManuscriptStatus.PUBLISHED) is ManuscriptStatus.PUBLISHED


@pytest.mark.parametrize("raw", [None, "", "   ", "pre_check", "archived"])
def test_normalize_status_rejects_unknown(raw):
    assert normalize_status(raw) is None


def test_published_is_terminal():
    assert ManuscriptStatus.allowed_next(ManuscriptStatus.PUBLISHED) == set()
    assert not ManuscriptStatus.can_transition("Published", "Under Review")


def test_review_loop_transitions():
    assert ManuscriptStatus.can_transition("Submitted", "Under Review")
    assert ManuscriptStatus.can_transition("Revision Required", "Revision Submitted")
    assert ManuscriptStatus.can_transition("Revision Submitted", "Under Review")


def test_every_verdict_reachable_from_under_review():
    for verdict in ManuscriptStatus.decision_statuses():
        assert ManuscriptStatus.can_transition(ManuscriptStatus.UNDER_REVIEW, verdict), verdict


def test_publication_requires_acceptance_path():
    assert not ManuscriptStatus.can_transition("Submitted", "Published")
    assert not ManuscriptStatus.can_transition("Under Review", "Published")
    assert ManuscriptStatus.can_transition("Accepted", "Published")
    assert ManuscriptStatus.can_transition("ready_for_publication", "Published")
    assert ManuscriptStatus.can_transition("final_submitted", "Published")


def test_rejected_manuscripts_only_accept_a_new_verdict():
    allowed = ManuscriptStatus.allowed_next("Rejected")
    assert allowed == ManuscriptStatus.decision_statuses()
    assert ManuscriptStatus.UNDER_REVIEW not in allowed
    assert ManuscriptStatus.REVISION_SUBMITTED not in allowed


def test_final_submission_paths():
    assert ManuscriptStatus.can_transition("final_submission_requested", "final_submitted")
    assert ManuscriptStatus.can_transition("Accepted", "final_submitted")
    assert not ManuscriptStatus.can_transition("final_submission_requested", "Revision Submitted")


def test_unknown_current_status_allows_nothing():
    assert ManuscriptStatus.allowed_next("draft") == set()
    assert not ManuscriptStatus.can_transition(None, "Under Review")


@pytest.mark.parametrize("current", ["Submitted", "Under Review", "Revision Required", "Revision Submitted"])
def test_final_submission_reachable_from_review_loop(current):
    assert ManuscriptStatus.can_transition(current, "final_submitted")


def test_final_submitted_can_return_to_review():
    assert ManuscriptStatus.can_transition("final_submitted", "Under Review")
    assert not ManuscriptStatus.can_transition("final_submitted", "Revision Submitted")
