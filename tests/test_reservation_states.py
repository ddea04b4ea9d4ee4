import pytest

from app.models.reservation import ReservationStatus as S
from app.services.reservations import InvalidTransition, plan_transition


@pytest.mark.parametrize("target", [S.approved, S.rejected, S.waitlist, S.expired])
def test_pending_can_move_anywhere(target):
    t = plan_transition(S.pending, target)
    assert t.new == target
    assert t.admits == (target == S.approved)
    assert not t.revokes


@pytest.mark.parametrize("target", [S.rejected, S.waitlist])
def test_revoking_an_approval(target):
    t = plan_transition(S.approved, target)
    assert t.revokes
    assert not t.admits


def test_waitlisted_reservation_can_be_approved_by_hand():
    t = plan_transition(S.waitlist, S.approved)
    assert t.admits


@pytest.mark.parametrize(
    "old,new",
    [
        (S.rejected, S.approved),
        (S.rejected, S.pending),
        (S.expired, S.approved),
        (S.expired, S.waitlist),
        (S.approved, S.pending),
        (S.approved, S.expired),
    ],
)
def test_illegal_transitions_raise(old, new):
    with pytest.raises(InvalidTransition) as exc:
        plan_transition(old, new)
    assert exc.value.status_code == 409


@pytest.mark.parametrize("status", list(S))
def test_same_status_is_a_no_op(status):
    t = plan_transition(status, status)
    assert not t.admits and not t.revokes


def test_accepts_plain_strings():
    t = plan_transition("pending", "approved")
    assert t.old is S.pending and t.new is S.approved
