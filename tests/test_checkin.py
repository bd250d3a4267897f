from __future__ import annotations

import pytest

from core.checkin import CheckInManager, can_check_in, tier_rank
from core.exceptions import (
    CheckInItemNotFound,
    ErrorKind,
    Invalid,
    OutOfWindow,
    SelfCheckInDisabled,
)
from core.identity import Identity
from models import CheckInItem, Role


ADMIN = Identity(user_id="admin", role=Role.ADMIN, team_id=None)
GENERAL = Identity(user_id="p1", role=Role.PARTICIPANT, team_id=None, access_level="general")
STAFF = Identity(user_id="p2", role=Role.PARTICIPANT, team_id=None, access_level="staff")


def _item(**overrides):
    fields = dict(
        name="Opening Ceremony",
        start_time=1000,
        end_time=2000,
        points=10,
        access_level="general",
        enable_self_check_in=True,
    )
    fields.update(overrides)
    return CheckInItem(**fields)


def test_inside_window_is_allowed():
    assert can_check_in(GENERAL, _item(), 1500).allowed


def test_after_window_is_out_of_window():
    decision = can_check_in(GENERAL, _item(), 2500)
    assert decision.reason == ErrorKind.OUT_OF_WINDOW


def test_window_is_half_open():
    assert can_check_in(GENERAL, _item(), 1000).allowed
    assert can_check_in(GENERAL, _item(), 1999).allowed
    assert can_check_in(GENERAL, _item(), 2000).reason == ErrorKind.OUT_OF_WINDOW
    assert can_check_in(GENERAL, _item(), 999).reason == ErrorKind.OUT_OF_WINDOW


def test_self_check_in_disabled():
    item = _item(enable_self_check_in=False)
    assert can_check_in(GENERAL, item, 1500).reason == ErrorKind.SELF_CHECK_IN_DISABLED
    assert can_check_in(ADMIN, item, 1500).allowed


def test_admin_still_bound_by_window():
    assert can_check_in(ADMIN, _item(enable_self_check_in=False), 2500).reason == ErrorKind.OUT_OF_WINDOW


def test_insufficient_access():
    item = _item(access_level="sponsor")
    assert can_check_in(GENERAL, item, 1500).reason == ErrorKind.INSUFFICIENT_ACCESS
    assert can_check_in(STAFF, item, 1500).allowed


def test_custom_tier_ordering():
    levels = ["staff", "general"]
    assert can_check_in(GENERAL, _item(access_level="staff"), 1500, levels).allowed
    decision = can_check_in(STAFF, _item(access_level="general"), 1500, levels)
    assert decision.reason == ErrorKind.INSUFFICIENT_ACCESS


def test_unknown_tier_is_invalid():
    with pytest.raises(Invalid):
        tier_rank("platinum")


def _create_item(db, **overrides):
    attrs = dict(
        name="Lunch",
        start_time=1000,
        end_time=2000,
        points=5,
        access_level="general",
        enable_self_check_in=True,
    )
    attrs.update(overrides)
    return CheckInManager.create_item(db, attrs)


def test_check_in_twice_awards_once(db, make_user):
    user = make_user()
    caller = Identity(user_id=user.id, role=Role.PARTICIPANT, team_id=None)
    item = _create_item(db)

    record, created = CheckInManager.check_in(db, caller, user.id, item.id, now=1500)
    assert created and record.points == 5

    _, created = CheckInManager.check_in(db, caller, user.id, item.id, now=1600)
    assert not created

    history = CheckInManager.get_history(db, user.id)
    assert [r.item_id for r in history] == [item.id]
    assert sum(r.points for r in history) == 5


def test_check_in_denied_raises(db, make_user):
    user = make_user()
    caller = Identity(user_id=user.id, role=Role.PARTICIPANT, team_id=None)
    item = _create_item(db, enable_self_check_in=False)

    with pytest.raises(SelfCheckInDisabled):
        CheckInManager.check_in(db, caller, user.id, item.id, now=1500)
    with pytest.raises(OutOfWindow):
        CheckInManager.check_in(db, caller, user.id, item.id, now=5000)
    assert CheckInManager.get_history(db, user.id) == []


def test_admin_checks_in_participant(db, make_user):
    admin = make_user(role=Role.ADMIN)
    user = make_user()
    item = _create_item(db, enable_self_check_in=False)

    caller = Identity(user_id=admin.id, role=Role.ADMIN, team_id=None)
    record, created = CheckInManager.check_in(db, caller, user.id, item.id, now=1500)
    assert created
    assert record.user_id == user.id
    assert record.checked_in_by == admin.id


def test_check_in_unknown_item(db, make_user):
    user = make_user()
    caller = Identity(user_id=user.id, role=Role.PARTICIPANT, team_id=None)
    with pytest.raises(CheckInItemNotFound):
        CheckInManager.check_in(db, caller, user.id, "missing", now=1500)


def test_create_item_rejects_empty_window(db):
    with pytest.raises(Invalid):
        _create_item(db, start_time=2000, end_time=2000)


def test_create_item_rejects_unknown_access_level(db):
    with pytest.raises(Invalid):
        _create_item(db, access_level="platinum")


def test_edit_item_only_touches_given_fields(db):
    item = _create_item(db)
    edited = CheckInManager.edit_item(db, item.id, {"end_time": 3000})
    assert edited.end_time == 3000
    assert edited.start_time == 1000
    assert edited.name == "Lunch"

    with pytest.raises(Invalid):
        CheckInManager.edit_item(db, item.id, {"start_time": 4000})
