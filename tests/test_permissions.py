from types import SimpleNamespace

import pytest

from helpdesk.core.errors import AuthorizationError
from helpdesk.core.permissions import (
    assert_admin,
    assert_can_work,
    can_create_ticket,
    can_post_internal,
    can_view_ticket,
    can_work_ticket,
)
from helpdesk.core.roles import Actor, Role

REPORTER = Actor("r1", Role.reporter)
TECH = Actor("t1", Role.technician)
OTHER_TECH = Actor("t2", Role.technician)
ADMIN = Actor("a1", Role.admin)

TICKET = SimpleNamespace(id=7, reporter_id="r1", assignee_id="t1")


def test_who_may_file_tickets():
    assert can_create_ticket(REPORTER)
    assert can_create_ticket(ADMIN)
    assert not can_create_ticket(TECH)


def test_view_scoping():
    assert can_view_ticket(REPORTER, TICKET)
    assert not can_view_ticket(Actor("r2", Role.reporter), TICKET)
    assert can_view_ticket(TECH, TICKET)
    assert not can_view_ticket(OTHER_TECH, TICKET)
    assert can_view_ticket(ADMIN, TICKET)


def test_work_is_admin_or_assignee():
    assert can_work_ticket(ADMIN, TICKET)
    assert can_work_ticket(TECH, TICKET)
    assert not can_work_ticket(OTHER_TECH, TICKET)
    # owning the ticket is not enough
    assert not can_work_ticket(REPORTER, TICKET)


def test_internal_comments_are_staff_only():
    assert can_post_internal(TECH)
    assert can_post_internal(ADMIN)
    assert not can_post_internal(REPORTER)


def test_assertions_raise_authorization_error():
    with pytest.raises(AuthorizationError):
        assert_can_work(REPORTER, TICKET, "update_status")
    with pytest.raises(AuthorizationError):
        assert_admin(TECH, "assign")
    assert_admin(ADMIN, "assign")
