from __future__ import annotations

import pytest

import core.project_manager as project_manager
from core.exceptions import (
    DuplicateProject,
    Invalid,
    PrizeNotFound,
    ProjectNotFound,
    TeamNotFound,
)
from core.prize_manager import PrizeManager
from core.project_manager import ProjectManager
from models import Event, Project


def _count_projects(db, team_id, event_id):
    return db.query(Project).filter(
        Project.team_id == team_id, Project.event_id == event_id
    ).count()


def test_create_project(db, event, make_team):
    team = make_team()
    project = ProjectManager.create_project(
        db, team.id, event.id, {"name": "Tartan Toaster", "url": "https://example.com"}
    )
    assert project.team_id == team.id
    assert project.event_id == event.id
    assert project.url == "https://example.com"
    assert project.prize_ids == []


def test_second_project_for_same_team_and_event_is_duplicate(db, event, make_team):
    team = make_team()
    ProjectManager.create_project(db, team.id, event.id, {"name": "first"})

    with pytest.raises(DuplicateProject):
        ProjectManager.create_project(db, team.id, event.id, {"name": "second"})
    assert _count_projects(db, team.id, event.id) == 1


def test_same_team_can_have_project_in_another_event(db, event, make_team):
    team = make_team()
    other_event = Event(name="NextYear")
    db.add(other_event)
    db.commit()

    ProjectManager.create_project(db, team.id, event.id, {"name": "this year"})
    ProjectManager.create_project(db, team.id, other_event.id, {"name": "next year"})
    assert len(ProjectManager.list_projects(db)) == 2
    assert len(ProjectManager.list_projects(db, event.id)) == 1


def test_two_sessions_past_precheck_create_only_one(session_factory, event, make_team, monkeypatch):
    team = make_team()
    first, second = session_factory(), session_factory()

    # Both requests run their pre-check before either one has written
    real_lookup = project_manager.find_team_project
    pending = {
        id(first): real_lookup(first, team.id, event.id),
        id(second): real_lookup(second, team.id, event.id),
    }
    assert list(pending.values()) == [None, None]

    def lookup(db, team_id, event_id):
        if id(db) in pending:
            return pending.pop(id(db))
        return real_lookup(db, team_id, event_id)

    monkeypatch.setattr(project_manager, "find_team_project", lookup)

    try:
        ProjectManager.create_project(first, team.id, event.id, {"name": "winner"})
        with pytest.raises(DuplicateProject):
            ProjectManager.create_project(second, team.id, event.id, {"name": "loser"})
    finally:
        first.close()
        second.close()

    fresh = session_factory()
    try:
        assert _count_projects(fresh, team.id, event.id) == 1
    finally:
        fresh.close()


def test_create_project_without_name_is_invalid(db, event, make_team):
    team = make_team()

    with pytest.raises(Invalid):
        ProjectManager.create_project(db, team.id, event.id, {})
    with pytest.raises(Invalid):
        ProjectManager.create_project(db, team.id, event.id, {"name": ""})
    assert _count_projects(db, team.id, event.id) == 0

    # A rejected attempt does not use up the team's slot
    ProjectManager.create_project(db, team.id, event.id, {"name": "real"})
    assert _count_projects(db, team.id, event.id) == 1


def test_create_project_for_unknown_team(db, event):
    with pytest.raises(TeamNotFound):
        ProjectManager.create_project(db, "missing", event.id, {"name": "ghost"})


def test_enter_prize_is_idempotent(db, event, make_team):
    team = make_team()
    project = ProjectManager.create_project(db, team.id, event.id, {"name": "p"})
    prize = PrizeManager.create_prize(db, event.id, {"name": "Best Hack"})

    once = ProjectManager.enter_project_in_prize(db, project.id, prize.id).prize_ids
    twice = ProjectManager.enter_project_in_prize(db, project.id, prize.id).prize_ids
    assert once == twice == [prize.id]


def test_enter_multiple_prizes(db, event, make_team):
    team = make_team()
    project = ProjectManager.create_project(db, team.id, event.id, {"name": "p"})
    first = PrizeManager.create_prize(db, event.id, {"name": "Best Hack"})
    second = PrizeManager.create_prize(db, event.id, {"name": "Best Design"})

    ProjectManager.enter_project_in_prize(db, project.id, first.id)
    project = ProjectManager.enter_project_in_prize(db, project.id, second.id)
    assert project.prize_ids == sorted([first.id, second.id])


def test_enter_prize_with_invalid_references(db, event, make_team):
    team = make_team()
    project = ProjectManager.create_project(db, team.id, event.id, {"name": "p"})
    prize = PrizeManager.create_prize(db, event.id, {"name": "Best Hack"})

    with pytest.raises(ProjectNotFound):
        ProjectManager.enter_project_in_prize(db, "missing", prize.id)
    with pytest.raises(PrizeNotFound):
        ProjectManager.enter_project_in_prize(db, project.id, "missing")


def test_edit_project_keeps_team_and_event(db, event, make_team):
    team = make_team()
    project = ProjectManager.create_project(db, team.id, event.id, {"name": "old"})

    edited = ProjectManager.edit_project(
        db, project.id, {"name": "new", "team_id": "someone-else"}
    )
    assert edited.name == "new"
    assert edited.team_id == team.id


def test_delete_project_allows_a_new_one(db, event, make_team):
    team = make_team()
    project = ProjectManager.create_project(db, team.id, event.id, {"name": "p"})
    prize = PrizeManager.create_prize(db, event.id, {"name": "Best Hack"})
    ProjectManager.enter_project_in_prize(db, project.id, prize.id)

    ProjectManager.delete_project(db, project.id)
    with pytest.raises(ProjectNotFound):
        ProjectManager.get_project(db, project.id)

    ProjectManager.create_project(db, team.id, event.id, {"name": "again"})
    assert _count_projects(db, team.id, event.id) == 1


def test_get_team_project(db, event, make_team):
    team = make_team()
    with pytest.raises(ProjectNotFound):
        ProjectManager.get_team_project(db, team.id, event.id)

    project = ProjectManager.create_project(db, team.id, event.id, {"name": "p"})
    assert ProjectManager.get_team_project(db, team.id, event.id).id == project.id


def test_edit_project_ignores_null_name(db, event, make_team):
    team = make_team()
    project = ProjectManager.create_project(db, team.id, event.id, {"name": "keep me", "url": "u"})

    edited = ProjectManager.edit_project(db, project.id, {"name": None, "url": None})
    assert edited.name == "keep me"
    assert edited.url is None


def test_edit_prize_ignores_null_name(db, event):
    prize = PrizeManager.create_prize(db, event.id, {"name": "Best Hack", "description": "d"})

    edited = PrizeManager.edit_prize(db, prize.id, {"name": None, "description": None})
    assert edited.name == "Best Hack"
    assert edited.description is None
