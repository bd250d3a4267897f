from __future__ import annotations

import pytest

from core.exceptions import PrizeNotFound
from database import transactional
from models import Prize, Project


def test_transactional_rolls_back_rejected_prize_entry(db, event, make_team):
    team = make_team()

    @transactional
    def enter_prize(db, project_id, prize_id):
        project = db.get(Project, project_id)
        project.name = "renamed"
        prize = db.get(Prize, prize_id)
        if prize is None:
            raise PrizeNotFound(prize_id)
        project.prizes.append(prize)

    project = Project(team_id=team.id, event_id=event.id, name="original")
    db.add(project)
    db.commit()

    with pytest.raises(PrizeNotFound):
        enter_prize(db, project.id, "missing")

    db.expire_all()
    assert db.get(Project, project.id).name == "original"


def test_transactional_requires_session():
    @transactional
    def no_session(project_id):
        return project_id

    with pytest.raises(ValueError):
        no_session("p1")
