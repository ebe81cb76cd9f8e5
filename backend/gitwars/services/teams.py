import logging
from typing import List, Optional

from sqlalchemy import func

from gitwars import db, socketio
from gitwars.models import Team


logger = logging.getLogger(__name__)

LEADERBOARD_ROOM = 'leaderboard'


class TeamError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def leaderboard(order: str = 'score') -> List[dict]:
    """Teams ranked by score (highest first), or listed by team number."""
    if order == 'number':
        teams = Team.query.order_by(Team.team_number.asc()).all()
    else:
        teams = Team.query.order_by(Team.score.desc(), Team.team_number.asc()).all()
    rows = []
    for idx, team in enumerate(teams):
        row = team.to_dict()
        row['rank'] = idx + 1
        rows.append(row)
    return rows


def broadcast() -> None:
    socketio.emit('teams_update', {'teams': leaderboard()}, to=LEADERBOARD_ROOM, namespace='/ws')


def team_name_exists(name: str) -> bool:
    normalized = name.strip().lower()
    return Team.query.filter(func.lower(Team.team_name) == normalized).first() is not None


def _as_int(value, label: str, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TeamError(f'{label} must be a number')


def add_team(team_name, score=None, team_class=None, role=None) -> Team:
    name = (team_name or '').strip()
    if not name:
        raise TeamError('Team name is required.')
    if team_name_exists(name):
        raise TeamError('Team name already exists. Please choose a different name.', 409)
    team = Team(
        team_name=name,
        score=_as_int(score, 'Initial points', 0),
        team_class=_as_int(team_class, 'Class'),
        role=role or None,
    )
    db.session.add(team)
    db.session.commit()
    logger.info(f"[team-add] name={team.team_name!r} number={team.team_number}")
    broadcast()
    return team


def get_team(team_id: int) -> Team:
    team = Team.query.get(team_id)
    if team is None:
        raise TeamError('Team not found', 404)
    return team


def _bump(team_id: int, column, delta: int) -> Team:
    # Relative update so concurrent clicks from several admins all land
    updated = Team.query.filter_by(id=team_id).update({column: column + delta})
    if not updated:
        db.session.rollback()
        raise TeamError('Team not found', 404)
    db.session.commit()
    team = get_team(team_id)
    broadcast()
    return team


def increase_score(team_id: int, step: int) -> Team:
    return _bump(team_id, Team.score, step)


def decrease_score(team_id: int, step: int) -> Team:
    team = get_team(team_id)
    team.score = max(0, (team.score or 0) - step)
    db.session.add(team)
    db.session.commit()
    broadcast()
    return team


def add_shield(team_id: int) -> Team:
    return _bump(team_id, Team.shields, 1)


def use_shield(team_id: int) -> Team:
    team = get_team(team_id)
    if (team.shields or 0) <= 0:
        raise TeamError('No shields left')
    team = _bump(team_id, Team.shields, -1)
    logger.info(f"[team-shield] team={team.id} shields_left={team.shields}")
    return team


def delete_team(team_id: int) -> None:
    team = get_team(team_id)
    db.session.delete(team)
    db.session.commit()
    logger.info(f"[team-delete] team={team_id}")
    broadcast()
