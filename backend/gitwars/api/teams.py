from flask import Blueprint, jsonify, request, current_app
from gitwars.services import teams as svc


teams = Blueprint('teams', __name__)


def _step():
    return int(current_app.config.get('SCORE_STEP', 10))


def _error(exc: svc.TeamError):
    return jsonify({'error': exc.message}), exc.status_code


@teams.route('/', methods=['GET'])
def list_teams():
    order = request.args.get('order', 'score')
    return jsonify({'teams': svc.leaderboard(order)})


@teams.route('/', methods=['POST'])
def create_team():
    data = request.get_json(silent=True) or {}
    try:
        team = svc.add_team(
            data.get('teamName'),
            score=data.get('score'),
            team_class=data.get('class'),
            role=data.get('role'),
        )
    except svc.TeamError as exc:
        return _error(exc)
    return jsonify(team.to_dict()), 201


@teams.route('/<int:team_id>/score/increment', methods=['POST'])
def increment_score(team_id):
    try:
        team = svc.increase_score(team_id, _step())
    except svc.TeamError as exc:
        return _error(exc)
    return jsonify(team.to_dict())


@teams.route('/<int:team_id>/score/decrement', methods=['POST'])
def decrement_score(team_id):
    try:
        team = svc.decrease_score(team_id, _step())
    except svc.TeamError as exc:
        return _error(exc)
    return jsonify(team.to_dict())


@teams.route('/<int:team_id>/shields/add', methods=['POST'])
def add_shield(team_id):
    try:
        team = svc.add_shield(team_id)
    except svc.TeamError as exc:
        return _error(exc)
    return jsonify(team.to_dict())


@teams.route('/<int:team_id>/shields/use', methods=['POST'])
def use_shield(team_id):
    try:
        team = svc.use_shield(team_id)
    except svc.TeamError as exc:
        return _error(exc)
    payload = team.to_dict()
    payload['message'] = 'Shield used! Damage blocked'
    return jsonify(payload)


@teams.route('/<int:team_id>', methods=['DELETE'])
def delete_team(team_id):
    try:
        svc.delete_team(team_id)
    except svc.TeamError as exc:
        return _error(exc)
    return jsonify({'message': 'Team deleted'})
