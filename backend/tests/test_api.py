def test_index_and_health(client):
    res = client.get('/')
    assert res.status_code == 200
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'ok'


def test_document_lifecycle(client):
    res = client.get('/api/docs/gameState/current')
    assert res.status_code == 404

    res = client.put('/api/docs/gameState/current', json={'timer': 30, 'timerRunning': False})
    assert res.status_code == 201
    assert res.get_json()['data']['timer'] == 30

    res = client.put('/api/docs/gameState/current', json={'timer': 60})
    assert res.status_code == 409

    res = client.patch('/api/docs/gameState/current', json={'timerRunning': True})
    assert res.status_code == 200
    assert res.get_json()['data'] == {'timer': 30, 'timerRunning': True}

    res = client.post('/api/docs/gameState/current/increment', json={'field': 'timer', 'delta': -40, 'floor': 0})
    assert res.status_code == 200
    assert res.get_json()['data']['timer'] == 0


def test_document_errors(client):
    assert client.get('/api/docs/users/admin').status_code == 403
    assert client.patch('/api/docs/gameState/missing', json={'timer': 1}).status_code == 404
    assert client.put('/api/docs/gameState/current', json=[1, 2]).status_code == 400
    res = client.post('/api/docs/gameState/current/increment', json={'field': 'timer', 'delta': 'x'})
    assert res.status_code == 400


def _add(client, name, **extra):
    return client.post('/api/teams/', json={'teamName': name, **extra})


def test_add_team_assigns_numbers_and_validates(client):
    res = _add(client, '  Merge Conflicts ', score=20, **{'class': 3, 'role': 'PUBLIC'})
    assert res.status_code == 201
    first = res.get_json()
    assert first['teamName'] == 'Merge Conflicts'
    assert first['teamNumber'] == 1
    assert first['score'] == 20
    assert first['class'] == 3
    assert first['shields'] == 0

    assert _add(client, 'Rebasers').get_json()['teamNumber'] == 2
    assert _add(client, 'merge conflicts').status_code == 409
    assert _add(client, '   ').status_code == 400
    assert _add(client, 'Forkers', score='lots').status_code == 400


def test_leaderboard_sorted_by_score(client):
    a = _add(client, 'Alpha').get_json()
    b = _add(client, 'Beta', score=10).get_json()
    client.post(f"/api/teams/{a['id']}/score/increment")
    client.post(f"/api/teams/{a['id']}/score/increment")

    teams = client.get('/api/teams/').get_json()['teams']
    assert [t['teamName'] for t in teams] == ['Alpha', 'Beta']
    assert [t['rank'] for t in teams] == [1, 2]
    assert teams[0]['score'] == 20

    by_number = client.get('/api/teams/?order=number').get_json()['teams']
    assert [t['id'] for t in by_number] == [a['id'], b['id']]


def test_score_decrement_floors_at_zero(client):
    team = _add(client, 'Gamma', score=5).get_json()
    res = client.post(f"/api/teams/{team['id']}/score/decrement")
    assert res.get_json()['score'] == 0
    res = client.post(f"/api/teams/{team['id']}/score/decrement")
    assert res.get_json()['score'] == 0


def test_shields(client):
    team = _add(client, 'Delta').get_json()
    res = client.post(f"/api/teams/{team['id']}/shields/use")
    assert res.status_code == 400

    client.post(f"/api/teams/{team['id']}/shields/add")
    res = client.post(f"/api/teams/{team['id']}/shields/use")
    assert res.status_code == 200
    body = res.get_json()
    assert body['shields'] == 0
    assert body['message'] == 'Shield used! Damage blocked'


def test_delete_team(client):
    team = _add(client, 'Epsilon').get_json()
    assert client.delete(f"/api/teams/{team['id']}").status_code == 200
    assert client.delete(f"/api/teams/{team['id']}").status_code == 404
    assert client.post(f"/api/teams/{team['id']}/score/increment").status_code == 404
    assert client.get('/api/teams/').get_json()['teams'] == []
