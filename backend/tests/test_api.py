MINUTE = 60 * 1000


def _save(client):
    res = client.post('/api/getSaveGame')
    assert res.status_code == 200
    return res.get_json()


def _first_turn(save):
    return save['turns'][save['turnOrder'][0]]


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_save_game_snapshot(client):
    save = _save(client)
    assert len(save['turnOrder']) == 2
    assert save['currentTurn'] is None
    assert save['currentPhase'] is None
    assert save['paused'] is False
    assert save['over'] is False
    assert save['terror'] == 1
    turn = _first_turn(save)
    assert turn['label'] == 1
    assert [save['phases'][p]['label'] for p in turn['phases']][-1] == 'End of Turn'


def test_get_phases(client):
    res = client.post('/api/getPhases')
    assert res.status_code == 200
    assert len(res.get_json()) == 10


def test_start_pause_unpause_flow(client, clock):
    res = client.post('/api/startGame')
    assert res.status_code == 204
    save = _save(client)
    assert save['currentTurn'] == save['turnOrder'][0]
    assert save['currentPhase']['ends'] == clock.now + 10 * MINUTE

    # Already running
    res = client.post('/api/startGame')
    assert res.status_code == 409
    assert 'error' in res.get_json()

    clock.advance(4 * MINUTE)
    assert client.post('/api/pause').status_code == 204
    assert _save(client)['paused'] == {'timeLeft': 6 * MINUTE}
    assert client.post('/api/pause').status_code == 409

    clock.advance(MINUTE)
    assert client.post('/api/unpause').status_code == 204
    save = _save(client)
    assert save['paused'] is False
    assert save['currentPhase']['ends'] == clock.now + 6 * MINUTE
    assert client.post('/api/unpause').status_code == 409


def test_commands_before_start_conflict(client):
    for path in ('/api/pause', '/api/unpause', '/api/advancePhase', '/api/advanceTurn'):
        assert client.post(path).status_code == 409
    assert client.post('/api/setTerror', json={'terror': 5}).status_code == 409


def test_set_terror(client):
    client.post('/api/startGame')
    assert client.post('/api/setTerror', json={'terror': 'lots'}).status_code == 400
    assert client.post('/api/setTerror', json={'terror': True}).status_code == 400
    assert client.post('/api/setTerror', json={}).status_code == 400
    assert client.post('/api/setTerror', json={'terror': 251}).status_code == 400
    assert client.post('/api/setTerror', json={'terror': 0}).status_code == 400

    assert client.post('/api/setTerror', json={'terror': 40}).status_code == 204
    assert client.post('/api/addTerror', json={'amount': 2}).status_code == 204
    assert _save(client)['terror'] == 42

    assert client.post('/api/setTerror', json={'terror': 250}).status_code == 204
    save = _save(client)
    assert save['over'] is True
    assert save['currentPhase'] is None
    assert client.post('/api/advancePhase').status_code == 409


def test_new_phase_validation(client):
    turn_id = _save(client)['turnOrder'][0]
    bad_bodies = [
        {},
        {'turnID': '', 'phaseConfig': {'label': 'Encore', 'length': None}},
        {'turnID': 42, 'phaseConfig': {'label': 'Encore', 'length': None}},
        {'turnID': turn_id},
        {'turnID': turn_id, 'phaseConfig': 'Encore'},
        {'turnID': turn_id, 'phaseConfig': {'label': '', 'length': None}},
        {'turnID': turn_id, 'phaseConfig': {'label': 'Encore', 'length': 0}},
        {'turnID': turn_id, 'phaseConfig': {'label': 'Encore', 'length': -1}},
        {'turnID': turn_id, 'phaseConfig': {'label': 'Encore', 'length': '5'}},
        {'turnID': turn_id, 'phaseConfig': {'label': 'Encore', 'length': True}},
    ]
    for body in bad_bodies:
        assert client.post('/api/newPhase', json=body).status_code == 400, body

    res = client.post('/api/newPhase', json={'turnID': 'missing', 'phaseConfig': {'label': 'Encore', 'length': None}})
    assert res.status_code == 404


def test_infinite_phase_length_is_rejected(client):
    save = _save(client)
    turn_id = save['turnOrder'][0]
    phase_id = _first_turn(save)['phases'][0]
    # Flask accepts the non-standard Infinity literal, so send it raw
    bodies = [
        ('/api/newPhase', '{"turnID": "%s", "phaseConfig": {"label": "Forever", "length": Infinity}}' % turn_id),
        ('/api/editPhase', '{"phaseID": "%s", "phaseConfig": {"label": "Forever", "length": Infinity}}' % phase_id),
        ('/api/editPhase', '{"phaseID": "%s", "phaseConfig": {"label": "Forever", "length": NaN}}' % phase_id),
    ]
    for path, body in bodies:
        res = client.post(path, data=body, content_type='application/json')
        assert res.status_code == 400, path

    after = _save(client)
    assert after['phases'][phase_id]['label'] == 'Team Time'
    assert len(_first_turn(after)['phases']) == len(_first_turn(save)['phases'])


def test_new_and_edit_phase(client):
    turn_id = _save(client)['turnOrder'][0]
    res = client.post('/api/newPhase', json={'turnID': turn_id, 'phaseConfig': {'label': 'Encore', 'length': 5 * MINUTE}})
    assert res.status_code == 200
    data = res.get_json()
    phase = data['phase']
    assert phase['label'] == 'Encore'
    assert phase['length'] == 5 * MINUTE
    assert data['turn']['phases'][-1] == phase['id']

    res = client.post('/api/editPhase', json={'phaseID': phase['id'], 'phaseConfig': {'label': 'Curtain Call', 'length': None}})
    assert res.status_code == 200
    assert res.get_json() == {'id': phase['id'], 'label': 'Curtain Call', 'length': None}

    res = client.post('/api/editPhase', json={'phaseID': 'missing', 'phaseConfig': {'label': 'x', 'length': None}})
    assert res.status_code == 404


def test_reorder_turn_phases(client):
    save = _save(client)
    turn_id = save['turnOrder'][0]
    phases = _first_turn(save)['phases']

    assert client.post('/api/reorderTurnPhases', json={'turnID': turn_id, 'phases': 'abc'}).status_code == 400
    assert client.post('/api/reorderTurnPhases', json={'turnID': turn_id, 'phases': ['x'] * 51}).status_code == 400
    assert client.post('/api/reorderTurnPhases', json={'turnID': turn_id, 'phases': phases[1:]}).status_code == 400
    assert _first_turn(_save(client))['phases'] == phases

    res = client.post('/api/reorderTurnPhases', json={'turnID': turn_id, 'phases': phases[::-1]})
    assert res.status_code == 200
    assert res.get_json()['phases'] == phases[::-1]


def test_bump_phase(client):
    phases = _first_turn(_save(client))['phases']
    assert client.post('/api/bumpPhase', json={'phaseID': phases[0], 'direction': 'left'}).status_code == 400

    res = client.post('/api/bumpPhase', json={'phaseID': phases[0], 'direction': 'up'})
    assert res.status_code == 200
    assert res.get_json()['phases'] == phases

    res = client.post('/api/bumpPhase', json={'phaseID': phases[0], 'direction': 'down'})
    assert res.get_json()['phases'][:2] == [phases[1], phases[0]]


def test_new_turn(client):
    res = client.post('/api/newTurn')
    assert res.status_code == 200
    data = res.get_json()
    assert data['turn']['label'] == 3
    assert len(data['phases']) == 5
    assert _save(client)['turnOrder'][-1] == data['turn']['id']


def test_navigation(client):
    client.post('/api/startGame')
    save = _save(client)
    second_turn = save['turnOrder'][1]

    assert client.post('/api/advancePhase').status_code == 204
    assert _save(client)['currentPhase']['id'] == _first_turn(save)['phases'][1]

    assert client.post('/api/advanceTurn').status_code == 204
    assert _save(client)['currentTurn'] == second_turn

    target = _first_turn(save)['phases'][3]
    assert client.post('/api/setPhase', json={'phaseID': target}).status_code == 204
    after = _save(client)
    assert after['currentTurn'] == save['turnOrder'][0]
    assert after['currentPhase']['id'] == target

    assert client.post('/api/setPhase', json={'phaseID': 'missing'}).status_code == 404
    assert client.post('/api/setPhase', json={}).status_code == 400

    assert client.post('/api/setTurn', json={'turnID': second_turn}).status_code == 204
    assert _save(client)['currentTurn'] == second_turn
    assert client.post('/api/setTurn', json={'turnID': 'missing'}).status_code == 404


def test_new_game_resets(client):
    client.post('/api/startGame')
    client.post('/api/setTerror', json={'terror': 250})
    assert _save(client)['over'] is True

    assert client.post('/api/newGame').status_code == 204
    save = _save(client)
    assert save['over'] is False
    assert save['currentPhase'] is None
    assert client.post('/api/startGame').status_code == 204
