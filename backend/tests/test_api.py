from dart_counter import db
from dart_counter.services.match.state import MatchStatus


def create_user(client, name):
    res = client.post('/api/users', json={'name': name})
    assert res.status_code == 201
    return res.get_json()


def play_short_match(client, ann, bea):
    """101 start, one leg: Ann scores 60, Bea 60, Ann checks out 41 on D20."""
    res = client.post('/api/match/start', json={
        'startScore': 101,
        'legsInput': 1,
        'players': [{'name': ann['name'], 'userId': ann['id']}, {'name': bea['name'], 'userId': bea['id']}],
    })
    assert res.status_code == 201
    assert client.post('/api/match/throw', json={'points': 60, 'segments': ['T20']}).status_code == 200
    assert client.post('/api/match/throw', json={'points': 60}).status_code == 200
    res = client.post('/api/match/throw', json={'points': 41, 'finishDarts': 2, 'segments': ['S1', 'D20']})
    assert res.status_code == 200
    return res.get_json()


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_user_registry(client):
    ann = create_user(client, 'Ann')
    create_user(client, 'Bea')

    res = client.post('/api/users', json={'name': 'Ann'})
    assert res.status_code == 400
    res = client.post('/api/users', json={})
    assert res.status_code == 400

    names = [u['name'] for u in client.get('/api/users').get_json()]
    assert names == ['Ann', 'Bea']

    assert client.delete(f"/api/users/{ann['id']}").status_code == 200
    assert client.delete(f"/api/users/{ann['id']}").status_code == 404
    names = [u['name'] for u in client.get('/api/users').get_json()]
    assert names == ['Bea']


def test_match_state_and_throw(client):
    state = client.get('/api/match/state').get_json()
    assert state['status'] == 'SETUP'

    res = client.post('/api/match/start', json={'startScore': 501, 'legsInput': 3})
    assert res.get_json()['config']['legs_to_win'] == 2

    res = client.post('/api/match/throw', json={'points': 100})
    body = res.get_json()
    assert body['outcome'] == {'type': 'score', 'points': 100, 'player_id': 0}
    assert body['state']['players'][0]['score'] == 401
    assert body['state']['turn'] == 1


def test_rejected_throw_answers_conflict(client):
    assert client.post('/api/match/throw', json={'points': 60}).status_code == 409
    client.post('/api/match/start', json={})
    assert client.post('/api/match/throw', json={'points': 181}).status_code == 409
    assert client.post('/api/match/throw', json={'points': 'lots'}).status_code == 409
    assert client.post('/api/match/throw', json={'points': '60'}).status_code == 200
    state = client.get('/api/match/state').get_json()
    assert state['players'][0]['score'] == 441


def test_undo_reset_abort(client):
    client.post('/api/match/start', json={})
    client.post('/api/match/throw', json={'points': 60})
    res = client.post('/api/match/undo').get_json()
    assert res['undone'] is True
    assert res['state']['players'][0]['score'] == 501
    assert client.post('/api/match/undo').get_json()['undone'] is False

    assert client.post('/api/match/reset').get_json()['status'] == 'SETUP'
    assert client.post('/api/match/abort').get_json()['status'] == 'SETUP'


def test_finished_match_is_recorded_and_queryable(client):
    ann = create_user(client, 'Ann')
    bea = create_user(client, 'Bea')
    body = play_short_match(client, ann, bea)
    assert body['outcome']['type'] == 'gameshot'
    assert body['state']['status'] == 'MATCH_FINISHED'
    assert body['state']['winner'] == 'Ann'

    matches = client.get('/api/matches').get_json()
    assert len(matches) == 1
    record = matches[0]
    assert record['score_str'] == '1:0'
    assert record['winner_id'] == 0
    assert len(record['timeline']) == 3

    summary = client.get(f"/api/stats/{ann['id']}?filter=week").get_json()
    assert summary['matches'] == 1
    assert summary['wins'] == 1
    assert summary['highest_checkout'] == 41
    assert summary['heatmap'] == {'T20': 1, 'S1': 1, 'D20': 1}

    detail = client.get(f"/api/stats/{bea['id']}?filter={record['id']}").get_json()
    assert detail['result'] == 'loss'
    assert detail['opponent'] == 'Ann'


def test_stats_errors(client):
    ann = create_user(client, 'Ann')
    assert client.get('/api/stats/999').status_code == 404
    assert client.get(f"/api/stats/{ann['id']}?filter=yesterday").status_code == 400
    assert client.get(f"/api/stats/{ann['id']}?filter=42").status_code == 404


def test_broken_store_does_not_block_the_match(flask_app, client, app_session):
    db.drop_all()

    app_session.start_match({'legsInput': 1})
    app_session.state.players[0].score = 40
    outcome = app_session.throw(40, finish_darts=1, segments=['D20'])
    assert outcome.kind == 'gameshot'
    assert app_session.state.status == MatchStatus.MATCH_FINISHED

    assert app_session.store.save_match(app_session.state, 0) is None
    assert app_session.store.records() == []
    res = client.get('/api/matches')
    assert res.status_code == 200
    assert res.get_json() == []
