import pytest

API = '/api/vocabulary'


def add_word(client, word, translation='translation', **extra):
    return client.post(f'{API}/words', json=dict(word=word, translation=translation, **extra))


class TestWordsApi:

    def test_add_then_reinforce(self, client):
        response = add_word(client, 'hej', 'hello', context='Hej Anna')
        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['word'] == 'hej'
        assert data['practiceCount'] == 1
        assert data['srsData']['repetitions'] == 0

        response = add_word(client, 'HEJ', 'hello')
        assert response.status_code == 200
        assert response.get_json()['data']['practiceCount'] == 2

    def test_add_incomplete_word(self, client):
        response = add_word(client, '', 'hello')
        assert response.status_code == 400
        body = response.get_json()
        assert body['success'] is False
        assert body['code'] == 'VALIDATION_ERROR'

    def test_list_search_filter_sort(self, client):
        add_word(client, 'kat', 'cat')
        add_word(client, 'bil', 'car')
        add_word(client, 'hus', 'house')

        body = client.get(f'{API}/words?search=ca&sort=alphabetical').get_json()
        assert [i['word'] for i in body['data']['items']] == ['bil', 'kat']
        assert body['data']['total'] == 2

        response = client.get(f'{API}/words?filter=bogus')
        assert response.status_code == 400

    def test_get_and_missing_word(self, client):
        word_id = add_word(client, 'sol', 'sun').get_json()['data']['id']
        assert client.get(f'{API}/words/{word_id}').get_json()['data']['translation'] == 'sun'

        response = client.get(f'{API}/words/vocab_nope_1')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'

    def test_patch_word(self, client):
        word_id = add_word(client, 'måne', 'moon').get_json()['data']['id']
        response = client.patch(f'{API}/words/{word_id}', json={'topic_tags': ['nature']})
        assert response.status_code == 200
        assert response.get_json()['data']['topicTags'] == ['nature']

        response = client.patch(f'{API}/words/{word_id}', json={'interval': 30})
        assert response.status_code == 400

    def test_review_with_quality_and_rating(self, client):
        word_id = add_word(client, 'regn', 'rain').get_json()['data']['id']

        response = client.post(f'{API}/words/{word_id}/review', json={'quality': 4})
        assert response.get_json()['data']['srsData']['repetitions'] == 1

        response = client.post(f'{API}/words/{word_id}/review', json={'rating': 'again'})
        srs = response.get_json()['data']['srsData']
        assert srs['repetitions'] == 0
        assert srs['lastQuality'] == 0

        response = client.post(
            f'{API}/words/{word_id}/review',
            json={'rating': 'mastered', 'scheme': 'three_button'},
        )
        assert response.get_json()['data']['proficiencyLevel'] == 'mastered'

    @pytest.mark.parametrize('body', [{'quality': 9}, {'rating': 'meh'}, {}, {'outcome': 'great'}])
    def test_review_rejects_bad_grades(self, client, body):
        word_id = add_word(client, 'sne', 'snow').get_json()['data']['id']
        response = client.post(f'{API}/words/{word_id}/review', json=body)
        assert response.status_code == 400

    def test_master_endpoint(self, client):
        word_id = add_word(client, 'vind', 'wind').get_json()['data']['id']
        response = client.post(f'{API}/words/{word_id}/master')
        assert response.get_json()['data']['proficiencyLevel'] == 'mastered'

    def test_due_and_stats(self, client):
        add_word(client, 'is', 'ice')
        assert client.get(f'{API}/due').get_json()['data']['total'] == 0

        stats = client.get(f'{API}/stats').get_json()['data']
        assert stats['total'] == 1
        assert stats['by_level']['new'] == 1

    def test_delete_and_clear(self, client):
        word_id = add_word(client, 'en', 'one').get_json()['data']['id']
        add_word(client, 'to', 'two')

        assert client.delete(f'{API}/words/{word_id}').get_json()['data']['deleted'] is True
        assert client.delete(f'{API}/words/{word_id}').get_json()['data']['deleted'] is False
        assert client.delete(f'{API}/words').get_json()['data']['deleted'] == 1
        assert client.get(f'{API}/words').get_json()['data']['total'] == 0

    def test_export_import(self, client):
        add_word(client, 'grøn', 'green')
        exported = client.get(f'{API}/export')
        assert exported.mimetype == 'application/json'

        client.delete(f'{API}/words')
        response = client.post(f'{API}/import', data=exported.get_data(), content_type='application/json')
        assert response.get_json()['data']['imported'] == 1
        assert client.get(f'{API}/words').get_json()['data']['items'][0]['word'] == 'grøn'

    def test_unknown_endpoint_is_json(self, client):
        response = client.get(f'{API}/nothing-here')
        assert response.status_code == 404
        assert response.get_json()['success'] is False


class TestSessionsApi:

    def test_empty_collection_cannot_start(self, client):
        response = client.post(f'{API}/sessions', json={})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'EMPTY_INPUT'

    def test_full_session(self, client):
        for word in ('a', 'b', 'c'):
            add_word(client, word, word.upper())

        response = client.post(f'{API}/sessions', json={})
        assert response.status_code == 201
        state = response.get_json()['data']
        session_id = state['session_id']
        assert state['total'] == 3

        client.post(f'{API}/sessions/{session_id}/review', json={'rating': 'good'})
        client.post(f'{API}/sessions/{session_id}/skip')
        state = client.post(
            f'{API}/sessions/{session_id}/review',
            json={'outcome': 'mastered'},
        ).get_json()['data']
        assert state['is_complete'] is True
        assert state['current_item'] is None

        response = client.post(f'{API}/sessions/{session_id}/review', json={'rating': 'good'})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'SESSION_COMPLETE'

        summary = client.delete(f'{API}/sessions/{session_id}').get_json()['data']
        assert summary['total_reviewed'] == 2
        assert summary['skipped'] == 1
        assert summary['accuracy_percent'] == 100

        assert client.get(f'{API}/sessions/{session_id}').status_code == 404

    def test_session_with_selected_words(self, client):
        ids = [add_word(client, w, w).get_json()['data']['id'] for w in ('x', 'y', 'z')]
        state = client.post(f'{API}/sessions', json={'word_ids': ids[1:]}).get_json()['data']
        assert state['total'] == 2
        assert state['current_item']['id'] == ids[1]

    def test_session_respects_limit(self, client):
        for i in range(8):
            add_word(client, f'ord{i}', f'word{i}')
        state = client.post(f'{API}/sessions', json={}).get_json()['data']
        assert state['total'] == 5

    def test_registry_evicts_completed_sessions_first(self, client):
        word_id = add_word(client, 'lys', 'light').get_json()['data']['id']

        def open_session():
            return client.post(f'{API}/sessions', json={'word_ids': [word_id]}).get_json()['data']['session_id']

        finished = open_session()
        client.post(f'{API}/sessions/{finished}/review', json={'rating': 'good'})
        second = open_session()
        third = open_session()

        assert client.get(f'{API}/sessions/{finished}').status_code == 404
        assert client.get(f'{API}/sessions/{second}').status_code == 200
        assert client.get(f'{API}/sessions/{third}').status_code == 200

        fourth = open_session()
        assert client.get(f'{API}/sessions/{second}').status_code == 404
        assert client.get(f'{API}/sessions/{fourth}').status_code == 200

    def test_bad_word_ids(self, client):
        response = client.post(f'{API}/sessions', json={'word_ids': 'abc'})
        assert response.status_code == 400
        response = client.post(f'{API}/sessions', json={'word_ids': ['missing']})
        assert response.status_code == 404
