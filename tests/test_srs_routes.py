"""
Integration tests for SRS routes.

Tests the HTTP surface of the scheduler:
- Card creation, editing, browsing and deletion
- Review queue and statistics
- Answer submission and error mapping
"""

import sys
import os
import pytest
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import OperationalError

from app import create_app
from models import db


@pytest.fixture(scope='function')
def client():
    """Create a test client with fresh database for each test"""
    app = create_app('testing')

    with app.app_context():
        db.create_all()

        with app.test_client() as client:
            yield client

        db.session.remove()
        db.drop_all()


def create_card(client, word='hello', user_id='user123', **extra):
    response = client.post('/srs/create-card', json={'userId': user_id, 'word': word, **extra})
    assert response.status_code == 200
    return response.get_json()['card']


class TestBlueprint:
    """Blueprint wiring"""

    def test_srs_blueprint(self, client):
        response = client.get('/srs/test')
        assert response.status_code == 200
        assert response.get_json() == {'message': 'SRS blueprint working'}

    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'


class TestCreateCard:
    """Tests for POST /srs/create-card"""

    def test_create_card(self, client):
        response = client.post('/srs/create-card', json={
            'userId': 'user123',
            'word': 'hello',
            'translation': 'hola',
            'context': 'Hello, how are you today?'
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['message'] == 'Card created successfully'

        card = data['card']
        assert card['id'].startswith('card_')
        assert card['word'] == 'hello'
        assert card['translation'] == 'hola'
        assert card['state'] == 0
        assert card['stability'] == 0
        assert card['difficulty'] == 0
        assert card['reps'] == 0
        assert card['lapses'] == 0
        assert card['lastReviewed'] is None
        assert card['due'] == card['created']

    def test_optional_fields_default_to_empty(self, client):
        card = create_card(client)
        assert card['translation'] == ''
        assert card['context'] == ''

    @pytest.mark.parametrize('body', [
        {'word': 'hello'},
        {'userId': 'user123'},
        {'userId': 'user123', 'word': '   '},
        {'userId': '', 'word': 'hello'},
    ])
    def test_missing_fields(self, client, body):
        response = client.post('/srs/create-card', json=body)
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_no_body(self, client):
        response = client.post('/srs/create-card')
        assert response.status_code == 400


class TestReviewCards:
    """Tests for GET /srs/review-cards/<user_id>"""

    def test_unknown_user_gets_empty_list(self, client):
        response = client.get('/srs/review-cards/nobody')

        assert response.status_code == 200
        data = response.get_json()
        assert data['cards'] == []
        assert data['total'] == 0
        assert data['due'] == 0

    def test_new_cards_are_due(self, client):
        first = create_card(client, 'hello')
        second = create_card(client, 'world')

        data = client.get('/srs/review-cards/user123').get_json()

        assert data['success'] is True
        assert {card['id'] for card in data['cards']} == {first['id'], second['id']}
        assert data['total'] == 2
        assert data['due'] == 2

    def test_answered_card_leaves_queue(self, client):
        card = create_card(client, 'hello')
        create_card(client, 'world')

        client.post('/srs/answer-card', json={'userId': 'user123', 'cardId': card['id'], 'rating': 3})
        data = client.get('/srs/review-cards/user123').get_json()

        assert [c['word'] for c in data['cards']] == ['world']
        assert data['total'] == 2
        assert data['due'] == 1


class TestAnswerCard:
    """Tests for POST /srs/answer-card"""

    def test_good_promotes_new_card(self, client):
        card = create_card(client)

        response = client.post('/srs/answer-card', json={
            'userId': 'user123', 'cardId': card['id'], 'rating': 3
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['message'] == 'Card answered successfully'
        assert data['card']['state'] == 1
        assert data['card']['stability'] == 1.5
        assert data['card']['reps'] == 1
        assert data['card']['lastReviewed'] is not None
        assert data['result'] == {'state': 1, 'due': data['card']['due'], 'rating': 3}

    def test_again_counts_lapse(self, client):
        card = create_card(client)

        data = client.post('/srs/answer-card', json={
            'userId': 'user123', 'cardId': card['id'], 'rating': 1
        }).get_json()

        assert data['card']['state'] == 0
        assert data['card']['lapses'] == 1
        assert data['card']['stability'] == 0.1

    def test_whole_number_float_rating(self, client):
        card = create_card(client)

        data = client.post('/srs/answer-card', json={
            'userId': 'user123', 'cardId': card['id'], 'rating': 3.0
        }).get_json()

        assert data['success'] is True
        assert data['result']['rating'] == 3
        assert data['card']['state'] == 1

    @pytest.mark.parametrize('rating', [0, 6, '3', True, 2.5])
    def test_invalid_rating(self, client, rating):
        card = create_card(client)

        response = client.post('/srs/answer-card', json={
            'userId': 'user123', 'cardId': card['id'], 'rating': rating
        })

        assert response.status_code == 400
        assert 'Invalid rating' in response.get_json()['error']

        cards = client.get('/srs/all-cards/user123').get_json()['cards']
        assert cards[0]['reps'] == 0

    @pytest.mark.parametrize('body', [
        {'cardId': 'card_1', 'rating': 3},
        {'userId': 'user123', 'rating': 3},
        {'userId': 'user123', 'cardId': 'card_1'},
        {'userId': 'user123', 'cardId': 'card_1', 'rating': None},
    ])
    def test_missing_fields(self, client, body):
        response = client.post('/srs/answer-card', json=body)
        assert response.status_code == 400

    def test_unknown_user(self, client):
        response = client.post('/srs/answer-card', json={
            'userId': 'nobody', 'cardId': 'card_1', 'rating': 3
        })
        assert response.status_code == 404
        assert response.get_json()['error'] == 'User not found: nobody'

    def test_unknown_card(self, client):
        create_card(client)
        response = client.post('/srs/answer-card', json={
            'userId': 'user123', 'cardId': 'card_missing', 'rating': 3
        })
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Card not found: card_missing'

    def test_store_failure_is_server_error(self, client):
        card = create_card(client)
        error = OperationalError('UPDATE', {}, Exception('db down'))

        with patch.object(db.session, 'commit', side_effect=error):
            response = client.post('/srs/answer-card', json={
                'userId': 'user123', 'cardId': card['id'], 'rating': 3
            })

        assert response.status_code == 500
        assert response.get_json() == {'success': False, 'error': 'Failed to answer card'}


class TestStats:
    """Tests for GET /srs/stats/<user_id>"""

    def test_unknown_user_is_zeroed(self, client):
        response = client.get('/srs/stats/nobody')

        assert response.status_code == 200
        assert response.get_json()['stats'] == {
            'totalCards': 0,
            'dueCards': 0,
            'learningCards': 0,
            'reviewCards': 0,
            'relearningCards': 0
        }

    def test_counts(self, client):
        cards = [create_card(client, f'word{i}') for i in range(5)]
        for card in cards[:2]:
            client.post('/srs/answer-card', json={'userId': 'user123', 'cardId': card['id'], 'rating': 3})

        stats = client.get('/srs/stats/user123').get_json()['stats']

        assert stats == {
            'totalCards': 5,
            'dueCards': 3,
            'learningCards': 3,
            'reviewCards': 2,
            'relearningCards': 0
        }


class TestDeleteCard:
    """Tests for DELETE /srs/delete-card/<user_id>/<card_id>"""

    def test_delete(self, client):
        card = create_card(client)

        response = client.delete(f"/srs/delete-card/user123/{card['id']}")

        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'message': 'Card deleted successfully'}
        assert client.get('/srs/stats/user123').get_json()['stats']['totalCards'] == 0

    def test_delete_twice(self, client):
        card = create_card(client)
        client.delete(f"/srs/delete-card/user123/{card['id']}")

        response = client.delete(f"/srs/delete-card/user123/{card['id']}")

        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_unknown_user(self, client):
        response = client.delete('/srs/delete-card/nobody/card_1')
        assert response.status_code == 404


class TestUpdateCard:
    """Tests for PUT /srs/update-card/<user_id>/<card_id>"""

    def test_update(self, client):
        card = create_card(client, 'hello', translation='hola', context='Hello!')

        response = client.put(f"/srs/update-card/user123/{card['id']}", json={
            'word': 'hi', 'translation': '', 'context': 'Hi there!'
        })

        assert response.status_code == 200
        updated = response.get_json()['card']
        assert updated['word'] == 'hi'
        assert updated['translation'] == 'hola'
        assert updated['context'] == 'Hi there!'
        assert updated['due'] == card['due']

    def test_word_required(self, client):
        card = create_card(client)
        response = client.put(f"/srs/update-card/user123/{card['id']}", json={'translation': 'x'})
        assert response.status_code == 400

    def test_unknown_card(self, client):
        create_card(client)
        response = client.put('/srs/update-card/user123/card_missing', json={'word': 'hi'})
        assert response.status_code == 404


class TestAllCards:
    """Tests for GET /srs/all-cards/<user_id>"""

    def test_search_order_and_pagination(self, client):
        for word in ['banana', 'apple', 'cherry', 'apricot']:
            create_card(client, word)

        data = client.get('/srs/all-cards/user123?search=ap&order_dir=desc').get_json()
        assert [card['word'] for card in data['cards']] == ['apricot', 'apple']
        assert data['total'] == 2

        data = client.get('/srs/all-cards/user123?limit=2&offset=2').get_json()
        assert [card['word'] for card in data['cards']] == ['banana', 'cherry']
        assert data['total'] == 4

    def test_unknown_user(self, client):
        data = client.get('/srs/all-cards/nobody').get_json()
        assert data['cards'] == []
        assert data['total'] == 0


class TestDuplicateCheck:
    """Tests for GET /srs/duplicate-check/<user_id>"""

    def test_duplicate_found(self, client):
        card = create_card(client, 'Hello', translation='Hola')

        data = client.get('/srs/duplicate-check/user123?word=hello&translation=hola').get_json()

        assert data['duplicate'] is True
        assert data['card']['id'] == card['id']

    def test_no_duplicate(self, client):
        create_card(client, 'hello', translation='hola')

        data = client.get('/srs/duplicate-check/user123?word=hello').get_json()

        assert data['duplicate'] is False
        assert data['card'] is None

    def test_word_required(self, client):
        assert client.get('/srs/duplicate-check/user123').status_code == 400


class TestFreshInstall:
    """A new SQL database gets its tables when the app starts"""

    def test_development_app_can_write(self):
        app = create_app('development', {'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:'})

        with app.test_client() as client:
            response = client.post('/srs/create-card', json={'userId': 'user123', 'word': 'hello'})
            assert response.status_code == 200

            stats = client.get('/srs/stats/user123').get_json()['stats']
            assert stats['totalCards'] == 1
