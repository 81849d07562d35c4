"""
SRS Routes - Endpoints for card creation, review and statistics.

This module provides API endpoints for the spaced repetition system:
- POST   /srs/create-card                      - Create a new card
- GET    /srs/review-cards/<user_id>           - Cards due for review
- POST   /srs/answer-card                      - Rate a card and reschedule it
- GET    /srs/stats/<user_id>                  - Card counts by state
- DELETE /srs/delete-card/<user_id>/<card_id>  - Delete a card
- PUT    /srs/update-card/<user_id>/<card_id>  - Edit a card's text
- GET    /srs/all-cards/<user_id>              - Browse all cards
- GET    /srs/duplicate-check/<user_id>        - Look for an existing card
"""

import logging

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from models import db
from services.card_service import get_card_service, utc_now
from services.exceptions import SrsError
from services.spaced_repetition import Rating
from services.srs_models import AnswerCardRequest, CreateCardRequest, UpdateCardRequest

logger = logging.getLogger(__name__)

bp = Blueprint('srs', __name__, url_prefix='/srs')


def _validation_error(e: ValidationError):
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in e.errors()
    ]
    return jsonify({'success': False, 'error': '; '.join(messages)}), 400


def _srs_error(e: SrsError):
    return jsonify({'success': False, 'error': str(e)}), e.status_code


def _server_error(message: str):
    db.session.rollback()
    return jsonify({'success': False, 'error': message}), 500


@bp.route('/test')
def test():
    return jsonify({'message': 'SRS blueprint working'})


@bp.route('/create-card', methods=['POST'])
def create_card():
    """
    Create a new card in the user's collection.

    Request Body:
        {
            "userId": "user123",
            "word": "hello",
            "translation": "hola",            (optional)
            "context": "Hello, how are you?"  (optional)
        }

    Returns:
        200: {"success": true, "card": {...}, "message": "Card created successfully"}
        400: Missing userId or word
        500: Server error
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'success': False, 'error': 'userId and word are required'}), 400

        payload = CreateCardRequest.model_validate(data)
        card = get_card_service().create_card(
            user_id=payload.user_id,
            word=payload.word,
            translation=payload.translation,
            context=payload.context
        )

        return jsonify({
            'success': True,
            'card': card.to_api(),
            'message': 'Card created successfully'
        }), 200

    except ValidationError as e:
        return _validation_error(e)
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except Exception as e:
        logger.exception(f'Error creating card: {str(e)}')
        return _server_error('Failed to create card')


@bp.route('/review-cards/<user_id>', methods=['GET'])
def get_review_cards(user_id):
    """
    Get the cards that are due for review now.

    Users without a collection get an empty list.

    Returns:
        200: {"success": true, "cards": [...], "total": 5, "due": 2}
    """
    try:
        service = get_card_service()
        now = utc_now()
        due_cards = service.get_due_cards(user_id, now)
        stats = service.get_stats(user_id, now)

        return jsonify({
            'success': True,
            'cards': [card.to_api() for card in due_cards],
            'total': stats.total,
            'due': len(due_cards)
        }), 200

    except Exception as e:
        logger.exception(f'Error getting review cards for user {user_id}: {str(e)}')
        return _server_error('Failed to get review cards')


@bp.route('/answer-card', methods=['POST'])
def answer_card():
    """
    Rate a card and reschedule it.

    Request Body:
        {
            "userId": "user123",
            "cardId": "card_...",
            "rating": 3       (1 Again, 2 Hard, 3 Good, 4 Easy, 5 Perfect)
        }

    Returns:
        200: {
                "success": true,
                "card": {...},
                "result": {"state": 1, "due": "...", "rating": 3},
                "message": "Card answered successfully"
             }
        400: Missing fields or invalid rating
        404: User or card not found
        500: Server error
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'success': False, 'error': 'userId, cardId, and rating are required'}), 400

        payload = AnswerCardRequest.model_validate(data)
        rating = Rating.parse(payload.rating)
        card = get_card_service().answer_card(payload.user_id, payload.card_id, rating)

        return jsonify({
            'success': True,
            'card': card.to_api(),
            'result': {
                'state': int(card.state),
                'due': card.to_api()['due'],
                'rating': int(rating)
            },
            'message': 'Card answered successfully'
        }), 200

    except ValidationError as e:
        return _validation_error(e)
    except SrsError as e:
        logger.warning(f'Rejected answer: {str(e)}')
        return _srs_error(e)
    except Exception as e:
        logger.exception(f'Error answering card: {str(e)}')
        return _server_error('Failed to answer card')


@bp.route('/stats/<user_id>', methods=['GET'])
def get_stats(user_id):
    """
    Get card counts for a user.

    Returns:
        200: {
                "success": true,
                "stats": {
                    "totalCards": 5, "dueCards": 2, "learningCards": 3,
                    "reviewCards": 2, "relearningCards": 0
                }
             }
    """
    try:
        stats = get_card_service().get_stats(user_id)
        return jsonify({'success': True, 'stats': stats.to_api()}), 200

    except Exception as e:
        logger.exception(f'Error getting stats for user {user_id}: {str(e)}')
        return _server_error('Failed to get statistics')


@bp.route('/delete-card/<user_id>/<card_id>', methods=['DELETE'])
def delete_card(user_id, card_id):
    """
    Delete a card.

    Returns:
        200: {"success": true, "message": "Card deleted successfully"}
        404: User or card not found
    """
    try:
        get_card_service().delete_card(user_id, card_id)
        return jsonify({'success': True, 'message': 'Card deleted successfully'}), 200

    except SrsError as e:
        logger.warning(f'Rejected delete: {str(e)}')
        return _srs_error(e)
    except Exception as e:
        logger.exception(f'Error deleting card {card_id} for user {user_id}: {str(e)}')
        return _server_error('Failed to delete card')


@bp.route('/update-card/<user_id>/<card_id>', methods=['PUT'])
def update_card(user_id, card_id):
    """
    Edit the word, translation or context of a card.

    Request Body:
        {
            "word": "hello",             (required)
            "translation": "hola",       (optional, empty keeps current)
            "context": "Hello there!"    (optional, empty keeps current)
        }

    Returns:
        200: {"success": true, "card": {...}, "message": "Card updated successfully"}
        400: Missing word
        404: User or card not found
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'success': False, 'error': 'word is required'}), 400

        payload = UpdateCardRequest.model_validate(data)
        card = get_card_service().update_card(
            user_id,
            card_id,
            word=payload.word,
            translation=payload.translation,
            context=payload.context
        )

        return jsonify({
            'success': True,
            'card': card.to_api(),
            'message': 'Card updated successfully'
        }), 200

    except ValidationError as e:
        return _validation_error(e)
    except SrsError as e:
        return _srs_error(e)
    except Exception as e:
        logger.exception(f'Error updating card {card_id} for user {user_id}: {str(e)}')
        return _server_error('Failed to update card')


@bp.route('/all-cards/<user_id>', methods=['GET'])
def get_all_cards(user_id):
    """
    Browse all cards of a user.

    Query params:
        - search: Filter by word (case-insensitive substring)
        - order_by: word, created, due or state (default: word)
        - order_dir: asc or desc (default: asc)
        - limit: Page size (optional)
        - offset: Cards to skip, used together with limit (optional)

    Returns:
        200: {"success": true, "cards": [...], "total": 12}
    """
    try:
        cards, total = get_card_service().list_cards(
            user_id,
            search=request.args.get('search', None, type=str),
            order_by=request.args.get('order_by', 'word', type=str),
            order_dir=request.args.get('order_dir', 'asc', type=str),
            limit=request.args.get('limit', None, type=int),
            offset=request.args.get('offset', None, type=int)
        )

        return jsonify({
            'success': True,
            'cards': [card.to_api() for card in cards],
            'total': total
        }), 200

    except Exception as e:
        logger.exception(f'Error getting all cards for user {user_id}: {str(e)}')
        return _server_error('Failed to get all cards')


@bp.route('/duplicate-check/<user_id>', methods=['GET'])
def duplicate_check(user_id):
    """
    Check whether the user already has a card with this word and translation.

    Query params:
        - word: Word to look for (required)
        - translation: Translation to match (optional)

    Returns:
        200: {"success": true, "duplicate": true, "card": {...}}
        400: Missing word
    """
    try:
        word = request.args.get('word', '', type=str)
        if not word.strip():
            return jsonify({'success': False, 'error': 'word is required'}), 400

        card = get_card_service().find_duplicate(
            user_id,
            word,
            request.args.get('translation', '', type=str)
        )

        return jsonify({
            'success': True,
            'duplicate': card is not None,
            'card': card.to_api() if card else None
        }), 200

    except Exception as e:
        logger.exception(f'Error checking duplicate card for user {user_id}: {str(e)}')
        return _server_error('Failed to check for duplicate card')
