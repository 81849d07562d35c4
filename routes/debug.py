"""
Debug Routes - Read-only dumps of every card collection.

Registered only when SRS_DEBUG_ROUTES_ENABLED is set.
"""

import logging

from flask import Blueprint, jsonify

from services.card_service import get_card_service, utc_now

logger = logging.getLogger(__name__)

bp = Blueprint('srs_debug', __name__, url_prefix='/srs/debug')


@bp.route('/all-cards', methods=['GET'])
def all_cards():
    """
    Get every user's cards annotated with isDue and daysUntilDue.

    Returns:
        200: {
                "success": true,
                "timestamp": "...",
                "totalUsers": 1,
                "allCards": {"user123": [{...card..., "isDue": true, "daysUntilDue": 0}]}
             }
    """
    try:
        now = utc_now()
        snapshot = get_card_service().debug_snapshot(now)

        logger.debug(f"SRS debug dump: {len(snapshot)} users")

        return jsonify({
            'success': True,
            'timestamp': now.isoformat(),
            'totalUsers': len(snapshot),
            'allCards': {user_id: entry['cards'] for user_id, entry in snapshot.items()}
        }), 200

    except Exception as e:
        logger.exception(f'Error getting debug information: {str(e)}')
        return jsonify({'success': False, 'error': 'Failed to get debug information'}), 500


@bp.route('/log', methods=['GET'])
def log():
    """
    Get per-user stats and card summaries, and write the summary to the log.

    Returns:
        200: {
                "success": true,
                "log": {
                    "timestamp": "...",
                    "totalUsers": 1,
                    "users": {"user123": {"totalCards": 5, ..., "cards": [...]}}
                }
             }
    """
    try:
        now = utc_now()
        snapshot = get_card_service().debug_snapshot(now)

        users = {}
        for user_id, entry in snapshot.items():
            stats = entry['stats']
            logger.info(
                f"SRS user {user_id}: total={stats.total}, due={stats.due}, "
                f"learning={stats.learning}, review={stats.review}, relearning={stats.relearning}"
            )
            users[user_id] = {
                **stats.to_api(),
                'cards': [
                    {'index': index, **card}
                    for index, card in enumerate(entry['cards'], start=1)
                ]
            }

        return jsonify({
            'success': True,
            'log': {
                'timestamp': now.isoformat(),
                'totalUsers': len(users),
                'users': users
            }
        }), 200

    except Exception as e:
        logger.exception(f'Error generating SRS log: {str(e)}')
        return jsonify({'success': False, 'error': 'Failed to generate log'}), 500
