"""Error taxonomy of the spaced repetition engine"""


class SrsError(Exception):
    """Base class for expected, user-facing SRS failures"""
    status_code = 400


class InvalidRating(SrsError):
    """Rating outside Again(1) .. Perfect(5)"""
    status_code = 400

    def __init__(self, rating):
        self.rating = rating
        super().__init__(f'Invalid rating: {rating!r}. Must be an integer from 1 to 5')


class UnknownUser(SrsError):
    """Addressed user has no card collection"""
    status_code = 404

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f'User not found: {user_id}')


class UnknownCard(SrsError):
    """Card id is not in the addressed user's collection"""
    status_code = 404

    def __init__(self, user_id: str, card_id: str):
        self.user_id = user_id
        self.card_id = card_id
        super().__init__(f'Card not found: {card_id}')


class SessionStateError(SrsError):
    """Review session operation attempted in the wrong state"""
    status_code = 409
