from models import db
from datetime import datetime, timezone
from services.srs_models import Card, CardState


class CardRecord(db.Model):
    """CardRecord model - durable row behind a Card in a user's collection"""
    __tablename__ = 'cards'

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.String(255), db.ForeignKey('users.user_id'), nullable=False)
    card_id = db.Column(db.String(64), nullable=False)

    word = db.Column(db.String, nullable=False)
    translation = db.Column(db.String, nullable=False, default='')
    context = db.Column(db.Text, nullable=False, default='')

    # 0 = learning, 1 = review, 2 = relearning
    state = db.Column(db.Integer, nullable=False, default=int(CardState.LEARNING))

    due = db.Column(db.DateTime(timezone=True), nullable=False)
    stability = db.Column(db.Float, nullable=False, default=0.0)
    difficulty = db.Column(db.Float, nullable=False, default=0.0)
    elapsed_days = db.Column(db.Float, nullable=False, default=0.0)
    scheduled_days = db.Column(db.Float, nullable=False, default=0.0)
    reps = db.Column(db.Integer, nullable=False, default=0)
    lapses = db.Column(db.Integer, nullable=False, default=0)

    created = db.Column(db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    last_reviewed = db.Column(db.DateTime(timezone=True))

    # Relationships
    user = db.relationship('User', back_populates='cards')

    # Card ids are unique per user; due-card queries filter on (user_id, due)
    __table_args__ = (
        db.UniqueConstraint('user_id', 'card_id', name='uq_user_card'),
        db.Index('idx_user_due', 'user_id', 'due'),
    )

    @classmethod
    def from_card(cls, user_id: str, card: Card) -> 'CardRecord':
        record = cls(user_id=user_id, card_id=card.id)
        record.apply(card)
        return record

    def apply(self, card: Card) -> None:
        """Copy every mutable field of card onto this row"""
        self.word = card.word
        self.translation = card.translation
        self.context = card.context
        self.state = int(card.state)
        self.due = card.due
        self.stability = card.stability
        self.difficulty = card.difficulty
        self.elapsed_days = card.elapsed_days
        self.scheduled_days = card.scheduled_days
        self.reps = card.reps
        self.lapses = card.lapses
        self.created = card.created
        self.last_reviewed = card.last_reviewed

    def to_card(self) -> Card:
        # SQLite hands back naive datetimes; Card normalizes them to UTC
        return Card(
            id=self.card_id,
            word=self.word,
            translation=self.translation or '',
            context=self.context or '',
            state=CardState(self.state),
            due=self.due,
            stability=self.stability,
            difficulty=self.difficulty,
            elapsed_days=self.elapsed_days,
            scheduled_days=self.scheduled_days,
            reps=self.reps,
            lapses=self.lapses,
            created=self.created,
            last_reviewed=self.last_reviewed
        )

    def __repr__(self):
        return f'<CardRecord user_id={self.user_id} card_id={self.card_id} state={self.state}>'
