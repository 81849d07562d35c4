from models import db
from datetime import datetime, timezone
from sqlalchemy.orm import validates


class User(db.Model):
    """User model - owner of a card collection, identified by an opaque string id"""
    __tablename__ = 'users'

    user_id = db.Column(db.String(255), primary_key=True)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    cards = db.relationship(
        'CardRecord',
        back_populates='user',
        lazy='dynamic',
        cascade='all, delete-orphan'
    )

    @validates('user_id')
    def validate_user_id(self, key, user_id):
        if not user_id or not user_id.strip():
            raise ValueError('user_id is required')
        return user_id

    def __repr__(self):
        return f'<User {self.user_id}>'
