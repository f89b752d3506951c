"""SQLAlchemy models for the preference store."""

from datetime import datetime
from app import db


class Preference(db.Model):
    """A single key/value preference. Last write wins."""

    __tablename__ = "preferences"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Preference {self.key}: {len(self.value)} chars>"

    def to_dict(self):
        return {
            "key": self.key,
            "value": self.value,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
