from .. import db
from datetime import datetime

class StoreEntry(db.Model):
    """One key of the persistent key-value store; value is a JSON document"""
    __tablename__ = 'store_entries'

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    version = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<StoreEntry {self.key} v{self.version}>'
