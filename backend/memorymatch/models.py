from datetime import datetime, timezone

from memorymatch import db, bcrypt

class User(db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }

def _utcnow():
    return datetime.now(timezone.utc)

class Score(db.Model):
    """One finished (or abandoned) game. Rows are append-only."""
    __tablename__ = 'score'
    id = db.Column(db.Integer, primary_key=True)
    # Not a foreign key: save-score accepts any user id
    user_id = db.Column(db.Integer, nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    time_remaining = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'score': self.score,
            'time_remaining': self.time_remaining,
        }
