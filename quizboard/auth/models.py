from datetime import datetime
from flask import current_app
from flask_login import UserMixin

from quizboard import db


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(255), nullable=False)
    avatar = db.Column(db.String(512), nullable=True)  # Public URL of the profile image
    user_type = db.Column(db.String(20), nullable=False, default="student")  # 'student' or 'admin'
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.email} ({self.user_type})>"

    def is_student(self) -> bool:
        return self.user_type == "student"

    def is_admin(self) -> bool:
        return self.user_type == current_app.config.get("ADMIN_USER_TYPE", "admin")

    def to_public_dict(self):
        """Fields shown next to a score on the leaderboard."""
        return {
            'id': self.id,
            'full_name': self.full_name,
            'avatar': self.avatar,
        }
