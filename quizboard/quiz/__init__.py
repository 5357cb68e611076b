"""
Quiz module.

Admins author quizzes; students submit one graded attempt per quiz,
which is ranked on the quiz leaderboard and archived in their history.
"""
from flask import Blueprint
from quizboard.config import config

quiz_bp = Blueprint('quiz', __name__, url_prefix=config.QUIZ_URL_PREFIX)

from quizboard.quiz import admin_routes, student_routes  # noqa: E402,F401
