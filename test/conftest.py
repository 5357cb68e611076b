"""
Pytest configuration and fixtures for testing.
Runs the application against an in-memory SQLite database.
"""
import os

# Set test environment variables BEFORE the application package is imported
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'sfndsfojoriwew09rjfjndsknfkj'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['QUIZ_URL_PREFIX'] = '/quiz'
os.environ['LOG_LEVEL'] = 'WARNING'

import pytest
from flask import g
from flask_login import FlaskLoginClient

from quizboard import create_app, db
from quizboard.auth.models import User
from quizboard.quiz.service import QuizService


@pytest.fixture
def app():
    """Create application for testing with a fresh database."""
    app = create_app()
    app.config['TESTING'] = True
    app.test_client_class = FlaskLoginClient

    # Requests reuse the fixture's app context, so the user cached on g
    # by Flask-Login must be dropped before each request
    @app.before_request
    def reset_login_user():
        g.pop('_login_user', None)

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Test client without a logged in user."""
    return app.test_client()


def _create_user(email, full_name, user_type='student', avatar=None):
    user = User(email=email, full_name=full_name, user_type=user_type, avatar=avatar)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin(app):
    return _create_user('admin@test.com', 'Admin User', user_type='admin')


@pytest.fixture
def student(app):
    return _create_user('student@test.com', 'Test Student', avatar='https://cdn.test/a.png')


@pytest.fixture
def other_student(app):
    return _create_user('other@test.com', 'Other Student')


@pytest.fixture
def admin_client(app, admin):
    return app.test_client(user=admin)


@pytest.fixture
def student_client(app, student):
    return app.test_client(user=student)


def quiz_payload(title='General Knowledge', answers=('A', 'B', 'C'), duration=10):
    """Build a quiz body with one question per correct answer."""
    return {
        'title': title,
        'description': 'A short quiz',
        'duration': duration,
        'questions': [
            {
                'question_text': f'Question {idx + 1}',
                'options': ['A', 'B', 'C', 'D'],
                'correct_answer': answer,
            }
            for idx, answer in enumerate(answers)
        ],
    }


@pytest.fixture
def make_quiz(admin):
    """Factory that stores a quiz authored by the admin."""
    def _make_quiz(**kwargs):
        return QuizService.add_quiz(quiz_payload(**kwargs), creator_id=admin.id)
    return _make_quiz
