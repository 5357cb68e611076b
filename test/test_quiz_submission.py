"""
Test cases for quiz submission and scoring.
"""
import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from quizboard import db
from quizboard.errors import ValidationError, NotFound, InternalError
from quizboard.quiz.models import CompletedQuiz, QuizScore
from quizboard.quiz.service import QuizService, calculate_percentage


def answers_for(*options):
    return [{'selected_option': option} for option in options]


class TestScoring:
    """Test cases for grading answers."""

    def test_partial_score(self, app, make_quiz, student):
        quiz = make_quiz(answers=('A', 'B', 'C'))
        attempt, already_taken = QuizService.submit_quiz(quiz.id, student.id, answers_for('A', 'B', 'X'))
        assert already_taken is False
        assert attempt.score == 2
        assert attempt.total_questions == 3
        assert attempt.percentage == 66.67

    def test_perfect_and_zero_scores(self, app, make_quiz, student, other_student):
        quiz = make_quiz(answers=('A', 'B'))
        perfect, _ = QuizService.submit_quiz(quiz.id, student.id, answers_for('A', 'B'))
        zero, _ = QuizService.submit_quiz(quiz.id, other_student.id, answers_for('D', 'D'))
        assert (perfect.score, perfect.percentage) == (2, 100.0)
        assert (zero.score, zero.percentage) == (0, 0.0)

    def test_missing_answers_count_as_wrong(self, app, make_quiz, student):
        quiz = make_quiz(answers=('A', 'B', 'C'))
        attempt, _ = QuizService.submit_quiz(quiz.id, student.id, answers_for('A'))
        assert attempt.score == 1
        assert [q.selected_option for q in attempt.questions] == ['A', None, None]

    def test_answers_matched_by_question_id(self, app, make_quiz, student):
        quiz = make_quiz(answers=('A', 'B', 'C'))
        q1, q2, q3 = quiz.questions
        answers = [
            {'question_id': q3.id, 'selected_option': 'C'},
            {'question_id': q1.id, 'selected_option': 'A'},
            {'question_id': q2.id, 'selected_option': 'D'},
        ]
        attempt, _ = QuizService.submit_quiz(quiz.id, student.id, answers)
        assert attempt.score == 2
        assert [q.selected_option for q in attempt.questions] == ['A', 'D', 'C']

    def test_snapshot_recorded(self, app, make_quiz, student):
        quiz = make_quiz(answers=('A', 'B'))
        attempt, _ = QuizService.submit_quiz(quiz.id, student.id, answers_for('A', 'C'))
        snapshot = attempt.to_dict()['questions']
        assert snapshot == [
            {'question_text': 'Question 1', 'options': ['A', 'B', 'C', 'D'],
             'correct_answer': 'A', 'selected_option': 'A', 'is_correct': True},
            {'question_text': 'Question 2', 'options': ['A', 'B', 'C', 'D'],
             'correct_answer': 'B', 'selected_option': 'C', 'is_correct': False},
        ]

    def test_score_row_written(self, app, make_quiz, student):
        quiz = make_quiz(answers=('A', 'B', 'C', 'D'))
        QuizService.submit_quiz(quiz.id, student.id, answers_for('A', 'B', 'A', 'A'))
        row = QuizScore.query.filter_by(quiz_id=quiz.id, student_id=student.id).one()
        assert (row.score, row.total_questions, row.percentage) == (2, 4, 50.0)

    @pytest.mark.parametrize('score,total,expected', [
        (0, 0, 0.0),
        (1, 3, 33.33),
        (2, 3, 66.67),
        (3, 3, 100.0),
    ])
    def test_calculate_percentage(self, score, total, expected):
        assert calculate_percentage(score, total) == expected


class TestSubmissionErrors:
    """Test cases for rejected submissions."""

    def test_missing_quiz(self, app, student):
        with pytest.raises(NotFound):
            QuizService.submit_quiz(404, student.id, [])

    def test_answers_must_be_list(self, app, make_quiz, student):
        quiz = make_quiz()
        with pytest.raises(ValidationError):
            QuizService.submit_quiz(quiz.id, student.id, {'selected_option': 'A'})

    def test_answer_items_must_be_objects(self, app, make_quiz, student):
        quiz = make_quiz()
        with pytest.raises(ValidationError):
            QuizService.submit_quiz(quiz.id, student.id, ['A', 'B', 'C'])

    def test_store_failure_rolls_back_both_writes(self, app, make_quiz, student):
        quiz = make_quiz()
        with patch.object(db.session, 'commit', side_effect=OperationalError('INSERT', {}, Exception('down'))):
            with pytest.raises(InternalError) as exc:
                QuizService.submit_quiz(quiz.id, student.id, answers_for('A', 'B', 'C'))
        assert exc.value.status_code == 500
        assert CompletedQuiz.query.count() == 0
        assert QuizScore.query.count() == 0


class TestOneAttemptPerStudent:
    """Test cases for duplicate submissions."""

    def test_second_submission_returns_first(self, app, make_quiz, student):
        quiz = make_quiz(answers=('A', 'B', 'C'))
        first, _ = QuizService.submit_quiz(quiz.id, student.id, answers_for('A', 'X', 'X'))
        second, already_taken = QuizService.submit_quiz(quiz.id, student.id, answers_for('A', 'B', 'C'))
        assert already_taken is True
        assert second.id == first.id
        assert second.score == 1
        assert CompletedQuiz.query.filter_by(quiz_id=quiz.id, student_id=student.id).count() == 1
        assert QuizScore.query.filter_by(quiz_id=quiz.id, student_id=student.id).count() == 1

    def test_lost_race_returns_winner(self, app, make_quiz, student):
        quiz = make_quiz(answers=('A',))
        winner, _ = QuizService.submit_quiz(quiz.id, student.id, answers_for('A'))

        # Simulate a request that passed the pre-check before the winner committed
        with patch.object(QuizService, 'find_attempt', side_effect=[None, winner]):
            attempt, already_taken = QuizService.submit_quiz(quiz.id, student.id, answers_for('B'))
        assert already_taken is True
        assert attempt.id == winner.id
        assert CompletedQuiz.query.count() == 1

    def test_other_students_unaffected(self, app, make_quiz, student, other_student):
        quiz = make_quiz()
        QuizService.submit_quiz(quiz.id, student.id, [])
        _, already_taken = QuizService.submit_quiz(quiz.id, other_student.id, [])
        assert already_taken is False


class TestSubmitEndpoint:
    """Test cases for POST /quiz/submit/<quiz_id>."""

    def test_submit(self, student_client, make_quiz, student):
        quiz = make_quiz(answers=('A', 'B', 'C'))
        response = student_client.post(f'/quiz/submit/{quiz.id}', json={'answers': answers_for('A', 'B', 'X')})
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['already_taken'] is False
        assert data['message'] == 'Quiz submitted'
        assert data['result']['score'] == 2
        assert data['result']['percentage'] == 66.67
        assert data['result']['student_id'] == student.id

    def test_resubmit_flags_already_taken(self, student_client, make_quiz):
        quiz = make_quiz(answers=('A', 'B', 'C'))
        first = student_client.post(f'/quiz/submit/{quiz.id}', json={'answers': answers_for('A', 'A', 'A')})
        second = student_client.post(f'/quiz/submit/{quiz.id}', json={'answers': answers_for('A', 'B', 'C')})
        assert second.status_code == 200
        data = second.get_json()
        assert data['success'] is True
        assert data['already_taken'] is True
        assert data['message'] == 'You have already taken this quiz.'
        assert data['result'] == first.get_json()['result']

    def test_submit_missing_quiz(self, student_client):
        response = student_client.post('/quiz/submit/999', json={'answers': []})
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Quiz not found!'

    def test_submit_without_answers(self, student_client, make_quiz):
        quiz = make_quiz()
        response = student_client.post(f'/quiz/submit/{quiz.id}', json={})
        assert response.status_code == 400

    def test_submit_requires_login(self, client, make_quiz):
        quiz = make_quiz()
        response = client.post(f'/quiz/submit/{quiz.id}', json={'answers': []})
        assert response.status_code == 401
