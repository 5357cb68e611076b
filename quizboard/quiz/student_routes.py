"""
Quiz routes for taking quizzes and reading results.

Students can:
- See the latest quiz and the quizzes they have completed
- Submit answers once per quiz
- View the leaderboard and their attempt history
"""
from flask import jsonify, request
from flask_login import login_required, current_user

from quizboard.quiz import quiz_bp
from quizboard.quiz.service import QuizService
from quizboard.security import SecurityLogger


def _requester_is_admin() -> bool:
    return current_user.is_authenticated and current_user.is_admin()


@quiz_bp.route('/latest', methods=['GET'])
def get_latest_quiz():
    quiz = QuizService.get_latest_quiz()
    return jsonify({
        'success': True,
        'latest_quiz': quiz.to_dict(include_answers=_requester_is_admin())
    }), 200


@quiz_bp.route('/getall', methods=['GET'])
@login_required
def get_all_quizzes():
    """
    List quizzes for the current user.
    Admins get every quiz; students get the latest quiz plus the ones they completed.
    """
    quizzes = QuizService.get_all_quizzes(current_user)
    include_answers = current_user.is_admin()
    return jsonify({
        'success': True,
        'quizzes': [quiz.to_dict(include_answers=include_answers) for quiz in quizzes]
    }), 200


@quiz_bp.route('/<int:quiz_id>', methods=['GET'])
def get_single_quiz(quiz_id):
    quiz = QuizService.get_single_quiz(quiz_id)
    return jsonify({
        'success': True,
        'quiz': quiz.to_dict(include_answers=_requester_is_admin())
    }), 200


@quiz_bp.route('/submit/<int:quiz_id>', methods=['POST'])
@login_required
def submit_quiz(quiz_id):
    """
    Grade and record the current user's answers.

    Request body:
    {
        "answers": [
            {"selected_option": "4"},
            {"question_id": 12, "selected_option": "Paris"}
        ]
    }

    A second submission for the same quiz is not graded again; the stored
    result is returned with already_taken set.
    """
    data = request.get_json(silent=True) or {}
    attempt, already_taken = QuizService.submit_quiz(quiz_id, current_user.id, data.get('answers'))

    if already_taken:
        SecurityLogger.log_duplicate_submission(current_user.id, quiz_id)
        return jsonify({
            'success': True,
            'already_taken': True,
            'message': 'You have already taken this quiz.',
            'result': attempt.to_dict()
        }), 200

    return jsonify({
        'success': True,
        'already_taken': False,
        'message': 'Quiz submitted',
        'result': attempt.to_dict()
    }), 200


@quiz_bp.route('/leaderboard/<int:quiz_id>', methods=['GET'])
@login_required
def get_quiz_leaderboard(quiz_id):
    leaderboard = QuizService.get_leaderboard(quiz_id)
    return jsonify({
        'success': True,
        'quiz_id': quiz_id,
        'leaderboard': leaderboard
    }), 200


@quiz_bp.route('/completed-quizzes', methods=['POST'])
def save_completed_quiz():
    """
    Archive an attempt as sent by the client.

    Request body:
    {
        "student_id": 3,
        "quiz_id": 7,
        "score": 2,
        "total_questions": 3,
        "percentage": 66.67,
        "questions": [
            {"question_text": "...", "options": ["A", "B"], "correct_answer": "A", "selected_option": "B"}
        ]
    }
    """
    attempt = QuizService.save_completed_quiz(request.get_json(silent=True))
    return jsonify({
        'success': True,
        'message': 'Quiz completed successfully',
        'completed_quiz': attempt.to_dict()
    }), 201


@quiz_bp.route('/completed-quizzes/<int:student_id>', methods=['GET'])
def get_completed_quizzes(student_id):
    completed = QuizService.get_completed_quizzes(student_id)
    return jsonify({
        'success': True,
        'completed_quizzes': completed
    }), 200
