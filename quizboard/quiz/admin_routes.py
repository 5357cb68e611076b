"""
Quiz authoring routes.

Authenticated users can:
- Create quizzes
- Replace a quiz and its questions
- Delete a quiz or a single question
"""
from flask import jsonify, request
from flask_login import login_required, current_user

from quizboard.quiz import quiz_bp
from quizboard.quiz.service import QuizService


@quiz_bp.route('/add', methods=['POST'])
@login_required
def add_quiz():
    """
    Create a new quiz.

    Request body:
    {
        "title": "Quiz Title",
        "description": "Optional description",
        "duration": 30,
        "questions": [
            {
                "question_text": "What is 2+2?",
                "options": ["3", "4", "5"],
                "correct_answer": "4"
            }
        ]
    }
    """
    quiz = QuizService.add_quiz(request.get_json(silent=True), creator_id=current_user.id)
    return jsonify({
        'success': True,
        'message': 'Quiz added successfully!',
        'quiz': quiz.to_dict()
    }), 201


@quiz_bp.route('/update/<int:quiz_id>', methods=['PUT'])
@login_required
def update_quiz(quiz_id):
    """
    Replace a quiz. The body has the same shape as for /add and the
    question list replaces the existing one entirely.
    """
    quiz = QuizService.update_quiz(quiz_id, request.get_json(silent=True))
    return jsonify({
        'success': True,
        'message': 'Quiz updated successfully!',
        'quiz': quiz.to_dict()
    }), 200


@quiz_bp.route('/delete/<int:quiz_id>', methods=['DELETE'])
@login_required
def delete_quiz(quiz_id):
    QuizService.delete_quiz(quiz_id)
    return jsonify({
        'success': True,
        'message': 'Quiz deleted successfully!'
    }), 200


@quiz_bp.route('/delete/<int:quiz_id>/question/<int:question_id>', methods=['DELETE'])
@login_required
def delete_question(quiz_id, question_id):
    """
    Delete one question from a quiz.
    Deleting a question that is not in the quiz still succeeds.
    """
    quiz = QuizService.delete_question(quiz_id, question_id)
    return jsonify({
        'success': True,
        'message': 'Question deleted successfully!',
        'quiz': quiz.to_dict()
    }), 200
