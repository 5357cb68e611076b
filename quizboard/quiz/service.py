"""Quiz service: authoring, listing, grading, leaderboard and attempt history."""
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quizboard import db
from quizboard.auth.models import User
from quizboard.errors import ValidationError, NotFound, InternalError
from quizboard.quiz.models import (
    Quiz, Question, QuestionOption, CompletedQuiz, CompletedQuestion, QuizScore
)


def calculate_percentage(score: int, total_questions: int) -> float:
    """Percentage of correct answers, rounded to two decimals; 0.0 for an empty quiz."""
    if not total_questions:
        return 0.0
    return round(score / total_questions * 100, 2)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class QuizService:
    """Service class holding the quiz business logic."""

    # ------------------------------------------------------------------
    # Authoring
    # ------------------------------------------------------------------

    @staticmethod
    def validate_quiz_payload(data) -> dict:
        """
        Validate a quiz create/update body.

        Args:
            data: Parsed JSON body

        Returns:
            Dictionary with cleaned title, description, duration and questions

        Raises:
            ValidationError: when any field is missing or malformed
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object!")

        title = data.get('title')
        questions = data.get('questions')
        duration = data.get('duration')
        if not title or not questions or not duration:
            raise ValidationError("Title, questions, and duration are required!")

        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title must be a non-empty string!")

        description = data.get('description') or ""
        if not isinstance(description, str):
            raise ValidationError("Description must be a string!")

        if isinstance(duration, str) and duration.strip().isdigit():
            duration = int(duration.strip())
        if not _is_int(duration) or duration <= 0:
            raise ValidationError("Duration must be a positive whole number of minutes!")

        if not isinstance(questions, list) or len(questions) == 0:
            raise ValidationError("Questions must be a non-empty array!")

        cleaned = []
        for question in questions:
            if not isinstance(question, dict):
                raise ValidationError("Each question must be an object!")
            text = question.get('question_text')
            options = question.get('options')
            correct_answer = question.get('correct_answer')
            if not text or not options or not correct_answer:
                raise ValidationError("Each question must have a question_text, options, and correct_answer!")
            if not isinstance(text, str) or not text.strip():
                raise ValidationError("question_text must be a non-empty string!")
            if not isinstance(options, list) or len(options) == 0:
                raise ValidationError("Options must be a non-empty array!")
            if any(not isinstance(opt, str) or not opt.strip() for opt in options):
                raise ValidationError("Every option must be a non-empty string!")
            if correct_answer not in options:
                raise ValidationError(f"correct_answer for '{text.strip()}' must be one of its options!")
            cleaned.append({
                'question_text': text.strip(),
                'options': list(options),
                'correct_answer': correct_answer,
            })

        return {
            'title': title.strip(),
            'description': description,
            'duration': duration,
            'questions': cleaned,
        }

    @staticmethod
    def _build_questions(questions: list) -> list:
        built = []
        for idx, q in enumerate(questions):
            built.append(Question(
                question_text=q['question_text'],
                correct_answer=q['correct_answer'],
                order_index=idx,
                options=[
                    QuestionOption(option_text=opt, order_index=opt_idx)
                    for opt_idx, opt in enumerate(q['options'])
                ],
            ))
        return built

    @staticmethod
    def _get_quiz_or_404(quiz_id) -> Quiz:
        quiz = db.session.get(Quiz, quiz_id) if quiz_id is not None else None
        if not quiz:
            raise NotFound("Quiz not found!")
        return quiz

    @staticmethod
    def add_quiz(data, creator_id: int) -> Quiz:
        """Create a quiz owned by creator_id."""
        payload = QuizService.validate_quiz_payload(data)

        quiz = Quiz(
            title=payload['title'],
            description=payload['description'],
            duration=payload['duration'],
            created_by=creator_id,
            questions=QuizService._build_questions(payload['questions']),
        )
        db.session.add(quiz)
        db.session.commit()

        current_app.logger.info(
            f"Quiz created: ID={quiz.id}, Title={quiz.title}, Questions={quiz.get_question_count()}, By={creator_id}"
        )
        return quiz

    @staticmethod
    def update_quiz(quiz_id, data) -> Quiz:
        """Replace a quiz's fields and its whole question set."""
        payload = QuizService.validate_quiz_payload(data)
        quiz = QuizService._get_quiz_or_404(quiz_id)

        quiz.title = payload['title']
        quiz.description = payload['description']
        quiz.duration = payload['duration']
        quiz.questions = QuizService._build_questions(payload['questions'])
        db.session.commit()

        current_app.logger.info(f"Quiz updated: ID={quiz.id}, Questions={quiz.get_question_count()}")
        return quiz

    @staticmethod
    def delete_quiz(quiz_id) -> None:
        """Delete a quiz. Attempts and scores referencing it are kept."""
        quiz = QuizService._get_quiz_or_404(quiz_id)
        # Detach attempts and scores here too; SQLite skips ON DELETE SET NULL
        # unless foreign keys are enabled, and would reuse the id.
        CompletedQuiz.query.filter_by(quiz_id=quiz.id).update({'quiz_id': None})
        QuizScore.query.filter_by(quiz_id=quiz.id).update({'quiz_id': None})
        db.session.delete(quiz)
        db.session.commit()
        current_app.logger.info(f"Quiz deleted: ID={quiz_id}")

    @staticmethod
    def delete_question(quiz_id, question_id) -> Quiz:
        """Remove one question from a quiz; an unknown question id is a no-op."""
        quiz = QuizService._get_quiz_or_404(quiz_id)

        remaining = [q for q in quiz.questions if str(q.id) != str(question_id)]
        if len(remaining) == len(quiz.questions):
            current_app.logger.debug(f"Question {question_id} not in quiz {quiz_id}, nothing removed")
        else:
            quiz.questions = remaining
        db.session.commit()
        return quiz

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    @staticmethod
    def get_latest_quiz() -> Quiz:
        quiz = Quiz.query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).first()
        if not quiz:
            raise NotFound("No quizzes found!")
        return quiz

    @staticmethod
    def get_single_quiz(quiz_id) -> Quiz:
        return QuizService._get_quiz_or_404(quiz_id)

    @staticmethod
    def get_all_quizzes(requester) -> list:
        """
        List quizzes visible to the requester.

        Admins see every quiz. Anyone else sees the latest quiz followed by
        the quiz of each attempt they have completed. Missing quizzes are
        dropped; a completed latest quiz appears twice.
        """
        if requester.is_admin():
            return Quiz.query.order_by(Quiz.created_at, Quiz.id).all()

        latest = Quiz.query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).first()
        attempts = CompletedQuiz.query.filter_by(student_id=requester.id).order_by(
            CompletedQuiz.completed_at.desc(), CompletedQuiz.id.desc()
        ).all()

        return [quiz for quiz in [latest] + [attempt.quiz for attempt in attempts] if quiz is not None]

    # ------------------------------------------------------------------
    # Submission & scoring
    # ------------------------------------------------------------------

    @staticmethod
    def find_attempt(student_id, quiz_id):
        return CompletedQuiz.query.filter_by(student_id=student_id, quiz_id=quiz_id).first()

    @staticmethod
    def match_answers(questions: list, answers: list) -> list:
        """
        Pair every question with the option the student selected.

        Answers carrying a question_id are matched by id; the others are
        matched by their position in the list. Unanswered questions get None.
        """
        by_id = {}
        for answer in answers:
            if not isinstance(answer, dict):
                raise ValidationError("Each answer must be an object with a selected_option!")
            if answer.get('question_id') is not None:
                by_id[str(answer['question_id'])] = answer.get('selected_option')

        selections = []
        for idx, question in enumerate(questions):
            if str(question.id) in by_id:
                selected = by_id[str(question.id)]
            elif idx < len(answers) and answers[idx].get('question_id') is None:
                selected = answers[idx].get('selected_option')
            else:
                selected = None
            if selected is not None and not isinstance(selected, str):
                selected = str(selected)
            selections.append(selected)
        return selections

    @staticmethod
    def submit_quiz(quiz_id, student_id, answers) -> tuple:
        """
        Grade a submission and record the attempt and its leaderboard score.

        Returns:
            Tuple of (CompletedQuiz, already_taken). When the student already
            completed the quiz the stored attempt is returned unchanged.
        """
        previous = QuizService.find_attempt(student_id, quiz_id)
        if previous:
            return previous, True

        quiz = QuizService._get_quiz_or_404(quiz_id)

        if not isinstance(answers, list):
            raise ValidationError("Answers must be an array!")

        questions = list(quiz.questions)
        selections = QuizService.match_answers(questions, answers)
        score = sum(1 for q, selected in zip(questions, selections) if q.check_answer(selected))
        total_questions = len(questions)
        percentage = calculate_percentage(score, total_questions)

        attempt = CompletedQuiz(
            student_id=student_id,
            quiz_id=quiz.id,
            score=score,
            total_questions=total_questions,
            percentage=percentage,
            questions=[
                CompletedQuestion(
                    question_text=q.question_text,
                    options=q.option_texts(),
                    correct_answer=q.correct_answer,
                    selected_option=selected,
                    order_index=idx,
                )
                for idx, (q, selected) in enumerate(zip(questions, selections))
            ],
        )
        score_row = QuizScore(
            quiz_id=quiz.id,
            student_id=student_id,
            score=score,
            total_questions=total_questions,
            percentage=percentage,
        )

        # Attempt and score are committed together
        db.session.add(attempt)
        db.session.add(score_row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            # Lost a race against a concurrent submission for the same pair
            winner = QuizService.find_attempt(student_id, quiz_id)
            if winner:
                return winner, True
            current_app.logger.exception(f"Integrity error saving result: quiz={quiz_id}, student={student_id}")
            raise InternalError("Failed to save score")
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"Error saving result: quiz={quiz_id}, student={student_id}")
            raise InternalError("Failed to save score")

        current_app.logger.info(
            f"Quiz submitted: quiz={quiz_id}, student={student_id}, score={score}/{total_questions} ({percentage}%)"
        )
        return attempt, False

    # ------------------------------------------------------------------
    # Leaderboard
    # ------------------------------------------------------------------

    @staticmethod
    def get_leaderboard(quiz_id) -> list:
        """Scores for a quiz, best first; equal scores share a rank."""
        if not quiz_id:
            raise ValidationError("Quiz ID is required")

        rows = QuizScore.query.filter_by(quiz_id=quiz_id).order_by(
            QuizScore.score.desc(), QuizScore.created_at, QuizScore.id
        ).all()

        leaderboard = []
        rank = 0
        previous_score = None
        for position, row in enumerate(rows, start=1):
            if row.score != previous_score:
                rank = position
                previous_score = row.score
            leaderboard.append({
                'rank': rank,
                'quiz_id': row.quiz_id,
                'student': row.student.to_public_dict() if row.student else None,
                'score': row.score,
                'total_questions': row.total_questions,
                'percentage': row.percentage,
                'submitted_at': row.created_at.isoformat() if row.created_at else None,
            })
        return leaderboard

    # ------------------------------------------------------------------
    # Completed-quiz archive
    # ------------------------------------------------------------------

    @staticmethod
    def save_completed_quiz(data) -> CompletedQuiz:
        """
        Store an attempt as given, without grading it.

        Only the (student, quiz) unique constraint guards against duplicates.
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object!")

        student_id = data.get('student_id')
        quiz_id = data.get('quiz_id')
        score = data.get('score')
        total_questions = data.get('total_questions')

        if not _is_int(student_id) or not _is_int(quiz_id):
            raise ValidationError("student_id and quiz_id are required!")
        if not _is_int(score) or not _is_int(total_questions):
            raise ValidationError("score and total_questions must be whole numbers!")
        if score < 0 or score > total_questions:
            raise ValidationError("score must be between 0 and total_questions!")

        percentage = data.get('percentage')
        if percentage is None:
            percentage = calculate_percentage(score, total_questions)
        elif isinstance(percentage, bool) or not isinstance(percentage, (int, float)):
            raise ValidationError("percentage must be a number!")

        questions = data.get('questions') or []
        if not isinstance(questions, list) or any(not isinstance(q, dict) for q in questions):
            raise ValidationError("questions must be an array of objects!")

        if db.session.get(User, student_id) is None:
            raise NotFound("Student not found!")
        QuizService._get_quiz_or_404(quiz_id)

        attempt = CompletedQuiz(
            student_id=student_id,
            quiz_id=quiz_id,
            score=score,
            total_questions=total_questions,
            percentage=float(percentage),
            questions=[
                CompletedQuestion(
                    question_text=q.get('question_text') or "",
                    options=list(q.get('options') or []),
                    correct_answer=q.get('correct_answer'),
                    selected_option=q.get('selected_option'),
                    order_index=idx,
                )
                for idx, q in enumerate(questions)
            ],
        )
        db.session.add(attempt)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ValidationError("This quiz is already recorded for the student!")

        current_app.logger.info(f"Completed quiz archived: quiz={quiz_id}, student={student_id}")
        return attempt

    @staticmethod
    def get_completed_quizzes(student_id) -> list:
        """A student's attempts, newest first, with the quiz each refers to."""
        attempts = CompletedQuiz.query.filter_by(student_id=student_id).order_by(
            CompletedQuiz.completed_at.desc(), CompletedQuiz.id.desc()
        ).all()

        completed = [
            {'score': attempt.score_summary(), 'quiz': attempt.quiz.to_dict()}
            for attempt in attempts
            if attempt.quiz is not None
        ]
        if not completed:
            raise NotFound("No completed quizzes found")
        return completed
