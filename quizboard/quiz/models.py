"""
Database models for quiz functionality.

A quiz is an ordered list of multiple choice questions. Students submit
one attempt per quiz; each attempt stores a frozen copy of the questions
it was graded against, and a matching score row feeds the leaderboard.
"""
from datetime import datetime
from quizboard import db


class Quiz(db.Model):
    """
    Model for quizzes authored by admins.
    """
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    duration = db.Column(db.Integer, nullable=False)  # Minutes
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='SET NULL'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    creator = db.relationship("User", foreign_keys=[created_by])
    questions = db.relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="Question.order_index",
    )

    def __repr__(self) -> str:
        return f"<Quiz {self.id}: {self.title}>"

    def get_question_count(self) -> int:
        """Get total number of questions."""
        return len(self.questions)

    def to_dict(self, include_answers: bool = True):
        """Convert quiz to dictionary, optionally hiding correct answers."""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description or "",
            'duration': self.duration,
            'created_by': self.created_by,
            'question_count': self.get_question_count(),
            'questions': [q.to_dict(include_answer=include_answers) for q in self.questions],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class Question(db.Model):
    """
    Model for quiz questions.

    correct_answer holds the text of the right option.
    """
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=False)
    correct_answer = db.Column(db.Text, nullable=False)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    # Relationships
    quiz = db.relationship("Quiz", back_populates="questions")
    options = db.relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.order_index",
    )

    __table_args__ = (
        db.Index('ix_quiz_questions_quiz_order', 'quiz_id', 'order_index'),
    )

    def __repr__(self) -> str:
        return f"<Question {self.id}: {self.question_text[:50]}>"

    def option_texts(self) -> list:
        return [opt.option_text for opt in self.options]

    def check_answer(self, selected_option) -> bool:
        """Exact match against the stored correct answer."""
        return selected_option is not None and selected_option == self.correct_answer

    def to_dict(self, include_answer: bool = True):
        data = {
            'id': self.id,
            'question_text': self.question_text,
            'options': self.option_texts(),
        }
        if include_answer:
            data['correct_answer'] = self.correct_answer
        return data


class QuestionOption(db.Model):
    """
    Model for the answer choices of a question, kept in authoring order.
    """
    __tablename__ = "quiz_question_options"

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete='CASCADE'), nullable=False, index=True)
    option_text = db.Column(db.Text, nullable=False)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    question = db.relationship("Question", back_populates="options")

    __table_args__ = (
        db.Index('ix_question_options_question_order', 'question_id', 'order_index'),
    )

    def __repr__(self) -> str:
        return f"<QuestionOption {self.id}: {self.option_text[:50]}>"


class CompletedQuiz(db.Model):
    """
    Model for a student's graded attempt.

    quiz_id is a weak reference: deleting the quiz leaves the attempt in place.
    """
    __tablename__ = "completed_quizzes"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='SET NULL'), nullable=True, index=True)
    score = db.Column(db.Integer, nullable=False, default=0)
    total_questions = db.Column(db.Integer, nullable=False, default=0)
    percentage = db.Column(db.Float, nullable=False, default=0.0)
    completed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    student = db.relationship("User", foreign_keys=[student_id])
    quiz = db.relationship("Quiz", foreign_keys=[quiz_id])
    questions = db.relationship(
        "CompletedQuestion",
        back_populates="completed_quiz",
        cascade="all, delete-orphan",
        order_by="CompletedQuestion.order_index",
    )

    __table_args__ = (
        db.UniqueConstraint('student_id', 'quiz_id', name='uq_completed_quiz_student_quiz'),
        db.Index('ix_completed_quizzes_student_completed', 'student_id', 'completed_at'),
    )

    def __repr__(self) -> str:
        return f"<CompletedQuiz {self.id}: Student {self.student_id}, Quiz {self.quiz_id}>"

    def score_summary(self):
        return {
            'score': self.score,
            'total_questions': self.total_questions,
            'percentage': self.percentage,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

    def to_dict(self):
        """Convert attempt to dictionary including the graded snapshot."""
        return {
            'id': self.id,
            'student_id': self.student_id,
            'quiz_id': self.quiz_id,
            'score': self.score,
            'total_questions': self.total_questions,
            'percentage': self.percentage,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'questions': [q.to_dict() for q in self.questions],
        }


class CompletedQuestion(db.Model):
    """
    Frozen copy of a question as it was graded, with the student's choice.
    """
    __tablename__ = "completed_quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    completed_quiz_id = db.Column(db.Integer, db.ForeignKey("completed_quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=False)
    options = db.Column(db.JSON, nullable=False, default=list)
    correct_answer = db.Column(db.Text, nullable=True)
    selected_option = db.Column(db.Text, nullable=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    completed_quiz = db.relationship("CompletedQuiz", back_populates="questions")

    def __repr__(self) -> str:
        return f"<CompletedQuestion {self.id} of attempt {self.completed_quiz_id}>"

    @property
    def is_correct(self) -> bool:
        return self.selected_option is not None and self.selected_option == self.correct_answer

    def to_dict(self):
        return {
            'question_text': self.question_text,
            'options': list(self.options or []),
            'correct_answer': self.correct_answer,
            'selected_option': self.selected_option,
            'is_correct': self.is_correct,
        }


class QuizScore(db.Model):
    """
    Per-quiz score row used to rank students on the leaderboard.
    """
    __tablename__ = "quiz_scores"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='SET NULL'), nullable=True, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False, default=0)
    total_questions = db.Column(db.Integer, nullable=False, default=0)
    percentage = db.Column(db.Float, nullable=False, default=0.0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    student = db.relationship("User", foreign_keys=[student_id])

    __table_args__ = (
        db.UniqueConstraint('quiz_id', 'student_id', name='uq_quiz_scores_quiz_student'),
        db.Index('ix_quiz_scores_quiz_score', 'quiz_id', 'score'),
    )

    def __repr__(self) -> str:
        return f"<QuizScore {self.id}: Quiz {self.quiz_id}, Student {self.student_id}, {self.score}>"
