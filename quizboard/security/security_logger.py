"""
Security logging module.

Logs access violations and suspicious quiz activity for auditing.
"""

from flask import request, current_app
from datetime import datetime


class SecurityLogger:
    """
    Security event logger.
    """

    @staticmethod
    def log_unauthorized_access(user_id: int = None):
        """
        Log an unauthenticated request to a protected endpoint.

        Args:
            user_id: User ID if authenticated
        """
        user_info = f"User ID: {user_id}" if user_id else "Unauthenticated"
        current_app.logger.warning(
            f"SECURITY: Unauthorized access - {user_info}, "
            f"Resource: {request.method} {request.path}, IP: {request.remote_addr}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_duplicate_submission(student_id: int, quiz_id: int):
        """
        Log a second submission for a quiz the student already completed.

        Args:
            student_id: Submitting student
            quiz_id: Quiz being resubmitted
        """
        current_app.logger.warning(
            f"SECURITY: Duplicate quiz submission - Student ID: {student_id}, "
            f"Quiz ID: {quiz_id}, IP: {request.remote_addr}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )
