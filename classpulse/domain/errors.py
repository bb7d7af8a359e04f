"""Error taxonomy for classroom operations.

Services raise these; the API layer turns them into ``{"error", "message"}``
result values. The relay never raises them to a publisher.
"""


class ClassroomError(Exception):
    """Base class for errors surfaced to API callers."""

    code: str = "error"
    status_code: int = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class Unauthorized(ClassroomError):
    """Missing, malformed or expired token."""

    code = "unauthorized"
    status_code = 401


class SessionNotFound(ClassroomError):
    """Unknown session identifier."""

    code = "not_found"
    status_code = 404

    def __init__(self, session_id: str):
        super().__init__(f"Session with id {session_id} not found")
        self.session_id = session_id


class SessionClosed(ClassroomError):
    """Mutating call against a session that has already ended."""

    code = "session_closed"
    status_code = 409

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is closed")
        self.session_id = session_id


class SnapshotValidationError(ClassroomError):
    """Malformed snapshot or request payload."""

    code = "validation_error"
    status_code = 422


class InternalError(ClassroomError):
    """Datastore or transport failure. The message shown to callers is generic."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
