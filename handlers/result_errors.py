import sqlite3


class ResultsError(Exception):
    pass


class ValidationError(ResultsError):
    pass


class RepositoryError(ResultsError):
    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class RepositoryConnectionError(RepositoryError):
    pass


class QueryError(RepositoryError):
    pass


NAME_TOO_SHORT_MSG = "يجب كتابة الاسم الأول والثاني على الأقل أو اسم واحد بـ 3 أحرف على الأقل"
CONNECTION_MSG = "مشكلة في الاتصال بالخادم. تحقق من اتصال الإنترنت أو حاول مرة أخرى."
TIMEOUT_MSG = "انتهت مهلة الاتصال. حاول مرة أخرى."
GENERIC_MSG = "حدث خطأ غير متوقع. حاول مرة أخرى."


def describe_error(error: Exception) -> str:
    """
    Map an error to the message shown to the student.
    Only validation and query messages are passed through; anything coming
    from the storage layer itself falls back to a generic text.
    """
    if isinstance(error, ValidationError):
        return NAME_TOO_SHORT_MSG

    if isinstance(error, RepositoryConnectionError):
        return CONNECTION_MSG

    text = str(error.cause if isinstance(error, RepositoryError) and error.cause else error).lower()

    if "timeout" in text or "timed out" in text or "locked" in text:
        return TIMEOUT_MSG

    if "unable to open" in text or "connect" in text:
        return CONNECTION_MSG

    if isinstance(error, QueryError) and not isinstance(error.cause, sqlite3.DatabaseError):
        return str(error) or GENERIC_MSG

    return GENERIC_MSG
