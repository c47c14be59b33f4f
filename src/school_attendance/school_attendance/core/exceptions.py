class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when a request violates attendance rules. Never retried."""

    code = "validation_error"


class StudentNotFound(ValidationError):
    code = "student_not_found"

    def __init__(self, student_id: str):
        super().__init__(f"Student {student_id} not found or not assigned to you")
        self.student_id = student_id


class AlreadyMarked(ValidationError):
    code = "already_marked"


class EntryRequired(ValidationError):
    code = "entry_required"

    def __init__(self, student_id: str):
        super().__init__(f"Entry must be marked before exit for student {student_id}")
        self.student_id = student_id


class InvalidTransition(ValidationError):
    code = "invalid_transition"


class NoOpChange(ValidationError):
    code = "no_op_change"


class NoRecordToday(ValidationError):
    code = "no_record_today"

    def __init__(self, student_id: str):
        super().__init__(f"No attendance record found today for student {student_id}")
        self.student_id = student_id


class NetworkError(DomainError):
    """Remote store unreachable or timed out. Local state stays unacknowledged."""

    code = "network_error"


class SyncConflict(DomainError):
    """The stored record changed between read and write. Safe to reload and retry."""

    code = "sync_conflict"
