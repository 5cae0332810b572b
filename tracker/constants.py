class AssignmentStatus:
    """
    Lifecycle of an assignment. Advanced automatically by progress entries.
    """
    NOT_STARTED = 'Not Started'
    IN_PROGRESS = 'In Progress'
    COMPLETED = 'Completed'
    ON_HOLD = 'On Hold'
    CANCELLED = 'Cancelled'

    ALL = (NOT_STARTED, IN_PROGRESS, COMPLETED, ON_HOLD, CANCELLED)


class ProgressStatus:
    IN_PROGRESS = 'In Progress'
    COMPLETED = 'Completed'
    BLOCKED = 'Blocked'
    ON_HOLD = 'On Hold'

    ALL = (IN_PROGRESS, COMPLETED, BLOCKED, ON_HOLD)


class ProgressType:
    INDIVIDUAL = 'Individual'
    GROUP = 'Group'

    ALL = (INDIVIDUAL, GROUP)


class LinkType:
    RELATED = 'Related'
    DEPENDENT = 'Dependent'
    SHARED = 'Shared'

    ALL = (RELATED, DEPENDENT, SHARED)


class DifficultyLevel:
    BEGINNER = 'Beginner'
    INTERMEDIATE = 'Intermediate'
    ADVANCED = 'Advanced'

    ALL = (BEGINNER, INTERMEDIATE, ADVANCED)


class EmailStatus:
    """
    Delivery state of an EmailLog row.
    Pending -> Sent | Failed, Failed -> Sent (retry). Sent is terminal.
    """
    PENDING = 'Pending'
    SENT = 'Sent'
    FAILED = 'Failed'

    ALL = (SENT, FAILED, PENDING)


class ConfigTestStatus:
    SUCCESS = 'Success'
    FAILED = 'Failed'
    NOT_TESTED = 'Not Tested'


# Badge colours used in the progress report email
STATUS_COLORS = {
    ProgressStatus.COMPLETED: '#059669',
    ProgressStatus.IN_PROGRESS: '#2563eb',
    ProgressStatus.BLOCKED: '#dc2626',
    ProgressStatus.ON_HOLD: '#d97706',
}
DEFAULT_STATUS_COLOR = '#6b7280'

REPORT_SUBJECT_PREFIX = 'Progress Report - '
LATEST_ENTRY_COUNT = 3

ADMIN_TEST_SUBJECT = 'Test Email - Admin Connectivity Check'
CONFIG_TEST_SUBJECT = 'Test Email Configuration'
SYSTEM_NAME = 'Instructor Training Management System'
