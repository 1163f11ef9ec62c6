"""Fixed vocabularies shared by validation, aggregation and the seed data."""

MAX_TAGS = 10
MAX_NOTE_LENGTH = 1000
MAX_HOURS = 100
MAX_COMMENT_LENGTH = 500

RECIPIENT_TYPES = ("user", "guild")

TASK_STATUSES = ("open", "in_progress", "completed", "cancelled")
APPLICATION_STATUSES = ("applied", "withdrawn")

# Default tags offered as quick-select options
DEFAULT_TAGS = [
    "process improvement",
    "time bank",
    "self discovery",
]

# (axis_key, axis_label) in display order
EVALUATION_AXES = [
    ("exceeding_expectations", "Exceeding expectations"),
    ("visualization", "Visualization"),
    ("new_perspective", "New perspective"),
    ("active_listening", "Active listening"),
    ("introduction", "Introduction"),
    ("verbalization", "Verbalization"),
    ("new_world", "New world"),
    ("support", "Support"),
    ("collaboration", "Collaboration"),
    ("mentoring", "Mentoring"),
]

EVALUATION_AXIS_KEYS = tuple(key for key, _ in EVALUATION_AXES)
