"""
Models package for the instructor tracker.

Every model is re-exported here so callers can import from ``tracker.models``.
"""
from .base import db

from .user import User
from .trainee import Trainee
from .project import Project
from .assignment import Assignment
from .progress import ProgressEntry, ProgressLink
from .file import File
from .admin import Admin
from .email_configuration import EmailConfiguration
from .email_log import EmailLog

# Bearer token loading lives with the auth package
from ..auth import tokens  # noqa: F401

__all__ = [
    'db',
    'User',
    'Trainee',
    'Project',
    'Assignment',
    'ProgressEntry',
    'ProgressLink',
    'File',
    'Admin',
    'EmailConfiguration',
    'EmailLog',
]
