"""
Pytest configuration and fixtures.
"""
import sys
import os
import shutil
import tempfile
from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__) + '/..'))

from tracker.errors import TransportError


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    from tracker import create_app
    from config import Config

    upload_dir = tempfile.mkdtemp()

    # Temporary SQLite file for a clean state per session
    class TestConfig(Config):
        TESTING = True
        db_fd, db_path = tempfile.mkstemp()
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'
        SQLALCHEMY_ENGINE_OPTIONS = {}
        SERVER_NAME = 'localhost.localdomain'
        SECRET_KEY = 'test-secret'
        UPLOAD_FOLDER = upload_dir
        SMTP_ALLOW_INSECURE_TLS = False

    app = create_app(TestConfig)

    # Initialize database
    with app.app_context():
        from tracker import db
        db.session.configure(expire_on_commit=False)
        db.create_all()

    yield app

    shutil.rmtree(upload_dir, ignore_errors=True)


@pytest.fixture(scope='function', autouse=True)
def clean_db(app):
    """Clean database between tests."""
    with app.app_context():
        from tracker import db
        # Drop all tables and recreate them to ensure a clean slate
        db.drop_all()
        db.create_all()
    yield


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def owner(app):
    """The instructor account that owns the test data."""
    from tracker.models import db, User
    with app.app_context():
        user = User(name='Instructor One', email='instructor@example.com')
        user.set_password('password')
        db.session.add(user)
        db.session.commit()
        db.session.refresh(user)
        return user


@pytest.fixture(scope='function')
def auth_headers(app, owner):
    with app.app_context():
        token = owner.get_auth_token()
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def email_config(app, owner):
    from tracker.models import db, EmailConfiguration
    with app.app_context():
        config = EmailConfiguration(
            user_id=owner.id,
            email_address='instructor@example.com',
            smtp_host='smtp.example.com',
            smtp_port=587,
            smtp_secure=False,
            smtp_username='instructor@example.com',
            smtp_password='app-password',
            is_configured=True,
        )
        db.session.add(config)
        db.session.commit()
        db.session.refresh(config)
        return config


@pytest.fixture(scope='function')
def report_data(app, owner):
    """
    Trainee Aastha on project Aahaar CMS with two progress entries
    (60% In Progress, then 100% Completed) and two admins.
    """
    from tracker.models import db, Trainee, Project, Assignment, ProgressEntry, Admin
    with app.app_context():
        trainee = Trainee(user_id=owner.id, name='Aastha', email='aastha@example.com',
                          batch_number='B-12')
        project = Project(user_id=owner.id, name='Aahaar CMS', difficulty_level='Intermediate',
                          description='Content management for the canteen')
        db.session.add_all([trainee, project])
        db.session.flush()

        assignment = Assignment(
            assignment_code='ASG-0001', user_id=owner.id, project_id=project.id,
            trainee_id=trainee.id, start_date=date(2026, 9, 1), status='In Progress'
        )
        db.session.add(assignment)
        db.session.flush()

        first = ProgressEntry(
            assignment_id=assignment.id, title='Schema and models',
            description='Designed the menu schema', start_date=date(2026, 9, 1),
            end_date=date(2026, 9, 7), current_status='In Progress',
            completion_percentage=60, hours_worked=12,
            created_at=datetime(2026, 9, 7, 10, 0)
        )
        second = ProgressEntry(
            assignment_id=assignment.id, title='Admin dashboard',
            description='Finished the dashboard', start_date=date(2026, 9, 8),
            end_date=date(2026, 9, 14), current_status='Completed',
            completion_percentage=100, hours_worked=20,
            created_at=datetime(2026, 9, 14, 10, 0)
        )
        admin_a = Admin(user_id=owner.id, name='Ravi Kumar', email='ravi@example.com', is_default=True)
        admin_b = Admin(user_id=owner.id, name='Meena Shah', email='meena@example.com')
        db.session.add_all([first, second, admin_a, admin_b])
        db.session.commit()

        return {
            'trainee_id': trainee.id,
            'project_id': project.id,
            'assignment_id': assignment.id,
            'entry_ids': [second.id, first.id],
            'admin_ids': [admin_a.id, admin_b.id],
            'admin_emails': [admin_a.email, admin_b.email],
        }


class FakeSMTP:
    """
    Stand-in for SMTPTransport. Records delivered messages and fails for
    recipients listed in ``failures`` (email -> error text). Recipients in
    ``crashes`` (email -> exception instance) raise that exception unwrapped.
    """

    def __init__(self):
        self.sent = []
        self.failures = {}
        self.crashes = {}
        self.verify_error = None
        self.options = []
        self._counter = 0

    def transport(self, options):
        self.options.append(options)
        return _FakeTransport(self)


class _FakeTransport:
    def __init__(self, outbox):
        self.outbox = outbox

    def verify(self):
        if self.outbox.verify_error:
            raise TransportError(self.outbox.verify_error)
        return True

    def send(self, message):
        for recipient in message.send_to:
            if recipient in self.outbox.crashes:
                raise self.outbox.crashes[recipient]
            if recipient in self.outbox.failures:
                raise TransportError(self.outbox.failures[recipient])
        self.outbox.sent.append(message)
        self.outbox._counter += 1
        return f'<fake-{self.outbox._counter}@example.com>'


@pytest.fixture(scope='function')
def fake_smtp():
    outbox = FakeSMTP()
    with patch('tracker.services.email_service.SMTPTransport', outbox.transport):
        yield outbox
