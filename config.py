import os
from dotenv import load_dotenv

# Load environment variables from .env file
BASE_DIR = os.path.abspath(os.path.dirname(__file__))
dotenv_path = os.path.join(BASE_DIR, '.env')

# Load the .env file from that specific path
load_dotenv(dotenv_path=dotenv_path)


def _env_flag(name, default='false'):
    return os.getenv(name, default).lower() in ['true', 'on', '1']


class Config:
    """Base configuration class."""

    # Get secret key and database URL from environment variables
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-fallback-secret-key-change-in-prod'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or \
        'sqlite:///' + os.path.join(BASE_DIR, 'tracker.db')

    # Flask-SQLAlchemy settings
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_recycle': 280}
    SQLALCHEMY_TRACK_MODIFICATIONS = False  # Good practice

    # Bearer tokens issued at login
    TOKEN_EXPIRES_SECONDS = int(os.getenv('TOKEN_EXPIRES_SECONDS', 7 * 24 * 3600))

    # Progress entry attachments are stored below this folder
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # Per-account SMTP delivery
    SMTP_TIMEOUT = int(os.getenv('SMTP_TIMEOUT', 10))
    # Accept self-signed certificates and legacy TLS versions/ciphers.
    # Weakens transport security; only enable for old institutional servers.
    SMTP_ALLOW_INSECURE_TLS = _env_flag('SMTP_ALLOW_INSECURE_TLS')

    EMAIL_HISTORY_PAGE_SIZE = 10
    EMAIL_ACTIVITY_DAYS = 30

    # Flask-Mail is only used to compose messages; delivery goes through the
    # account's own SMTP configuration.
    MAIL_DEFAULT_SENDER = os.getenv('MAIL_DEFAULT_SENDER', 'noreply@example.com')
    MAIL_SUPPRESS_SEND = True
