from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData
from flask_migrate import Migrate

import os


# 1. Create extension instances WITHOUT an app
# They will be "connected" to the app inside the factory

# Define naming convention for SQLAlchemy
convention = {
    "ix": 'ix_%(column_0_label)s',
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}
metadata = MetaData(naming_convention=convention)

db = SQLAlchemy(metadata=metadata)
migrate = Migrate()
from flask_mail import Mail
mail = Mail()


from flask_login import LoginManager
login_manager = LoginManager()


def create_app(config_class='config.Config'):
    """
    Application Factory Function
    """

    app = Flask(__name__, instance_relative_config=True)

    # Load configuration from the config.py file
    app.config.from_object(config_class)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    mail.init_app(app)

    upload_folder = app.config.get('UPLOAD_FOLDER')
    if upload_folder and not os.path.exists(upload_folder):
        os.makedirs(upload_folder, exist_ok=True)

    # JSON error bodies for the whole API
    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register Blueprints
    # Imports are *inside* the factory to avoid circular import issues
    with app.app_context():
        from .auth.routes import auth_bp
        from .reports_routes import reports_bp
        from .email_config_routes import email_config_bp
        from .admins_routes import admins_bp

        # Import models so SQLAlchemy knows about them
        from . import models

        app.register_blueprint(auth_bp)
        app.register_blueprint(reports_bp)
        app.register_blueprint(email_config_bp)
        app.register_blueprint(admins_bp)

    # Register CLI commands
    from tracker.commands.create_user import create_user
    from tracker.commands.purge_email_logs import purge_email_logs

    app.cli.add_command(create_user)
    app.cli.add_command(purge_email_logs)

    return app
