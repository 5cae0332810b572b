import click
from flask.cli import with_appcontext
from tracker import db
from tracker.models import User


@click.command('create-user')
@click.option('--name', required=True, help='Full name of the instructor')
@click.option('--email', required=True, help='Login email (unique)')
@click.option('--password', required=True, prompt=True, hide_input=True, help='Initial password')
@click.option('--department', default=None, help='Department of the instructor')
@with_appcontext
def create_user(name, email, password, department):
    """
    Creates an instructor account that can log in to the API.
    """
    email = email.strip().lower()
    existing = User.query.filter_by(email=email).first()
    if existing:
        click.echo(f"Error: User with email '{email}' already exists.")
        return

    try:
        user = User(name=name, email=email, department=department)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Successfully created user: {name} <{email}>")
    except Exception as e:
        db.session.rollback()
        click.echo(f"Error creating user: {e}")
        raise
