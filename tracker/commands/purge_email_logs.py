import click
from flask.cli import with_appcontext
from tracker.models import User
from tracker.services.email_history import EmailHistoryService


@click.command('purge-email-logs')
@click.option('--older-than', 'older_than', required=True, type=click.IntRange(min=0),
              help='Delete records created more than this many days ago')
@click.option('--user-email', default=None, help='Only purge this user\'s records')
@with_appcontext
def purge_email_logs(older_than, user_email):
    """
    Bulk deletes email delivery history older than the given number of days.
    """
    query = User.query
    if user_email:
        query = query.filter_by(email=user_email.strip().lower())
    users = query.all()

    if not users:
        click.echo("No matching users found.")
        return

    total = 0
    for user in users:
        deleted = EmailHistoryService.delete_older_than(user.id, older_than)
        if deleted:
            click.echo(f"{user.email}: deleted {deleted} records")
        total += deleted

    click.echo(f"Deleted {total} email records older than {older_than} days")
