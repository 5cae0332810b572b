"""Shared database handle and column helpers for the models package."""
import uuid

from .. import db


def new_id():
    return str(uuid.uuid4())
