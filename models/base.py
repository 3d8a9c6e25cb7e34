"""
Database Base Module

Creates the SQLAlchemy database instance that all models inherit from.
This is separate to avoid circular imports.
"""

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

# Initialized with the Flask app in app.create_app()
db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)
