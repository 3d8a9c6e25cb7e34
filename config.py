"""
Application Configuration

Centralizes all Flask and application configuration settings.
"""

import os

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///mealplan.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Owner of every row this instance reads and writes.
    # Authentication happens in front of the app; this only scopes the data.
    OWNER_ID = os.environ.get('OWNER_ID', 'household')

    # Calendar export
    PLANNER_TIMEZONE = os.environ.get('PLANNER_TIMEZONE', 'Europe/Stockholm')
    DINNER_START = os.environ.get('DINNER_START', '17:30')  # local wall-clock HH:MM
    DINNER_MINUTES = int(os.environ.get('DINNER_MINUTES', '60'))
    ICS_PRODID = os.environ.get('ICS_PRODID', '-//Mealplan//EN')

    # Seconds to ignore change notifications after one of our own writes
    WRITE_GUARD_COOLDOWN = float(os.environ.get('WRITE_GUARD_COOLDOWN', '0.35'))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    OWNER_ID = 'test-owner'
    WRITE_GUARD_COOLDOWN = 0.0


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
