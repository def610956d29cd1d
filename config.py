import os
from datetime import timedelta


def _database_url(default):
    url = os.environ.get('DATABASE_URL') or default
    # SQLAlchemy no longer accepts the legacy postgres:// scheme
    if url and url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'taskflow-dev-key'
    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///taskflow.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Number of activities returned when the caller does not ask for a limit
    ACTIVITY_PAGE_SIZE = 50


class ProductionConfig(Config):
    # Serverless hosts only allow writes under /tmp; set DATABASE_URL to a
    # managed PostgreSQL instance for anything beyond a demo
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'taskflow-production-key'
    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:////tmp/taskflow.db')
    SESSION_COOKIE_SECURE = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'taskflow-testing-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'DEBUG'
