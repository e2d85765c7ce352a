import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()

class Config:
    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///lms.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Debug Configuration
    DEBUG = os.getenv('FLASK_ENV') == 'development'

    # Remote catalog API. Empty URL serves the bundled default catalog.
    REMOTE_API_URL = os.getenv('REMOTE_API_URL', '')
    REMOTE_API_TOKEN = os.getenv('REMOTE_API_TOKEN')
    REMOTE_API_TIMEOUT = int(os.getenv('REMOTE_API_TIMEOUT', '10'))

    VERIFY_SSL = os.getenv('VERIFY_SSL', 'True').lower() == 'true'

    # Logging Configuration
    LOGGING = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'standard'
            }
        },
        'root': {
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'handlers': ['console']
        }
    }

    # Session Configuration
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    REMOTE_API_URL = ''
