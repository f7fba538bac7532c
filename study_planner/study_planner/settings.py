"""
Django settings for the study planner project.

Environment:
    DJANGO_SECRET_KEY   secret key (a development key is used when unset)
    DJANGO_DEBUG        "1"/"true" to enable debug mode
    PLANNER_TIME_ZONE   local time zone used for "today" and the hour grid
    PLANNER_DB_PATH     SQLite database file
    PLANNER_LOG_LEVEL   level of the apps.planner logger (default INFO)
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-study-planner-dev-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')


INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'apps.planner',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
]

ROOT_URLCONF = 'study_planner.urls'

WSGI_APPLICATION = 'study_planner.wsgi.application'


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('PLANNER_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}


LANGUAGE_CODE = 'en-us'

TIME_ZONE = os.environ.get('PLANNER_TIME_ZONE', 'UTC')

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# .ics uploads are read in memory
FILE_UPLOAD_MAX_MEMORY_SIZE = 5 * 1024 * 1024


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'apps.planner': {
            'handlers': ['console'],
            'level': os.environ.get('PLANNER_LOG_LEVEL', 'INFO').upper(),
            'propagate': False,
        },
    },
}
