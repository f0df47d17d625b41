from datetime import timedelta
from pathlib import Path
from corsheaders.defaults import default_headers
from django.core.management.utils import get_random_secret_key
import os

BASE_DIR = Path(__file__).resolve().parent.parent

DEBUG = os.getenv("DJANGO_DEBUG", "True") == "True"

# --- SECRET_KEY from the environment ---
_env_secret = os.getenv("DJANGO_SECRET_KEY")

if _env_secret:
    SECRET_KEY = _env_secret
else:
    if DEBUG:
        # dev: a fresh random key on every start
        SECRET_KEY = get_random_secret_key()
    else:
        raise ValueError("DJANGO_SECRET_KEY environment variable not set")

ALLOWED_HOSTS = [h.strip() for h in os.getenv("DJANGO_ALLOWED_HOSTS", "").split(",") if h.strip()]
if DEBUG:
    ALLOWED_HOSTS += ["localhost", "127.0.0.1", "testserver"]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "corsheaders",
    "lms.apps.LmsConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "backend_smartlearn.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "backend_smartlearn.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("SMARTLEARN_DB_PATH") or BASE_DIR / "db.sqlite3",
    }
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "lms.authentication.CookieJWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "EXCEPTION_HANDLER": "lms.exceptions.envelope_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=int(os.getenv("SMARTLEARN_JWT_LIFETIME_HOURS", 24 * 7))),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

AUTH_PASSWORD_VALIDATORS = []

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
MEDIA_URL = "uploads/"
MEDIA_ROOT = os.getenv("SMARTLEARN_UPLOADS_DIR") or str(BASE_DIR / "public" / "uploads")
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --- SmartLearn ---
SMARTLEARN_DOCUMENT_MAX_BYTES = 50 * 1024 * 1024
SMARTLEARN_TIMETABLE_UPLOAD_SUBDIR = "timetables"
SMARTLEARN_NOTE_MAX_BYTES = 10 * 1024 * 1024
SMARTLEARN_NOTE_UPLOAD_SUBDIR = "notes"
SMARTLEARN_AUTH_COOKIE = "smartlearn_token"
SMARTLEARN_API_URL = os.getenv("SMARTLEARN_API_URL", "http://localhost:5000/api")

CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_frontend_url = os.getenv("SMARTLEARN_FRONTEND_URL")
if _frontend_url:
    CORS_ALLOWED_ORIGINS.append(_frontend_url.rstrip("/"))

CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_HEADERS = list(default_headers) + [
    "authorization",
]

if DEBUG:
    CORS_ALLOW_ALL_ORIGINS = True

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "lms": {
            "handlers": ["console"],
            "level": os.getenv("SMARTLEARN_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
