"""
Django settings for the Geography Backend.
Architecture: Domain-Driven Design (DDD)
UI Theme: Django Unfold (Tailwind CSS)

This settings file is configured for:
1. Reference geography of Tajikistan (provinces, cities, districts and below) with tj/ru/eng titles.
2. Validated address aggregates attachable to users and listings.
3. Performance: Redis caching of node lists and resolved titles (local memory when no Redis is configured).
4. Observability: JSON logs with correlation ids, Sentry error reporting.
"""

import environ
import sentry_sdk
from pathlib import Path
from datetime import timedelta
from django.utils.translation import gettext_lazy as _

# --- THIRD PARTY INTEGRATIONS ---
from sentry_sdk.integrations.django import DjangoIntegration
from sentry_sdk.integrations.redis import RedisIntegration
from django_guid.integrations import SentryIntegration

# --- ENVIRONMENT CONFIGURATION ---
env = environ.Env()
# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent
environ.Env.read_env(BASE_DIR / '.env')

# --- CORE SECURITY SETTINGS ---
SECRET_KEY = env('DJANGO_SECRET_KEY', default='django-insecure-geography-dev-key')
# CRITICAL: False in production to prevent leaking internals
DEBUG = env.bool('DJANGO_DEBUG', default=True)
ALLOWED_HOSTS = env.list('DJANGO_ALLOWED_HOSTS', default=['localhost', '127.0.0.1', 'testserver'])

# --- APPLICATION DEFINITION ---
ROOT_URLCONF = 'backend.urls'
WSGI_APPLICATION = 'backend.wsgi.application'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# --- INSTALLED APPS CONFIGURATION ---
DJANGO_APPS = [
    # Unfold Admin Theme (Must be before admin)
    "unfold",
    "unfold.contrib.filters",
    "unfold.contrib.forms",
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    # --- API & Networking ---
    'rest_framework',                # Django Rest Framework (DRF)
    'rest_framework_simplejwt',      # JWT Authentication
    'corsheaders',                   # CORS Handling
    'drf_spectacular',               # OpenAPI Schema (Swagger)

    # --- Observability ---
    'django_guid',                   # Request Correlation ID (Tracing)
]

LOCAL_APPS = [
    'apps.common.core',              # Core Utilities & Base Models
    'apps.common.locations',         # Geography & Addresses
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

# --- MIDDLEWARE CONFIGURATION ---
MIDDLEWARE = [
    'django_guid.middleware.guid_middleware',               # 1. Correlation ID
    'corsheaders.middleware.CorsMiddleware',                # 2. CORS
    'django.middleware.security.SecurityMiddleware',        # 3. Security
    'django.contrib.sessions.middleware.SessionMiddleware', # 4. Session
    'django.middleware.common.CommonMiddleware',            # 5. Common
    'django.middleware.csrf.CsrfViewMiddleware',            # 6. CSRF
    'django.contrib.auth.middleware.AuthenticationMiddleware', # 7. Auth
    'django.contrib.messages.middleware.MessageMiddleware', # 8. Messages
    'django.middleware.clickjacking.XFrameOptionsMiddleware', # 9. Clickjacking
]

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

# --- DATABASE CONFIGURATION ---
DATABASES = {
    'default': env.db('DATABASE_URL', default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
}
DATABASES['default']['CONN_MAX_AGE'] = env.int('DB_CONN_MAX_AGE', default=600)
DATABASES['default']['ATOMIC_REQUESTS'] = True

# --- CACHE (REDIS, LOCAL MEMORY FALLBACK) ---
CACHES = {
    'default': env.cache('REDIS_CACHE_URL', default='locmemcache://geography'),
}

# --- GEOGRAPHY ---
# Locale used when a translation is missing in the requested one (tj, ru, eng)
GEOGRAPHY_DEFAULT_LOCALE = env('GEOGRAPHY_DEFAULT_LOCALE', default='tj')
GEOGRAPHY_CACHE_TIMEOUT = env.int('GEOGRAPHY_CACHE_TIMEOUT', default=60 * 60 * 24)

# --- TEMPLATES ---
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# --- INTERNATIONALIZATION ---
LANGUAGE_CODE = 'ru'
TIME_ZONE = 'Asia/Dushanbe'
USE_I18N = True
USE_TZ = True

# Supported languages for admin interface
LANGUAGES = [
    ('tg', _('Тоҷикӣ')),
    ('ru', _('Русский')),
    ('en', _('English')),
]

# --- STATIC FILES ---
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# --- API CONFIGURATION (DRF) ---
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': ('rest_framework.permissions.IsAuthenticatedOrReadOnly',),
    'EXCEPTION_HANDLER': 'apps.common.core.api.handlers.custom_exception_handler',

    # Throttling
    'DEFAULT_THROTTLE_CLASSES': [
        'rest_framework.throttling.AnonRateThrottle',
        'rest_framework.throttling.UserRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'anon': env('THROTTLE_RATE_ANON', default='1000/hour'),
        'user': env('THROTTLE_RATE_USER', default='5000/hour'),
    },
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
}

# --- SWAGGER API DOCS ---
SPECTACULAR_SETTINGS = {
    'TITLE': 'Geography API',
    'DESCRIPTION': 'Administrative geography of Tajikistan and validated addresses',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,
    'SWAGGER_UI_SETTINGS': {
        'deepLinking': True,
        'persistAuthorization': True,
        'displayOperationId': True,
    },
}

# --- JWT CONFIGURATION ---
SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=env.int('JWT_ACCESS_MINUTES', default=30)),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=env.int('JWT_REFRESH_DAYS', default=7)),
    'AUTH_HEADER_TYPES': ('Bearer',),
    'USER_ID_FIELD': 'id',
}

# --- NETWORK SECURITY (CORS & CSRF) ---
CSRF_TRUSTED_ORIGINS = env.list('CSRF_TRUSTED_ORIGINS', default=[])
CORS_ALLOWED_ORIGINS = env.list('CORS_ALLOWED_ORIGINS', default=[])
CORS_ALLOW_CREDENTIALS = True

if CORS_ALLOW_CREDENTIALS:
    for origin in CORS_ALLOWED_ORIGINS:
        if origin == '*' or origin.startswith('*'):
            raise ValueError("SECURITY ERROR: CORS_ALLOWED_ORIGINS cannot contain '*' with credentials enabled.")

# --- BROWSER SECURITY HEADERS ---
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'SAMEORIGIN'

if not DEBUG:
    SECURE_SSL_REDIRECT = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_HSTS_SECONDS = 31536000
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# --- OBSERVABILITY & LOGGING (SENTRY + GUID) ---
DJANGO_GUID = {
    'GUID_HEADER_NAME': 'Correlation-ID',
    'VALIDATE_GUID': True,
    'RETURN_HEADER': True,
    'EXPOSE_HEADER': True,
    'INTEGRATIONS': [SentryIntegration()],
    'IGNORE_URLS': ['/favicon.ico'],
    'UUID_FORMAT': 'hex',
}

SENTRY_DSN = env('SENTRY_DSN', default=None)
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[
            DjangoIntegration(),
            RedisIntegration(),
        ],
        traces_sample_rate=env.float('SENTRY_TRACES_SAMPLE_RATE', default=0.1),
        send_default_pii=False,
    )

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'correlation_id': {'()': 'django_guid.log_filters.CorrelationId'},
    },
    'formatters': {
        'json': {
            '()': 'pythonjsonlogger.jsonlogger.JsonFormatter',
            'format': '%(levelname)s %(asctime)s %(correlation_id)s %(name)s %(message)s %(pathname)s %(lineno)d',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'json',
            'filters': ['correlation_id'],
        },
    },
    'loggers': {
        'django': {'handlers': ['console'], 'level': env('DJANGO_LOG_LEVEL', default='INFO'), 'propagate': True},
        'apps': {'handlers': ['console'], 'level': 'INFO', 'propagate': True},
        'django_guid': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
    },
}

# --- DJANGO UNFOLD CONFIGURATION ---
UNFOLD = {
    "SITE_TITLE": "Geography Admin",
    "SITE_HEADER": "Geography",
    "SITE_URL": "/",
    "SIDEBAR": {
        "show_search": True,
        "show_all_applications": False,
        "navigation": [
            {
                "title": _("Geography"),
                "icon": "public",
                "collapsible": True,
                "items": [
                    {"title": _("Locations"), "icon": "location_on", "link": "/admin/locations/locationnode/"},
                ],
            },
            {
                "title": _("Addresses"),
                "icon": "home_pin",
                "collapsible": True,
                "items": [
                    {"title": _("Addresses"), "icon": "home", "link": "/admin/locations/address/"},
                ],
            },
            {
                "title": _("Users"),
                "icon": "group",
                "collapsible": True,
                "items": [
                    {"title": _("Users"), "icon": "person", "link": "/admin/auth/user/"},
                ],
            },
        ],
    },
}
