import os
from pathlib import Path
from dotenv import load_dotenv  # Cargador de secretos

BASE_DIR = Path(__file__).resolve().parent.parent

# --- CARGAR VARIABLES DE ENTORNO ---
# Carga el archivo .env desde la raíz del proyecto
load_dotenv(BASE_DIR / '.env')

# --- SEGURIDAD ---
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-insecure-eet-key')
DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
ALLOWED_HOSTS = [h for h in os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h]

# -------------------------------------------------
# CSRF / CORS – frontend de caja (POS)
# -------------------------------------------------
TRUSTED_URLS = [u for u in os.getenv('TRUSTED_ORIGINS', '').split(',') if u]

CSRF_TRUSTED_ORIGINS = TRUSTED_URLS
CORS_ALLOWED_ORIGINS = TRUSTED_URLS
CORS_ALLOW_CREDENTIALS = True

CSRF_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_SAMESITE = 'Lax'
SESSION_COOKIE_SAMESITE = 'Lax'

# -------------------------------------------------
# Apps Instaladas
# -------------------------------------------------
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'rest_framework',
    'django_filters',
    'corsheaders',

    'eet',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'core.urls'
WSGI_APPLICATION = 'core.wsgi.application'

LANGUAGE_CODE = 'cs'
# dat_trzby / dat_odesl se envían en hora local checa
TIME_ZONE = 'Europe/Prague'
USE_I18N = True
USE_TZ = True

# --- Base de datos ---
# SQLite por defecto; MySQL/PostgreSQL vía DATABASE_ENGINE en .env
DATABASE_ENGINE = os.getenv('DATABASE_ENGINE', 'django.db.backends.sqlite3')

if DATABASE_ENGINE.endswith('sqlite3'):
    DATABASES = {
        'default': {
            'ENGINE': DATABASE_ENGINE,
            'NAME': os.getenv('DATABASE_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DATABASE_ENGINE,
            'NAME': os.getenv('DATABASE_NAME'),
            'USER': os.getenv('DATABASE_USER'),
            'PASSWORD': os.getenv('DATABASE_PASSWORD'),
            'HOST': os.getenv('DATABASE_HOST', 'localhost'),
            'PORT': os.getenv('DATABASE_PORT', ''),
        }
    }

# --- DRF ---
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 50,
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
    ],
}

# --- Templates (admin / DRF browsable API) ---
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# --- Archivos estáticos/medios ---
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage'},
}

# Los certificados .p12 se guardan bajo MEDIA_ROOT/eet/certificados/ (no servir en público)
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'private' / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# -------------------------------------------------
# EET (Evidence tržeb) – servicio EETServiceSOAP/v3
# -------------------------------------------------
EET_PLAYGROUND_URL = os.getenv(
    'EET_PLAYGROUND_URL',
    'https://pg.eet.cz:443/eet/services/EETServiceSOAP/v3',
)
EET_PRODUCTION_URL = os.getenv(
    'EET_PRODUCTION_URL',
    'https://prod.eet.cz:443/eet/services/EETServiceSOAP/v3',
)
# Plazo legal de respuesta: 2 s; pasado ese tiempo se emite el recibo con PKP/BKP
EET_REQUEST_TIMEOUT = float(os.getenv('EET_REQUEST_TIMEOUT', '2'))
EET_SSL_VERIFY = os.getenv('EET_SSL_VERIFY', 'True').lower() == 'true'
EET_RETRY_MAX = int(os.getenv('EET_RETRY_MAX', '1'))
EET_RETRY_BACKOFF = float(os.getenv('EET_RETRY_BACKOFF', '0.2'))
EET_RESEND_MAX_RETRIES = int(os.getenv('EET_RESEND_MAX_RETRIES', '6'))
# Tras este tiempo un envío colgado en ENVIANDO se considera abandonado
EET_ENVIO_BLOQUEO_SEGUNDOS = int(os.getenv('EET_ENVIO_BLOQUEO_SEGUNDOS', '300'))

# --- Celery ---
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = os.getenv('CELERY_TASK_ALWAYS_EAGER', 'False').lower() == 'true'
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE

# --- LOGGING ---
LOG_DIR = BASE_DIR / 'logs'
os.makedirs(LOG_DIR, exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'file': {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOG_DIR / 'django.log',
            'maxBytes': 1024 * 1024 * 5,  # 5MB
            'backupCount': 5,
            'formatter': 'verbose',
        },
        'console': {
            'level': 'DEBUG' if DEBUG else 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['file'],
            'level': 'INFO',
            'propagate': True,
        },
        'eet': {
            'handlers': ['file', 'console'],
            'level': os.getenv('EET_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
