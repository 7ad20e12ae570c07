from pathlib import Path
import os

# === Paths ===
# base.py está en: <root>/shootcore/shootcore/settings/base.py
BASE_DIR = Path(__file__).resolve().parents[3]  # <root>

# === Seguridad / Debug ===
SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-secret-key-change-me")
DEBUG = os.environ.get("DEBUG", "1") == "1"
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",")

# === Apps ===
INSTALLED_APPS = [
    # Django core
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Apps del proyecto
    "shootcore.apps.core",
    "shootcore.apps.accounts",
    "shootcore.apps.orgs",
    "shootcore.apps.events",
    "shootcore.apps.registration",
    "shootcore.apps.scoring",
    "shootcore.apps.leaderboard",
    "shootcore.apps.classification",
]

# === Middleware ===
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# === URLs raíz del proyecto ===
ROOT_URLCONF = "shootcore.shootcore.urls"

# === Templates (solo admin; la API responde JSON) ===
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

# === WSGI ===
WSGI_APPLICATION = "shootcore.shootcore.wsgi.application"

# === Base de datos (SQLite por defecto) ===
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# === Password validators ===
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# === i18n / tz ===
LANGUAGE_CODE = "es"
TIME_ZONE = "America/New_York"
USE_I18N = True
USE_TZ = True

# === Static ===
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# === Logging ===
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "shootcore": {
            "handlers": ["console"],
            "level": os.environ.get("SHOOTCORE_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}

# === Motor de squads / scores ===
SHOOTCORE = {
    # Capacidad por defecto de un squad si no se indica al crearlo
    "DEFAULT_SQUAD_CAPACITY": int(os.environ.get("SHOOTCORE_SQUAD_CAPACITY", "5")),
    # Reintentos ante fallas de serialización de la BD
    "TX_RETRIES": int(os.environ.get("SHOOTCORE_TX_RETRIES", "3")),
    # Escala de clases, de mejor a peor
    "CLASS_LABELS": ["A", "B", "C", "D", "E"],
    # Política de clasificación por organismo (ruta importable + kwargs).
    # Los umbrales son provisorios hasta que el producto defina la regla oficial.
    "CLASSIFICATION_POLICIES": {
        "NSCA": {
            "POLICY": "shootcore.apps.classification.policies.FixedThresholdPolicy",
            "OPTIONS": {"thresholds": [0.85, 0.75, 0.65, 0.50], "min_targets": 100},
        },
        "ATA": {
            "POLICY": "shootcore.apps.classification.policies.FixedThresholdPolicy",
            "OPTIONS": {"thresholds": [0.95, 0.92, 0.89, 0.86], "min_targets": 100},
        },
        "NSSA": {
            "POLICY": "shootcore.apps.classification.policies.PercentileBucketPolicy",
            "OPTIONS": {"min_targets": 100},
        },
    },
}
