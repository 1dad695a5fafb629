SECRET_KEY = "tests-only"
DEBUG = False
USE_TZ = True

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.messages",
    "viewer",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {},
    }
]

MARKDOWN_VIEWER = {
    "CONTENT_BASE_PATH": "/api",
    "STORAGE_ROOT": "/alice",
    # Never reach out to a CDN from the test suite
    "DIAGRAM_ENGINE_PRESENT": True,
}
