import os

from .base import *

# Development specific settings
DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Browsable API is handy while developing
REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_RENDERER_CLASSES": (
        "rest_framework.renderers.JSONRenderer",
        "rest_framework.renderers.BrowsableAPIRenderer",
    ),
}

SPECTACULAR_SETTINGS = {
    **SPECTACULAR_SETTINGS,
    "SERVE_INCLUDE_SCHEMA": True,
}

LOGGING["loggers"]["apps"]["level"] = os.getenv("LOG_LEVEL", "DEBUG")

# Disable CORS restrictions for easier local development (use with caution)
# CORS_ALLOW_ALL_ORIGINS = True
