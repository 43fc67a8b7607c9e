import os

from .base import *

# Production specific settings
DEBUG = False

SECRET_KEY = os.getenv("SECRET_KEY")  # MUST be set in environment
if not SECRET_KEY:
    raise ValueError("No SECRET_KEY set for production environment")

SIMPLE_JWT = {**SIMPLE_JWT, "SIGNING_KEY": SECRET_KEY}

ALLOWED_HOSTS = [host for host in os.getenv("ALLOWED_HOSTS", "").split(",") if host]
if not ALLOWED_HOSTS:
    raise ValueError("No ALLOWED_HOSTS set for production environment")

CORS_ALLOWED_ORIGINS = [origin for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",") if origin]
if not CORS_ALLOWED_ORIGINS:
    raise ValueError("No CORS_ALLOWED_ORIGINS set for production environment")


# Security enhancements
X_FRAME_OPTIONS = "DENY"
SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

LOGGING["root"]["level"] = "INFO"
LOGGING["handlers"]["console"]["formatter"] = "verbose"
