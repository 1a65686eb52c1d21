"""Deployment-mode feature flags and sign-in provider discovery."""
import os


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def is_saas_mode() -> bool:
    return _flag("SAAS_MODE")


def available_providers() -> dict:
    """Sign-in methods the login page should offer. Google needs SaaS mode plus OAuth credentials."""
    return {
        "credentials": True,
        "google": is_saas_mode()
        and bool(os.environ.get("GOOGLE_CLIENT_ID"))
        and bool(os.environ.get("GOOGLE_CLIENT_SECRET")),
    }
