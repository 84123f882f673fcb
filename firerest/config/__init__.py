"""Configuration module for the firerest client."""
from .settings import FirebaseConfig, load_settings

__all__ = ["FirebaseConfig", "load_settings"]
