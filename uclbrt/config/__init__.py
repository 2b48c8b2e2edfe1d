"""Configuration module for the uclbrt client."""
from .settings import ClientSettings, load_settings

__all__ = ["ClientSettings", "load_settings"]
