"""Blade: multi-tenant headless CMS backend."""
__version__ = "0.1.0"
