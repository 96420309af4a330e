"""Application context package."""

from accueil.application.context.app_context import ApplicationContext

__all__ = ["ApplicationContext"]
