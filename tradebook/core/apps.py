from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tradebook.core'

    def ready(self):
        """Import signals when app is ready"""
        import tradebook.core.model_cache  # noqa: F401
