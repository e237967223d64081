from django.apps import AppConfig


class CabrideMainAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cabride_main_app'

    def ready(self):
        import cabride_main_app.signals  # Register signals
