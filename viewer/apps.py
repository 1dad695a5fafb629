from django.apps import AppConfig


class ViewerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'viewer'

    def ready(self):
        """Build the process-wide asset loader once, at startup."""
        from viewer.markdown.assets import get_asset_loader

        get_asset_loader()
