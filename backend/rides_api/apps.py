from django.apps import AppConfig


class RidesApiConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "rides_api"
    verbose_name = "Ride dispatch"
