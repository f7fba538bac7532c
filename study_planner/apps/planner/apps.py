from django.apps import AppConfig


class PlannerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.planner"
    label = "planner"
    verbose_name = "Study Planner"
