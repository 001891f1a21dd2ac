from django.apps import AppConfig


class TournamentAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'petanque.tournament'
    verbose_name = 'Tournament'
