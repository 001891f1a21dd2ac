from django.apps import AppConfig


class TournamentCoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'petanque.tournament_core'
    verbose_name = 'Tournament Core Logic'
