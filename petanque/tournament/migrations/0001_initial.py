import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Tournament",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_created", models.DateTimeField(auto_now_add=True)),
                ("date_modified", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("team_composition", models.CharField(choices=[("men", "Men"), ("women", "Women"), ("mixed", "Mixed"), ("select", "Select")], default="mixed", max_length=32)),
                ("tournament_type", models.CharField(choices=[("regional", "Regional"), ("national", "National"), ("open", "Open"), ("club", "Club")], default="open", max_length=32)),
                ("start_date", models.DateField(blank=True, null=True)),
                ("end_date", models.DateField(blank=True, null=True)),
                ("director", models.CharField(blank=True, max_length=255)),
                ("head_umpire", models.CharField(blank=True, max_length=255)),
                ("format", models.CharField(choices=[("single", "Singles"), ("double", "Doubles"), ("triple", "Triples")], default="triple", max_length=32)),
                ("day_type", models.CharField(choices=[("single", "Single day"), ("two", "Two days")], default="single", max_length=32)),
                ("pairing_method", models.CharField(choices=[("swiss", "Swiss"), ("swissHotel", "Seeded Swiss (hotel)"), ("roundRobin", "Round robin"), ("poolPlay", "Pool play")], default="swiss", max_length=32)),
                ("qualifying_rounds", models.PositiveIntegerField(default=5)),
                ("court_count", models.PositiveIntegerField(default=8)),
                ("bracket_size", models.PositiveIntegerField(choices=[(4, "4"), (8, "8"), (16, "16"), (32, "32")], default=16)),
                ("advance_all", models.BooleanField(default=True)),
                ("advance_count", models.PositiveIntegerField(blank=True, null=True)),
                ("has_consolante", models.BooleanField(default=False)),
                ("region_avoidance", models.BooleanField(default=False)),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_created", models.DateTimeField(auto_now_add=True)),
                ("date_modified", models.DateTimeField(auto_now=True)),
                ("captain", models.CharField(max_length=255)),
                ("player2", models.CharField(max_length=255)),
                ("player3", models.CharField(blank=True, max_length=255)),
                ("region", models.CharField(blank=True, max_length=255)),
                ("club", models.CharField(blank=True, max_length=255)),
                ("tournament", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tournament.tournament")),
            ],
            options={
                "ordering": ("tournament", "id"),
            },
        ),
        migrations.CreateModel(
            name="QualifyingRound",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_created", models.DateTimeField(auto_now_add=True)),
                ("date_modified", models.DateTimeField(auto_now=True)),
                ("number", models.PositiveIntegerField()),
                ("is_complete", models.BooleanField(default=False)),
                ("tournament", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tournament.tournament")),
            ],
            options={
                "ordering": ("tournament", "number"),
                "unique_together": {("tournament", "number")},
            },
        ),
        migrations.CreateModel(
            name="QualifyingGame",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_created", models.DateTimeField(auto_now_add=True)),
                ("date_modified", models.DateTimeField(auto_now=True)),
                ("court_number", models.PositiveIntegerField(blank=True, null=True)),
                ("team1_score", models.PositiveIntegerField(blank=True, null=True)),
                ("team2_score", models.PositiveIntegerField(blank=True, null=True)),
                ("is_bye", models.BooleanField(default=False)),
                ("board_order", models.PositiveIntegerField(default=0)),
                ("round", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tournament.qualifyinground")),
                ("team1", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.team")),
                ("team2", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.team")),
            ],
            options={
                "ordering": ("round", "board_order", "id"),
            },
        ),
        migrations.CreateModel(
            name="TeamStanding",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_created", models.DateTimeField(auto_now_add=True)),
                ("date_modified", models.DateTimeField(auto_now=True)),
                ("wins", models.PositiveIntegerField(default=0)),
                ("losses", models.PositiveIntegerField(default=0)),
                ("points_for", models.PositiveIntegerField(default=0)),
                ("points_against", models.PositiveIntegerField(default=0)),
                ("differential", models.IntegerField(default=0)),
                ("buchholz", models.IntegerField(default=0)),
                ("fine_buchholz", models.IntegerField(default=0)),
                ("point_quotient", models.FloatField(blank=True, null=True)),
                ("is_eliminated", models.BooleanField(default=False)),
                ("rank", models.PositiveIntegerField(default=0)),
                ("team", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tournament.team")),
                ("tournament", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tournament.tournament")),
            ],
            options={
                "ordering": ("tournament", "rank"),
                "unique_together": {("tournament", "team")},
            },
        ),
        migrations.CreateModel(
            name="Bracket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_created", models.DateTimeField(auto_now_add=True)),
                ("date_modified", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("size", models.PositiveIntegerField()),
                ("is_consolante", models.BooleanField(default=False)),
                ("is_complete", models.BooleanField(default=False)),
                ("loser_bracket", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.bracket")),
                ("tournament", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tournament.tournament")),
            ],
            options={
                "ordering": ("tournament", "is_consolante", "name"),
                "unique_together": {("tournament", "name")},
            },
        ),
        migrations.CreateModel(
            name="BracketMatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date_created", models.DateTimeField(auto_now_add=True)),
                ("date_modified", models.DateTimeField(auto_now=True)),
                ("round_number", models.PositiveIntegerField()),
                ("match_number", models.PositiveIntegerField()),
                ("court_number", models.PositiveIntegerField(blank=True, null=True)),
                ("team1_score", models.PositiveIntegerField(blank=True, null=True)),
                ("team2_score", models.PositiveIntegerField(blank=True, null=True)),
                ("is_bye", models.BooleanField(default=False)),
                ("bracket", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="tournament.bracket")),
                ("loser_next_match", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.bracketmatch")),
                ("next_match", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.bracketmatch")),
                ("team1", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.team")),
                ("team2", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.team")),
                ("winner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="tournament.team")),
            ],
            options={
                "ordering": ("bracket", "round_number", "match_number"),
                "unique_together": {("bracket", "round_number", "match_number")},
            },
        ),
    ]
