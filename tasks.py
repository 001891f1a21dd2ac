import sys
from invoke import task
from pathlib import Path

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.absolute()

# Note: .env file is automatically loaded by Django settings
# No need to load it here to avoid duplication


def project_relative(path):
    """Convert a relative path to an absolute path relative to the project root."""
    return str(PROJECT_ROOT / path)


def import_db_name():
    """Import database name from Django settings."""
    sys.path.insert(0, str(PROJECT_ROOT))
    from petanque.settings import DATABASES
    return DATABASES['default']['NAME']


@task
def install(c):
    """Install the project in editable mode with test and dev extras."""
    c.run("pip install -e .[test,dev]")


@task
def migrate(c):
    """Run Django database migrations."""
    manage_py = project_relative("manage.py")
    c.run(f"python {manage_py} migrate")
    print(f"Database ready: {import_db_name()}")


@task
def makemigrations(c):
    """Create new Django migrations."""
    manage_py = project_relative("manage.py")
    c.run(f"python {manage_py} makemigrations")


@task
def shell(c):
    """Start Django shell."""
    manage_py = project_relative("manage.py")
    c.run(f"python {manage_py} shell")


@task
def test(c, path=None):
    """Run the test suite with pytest. Optionally specify a specific test path."""
    if path:
        c.run(f"pytest {path}")
    else:
        c.run("pytest")


@task
def seed(c, teams=16, method="swiss", rounds=5, results=False):
    """Create a demo tournament, optionally with random results for every round."""
    manage_py = project_relative("manage.py")
    c.run(
        f"python {manage_py} seed_tournament --teams {teams} "
        f"--method {method} --rounds {rounds}"
    )
    if results:
        c.run(f"python {manage_py} generate_random_results --latest --all-rounds")
