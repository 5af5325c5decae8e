"""gh-fork-cleanup: interactively review and delete your GitHub forks."""

# Version - should match pyproject.toml
__version__ = "1.0.0"
