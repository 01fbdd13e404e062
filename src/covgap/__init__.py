"""covgap - report missing code coverage from Cobertura XML files."""

__version__ = "0.1.0"
