"""Release plan model and CI/Homebrew document generator."""

__version__ = "0.1.0"
