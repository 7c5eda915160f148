"""slngen - Generate Visual Studio solution files from evaluated projects."""

__version__ = "0.1.0"
__all__ = ["__version__"]
