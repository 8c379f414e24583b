"""buldr - dependency-ordered incremental builds for multi-project C/C++ repositories."""

__version__ = "0.1.0"
