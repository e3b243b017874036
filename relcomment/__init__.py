"""Comment on the pull requests and issues shipped in a release."""

__version__ = "0.1.0"
