"""ssmedit: edit AWS SSM Parameter Store values in your $EDITOR."""

__version__ = "0.3.0"
