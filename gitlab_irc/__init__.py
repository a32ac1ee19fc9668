"""GitLab webhook → IRC notifier."""

__version__ = "0.1.0"
