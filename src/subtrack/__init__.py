"""SubTrack backend: authentication, sessions and legacy data migration."""

__version__ = "0.1.0"
