"""kbindex - content index and dependency resolution for versioned KB documents."""

__version__ = "0.1.0"
