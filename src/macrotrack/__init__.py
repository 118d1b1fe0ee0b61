"""Weight tracking, weekly macro targets and randomized meal plans."""

__version__ = "0.1.0"
