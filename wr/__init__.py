"""wr: cut git-flow releases and drive their GitLab deploy jobs."""

__version__ = "0.4.0"
