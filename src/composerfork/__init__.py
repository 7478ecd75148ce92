"""composerfork: point a Composer project at GitHub forks, branches and pull requests."""

__version__ = "0.3.0"
