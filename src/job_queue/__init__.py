"""Interactive job queue and project pool tracker."""

__version__ = "0.1.0"
