"""Spatial price competition among sellers on a discrete 2D market."""

__version__ = "0.1.0"
