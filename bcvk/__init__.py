"""Helpers for running bootc container images as virtual machines."""

__version__ = "0.1.0"