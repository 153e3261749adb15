"""Offline experiment runner."""

from .runner import run_experiment

__all__ = ["run_experiment"]
