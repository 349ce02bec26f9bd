"""Textual front end for pingback."""

from .app import PingbackApp, run_tui

__all__ = ["PingbackApp", "run_tui"]
