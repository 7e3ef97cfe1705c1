"""
UI Module - Black Box Interface

Purpose: Page objects and rendering of the main view
Interface: MainView, UI, UISession, Component, PushMode
Hidden: Templates, layout

UI objects are node-local and never replicated through the data grid.
"""

from .components import UI, Component, PushMode, UISession
from .view import MainView

__all__ = ["Component", "MainView", "PushMode", "UI", "UISession"]
