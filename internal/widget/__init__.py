"""
Weather widget: state machine, text renderer and terminal front end.
"""

from .models import LookupOutcome, LookupStatus, UIState
from .render import renderWidget
from .terminal import TerminalFrontend
from .widget import WeatherWidget

__all__ = [
    "LookupOutcome",
    "LookupStatus",
    "UIState",
    "WeatherWidget",
    "TerminalFrontend",
    "renderWidget",
]
