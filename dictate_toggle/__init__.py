"""
Dictate Toggle - one-key voice dictation for Linux desktops

Each invocation either starts recording or transcribes the pending
recording and types it into the focused window.
"""

__version__ = "1.0.0"

from dictate_toggle.app import Action, DictationToggle
from dictate_toggle.config import Config

__all__ = ["Action", "DictationToggle", "Config", "__version__"]
