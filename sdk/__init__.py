"""
Gym Noise Buddy SDK: shared library for the app, the web server, and the CLI.

Provides a single public surface for config section access, the microphone
capability abstraction, and logging. Import from this package only;
do not depend on app, audio, or zones from within the SDK.

Example:
    from sdk import get_meter_section, get_web_section
    cfg = get_meter_section(raw_config)

    from sdk import MicrophoneSource, MicPermission, NoOpMicrophone
    from sdk import get_logger
"""

from __future__ import annotations

from sdk.abstractions import (
    MicPermission,
    MicrophoneError,
    MicrophoneSource,
    NoOpMicrophone,
)
from sdk.config import (
    DEFAULT_ZONES_KEY,
    get_meter_section,
    get_persistence_section,
    get_section,
    get_web_section,
)
from sdk.logging import get_logger

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_ZONES_KEY",
    "MicPermission",
    "MicrophoneError",
    "MicrophoneSource",
    "NoOpMicrophone",
    "get_logger",
    "get_meter_section",
    "get_persistence_section",
    "get_section",
    "get_web_section",
]
