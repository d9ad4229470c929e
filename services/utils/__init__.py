"""
Utility services for strip type detection.

Utilities:
- DebugContext: Step tracking and visual logging
- trace_step: Adds a step to an optional trace without letting it fail the caller
"""

from services.utils.debug import DebugContext, trace_step

__all__ = [
    'DebugContext',
    'trace_step'
]
