"""
Testing utilities module.

Provides helpers for testing applications built on miraveja-ioc.
"""

from .utilities import RecordingInvocationHandler, TestApplicationContext

__all__ = [
    "TestApplicationContext",
    "RecordingInvocationHandler",
]
