"""
Base exception for the multi-send client.

Concrete errors live beside the code that raises them and are re-exported
from the package root.
"""


class MultiSendError(Exception):
    """Base class for all errors raised by the multi-send client."""
    pass
