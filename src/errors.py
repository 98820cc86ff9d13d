"""
Provisioning error taxonomy
Every failure that reaches the entry point derives from ProvisioningError
"""

from typing import Optional


class ProvisioningError(Exception):
    """Base class for all access point provisioning failures"""


class BusConnectionError(ProvisioningError, ConnectionError):
    """Cannot establish or use the message bus connection"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NoMatchingEntriesError(ProvisioningError):
    """Enumeration succeeded but nothing matched the requested classification"""

    def __init__(self, target, entries_tested: int = 0):
        super().__init__(f"No entries with classification {target} ({entries_tested} tested)")
        self.target = target
        self.entries_tested = entries_tested


class ClassificationError(ProvisioningError):
    """Classifying a single entry failed, aborting the whole discovery"""

    def __init__(self, ref: str, cause: BaseException):
        super().__init__(f"Failed to classify {ref}: {cause!r}")
        self.ref = ref
        self.cause = cause


class ConfigurationError(ProvisioningError):
    """The access point configuration call failed or its settings are invalid"""

    def __init__(self, cause: BaseException):
        super().__init__(f"Access point configuration failed: {cause}")
        self.cause = cause
