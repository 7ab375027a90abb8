# src/pymstest/exceptions.py

"""
Exception hierarchy for pymstest.
"""


class PyMSTestError(Exception):
    """Base class for all pymstest errors."""

    pass


class ConfigurationError(PyMSTestError):
    """Raised when configuration is missing, unreadable or invalid."""

    pass


class ExecutableNotFoundError(ConfigurationError):
    """Raised when mstest.exe cannot be located."""

    def __init__(self, message: str, searched: list[str] | None = None):
        self.searched = searched or []
        super().__init__(message)
        if self.searched and hasattr(self, "add_note"):
            self.add_note(f"Searched: {', '.join(self.searched)}")


class RunnerError(PyMSTestError):
    """Base class for errors raised while driving the test runner process."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        details: Exception | None = None,
    ):
        self.command = command
        self.details = details
        full_message = f"[Runner] {message}"
        if command:
            full_message += f" (Executable: '{command[0]}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class RunnerLaunchError(RunnerError):
    """Raised when the runner executable could not be started."""

    pass


# 🔼⚙️
