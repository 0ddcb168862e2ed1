"""Domain errors raised below the HTTP layer and mapped to responses in main.py."""

from typing import List, Optional


class AuthError(Exception):
    """Authentication failed; the session has already been cleared."""

    def __init__(self, message: str = "Authentication failed", last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.last_error = last_error


class InvalidCredentials(AuthError):
    def __init__(self, last_error: Optional[BaseException] = None):
        super().__init__("Invalid email or password", last_error)


class EmailAlreadyRegistered(AuthError):
    def __init__(self, last_error: Optional[BaseException] = None):
        super().__init__("Email already registered", last_error)


class ProfileLoadFailure(AuthError):
    """Profile fetch kept failing after the retry policy was exhausted."""


class ProfileCreateFailure(AuthError):
    """Profile row could not be created; the auth identity is left in place."""


class AttachmentUploadError(Exception):
    """One or more files in a batch failed. Successful siblings are kept."""

    def __init__(self, failed: List[str], uploaded: Optional[list] = None):
        super().__init__("Failed to upload files")
        self.failed = failed
        self.uploaded = uploaded or []
