"""ccenv exception hierarchy.

Every user-facing failure derives from CcenvError so the CLI and the HTTP
layer can report it with one handler. ``http_status`` is the response code
the web API uses for that failure.
"""


class CcenvError(Exception):
    """Base exception for all ccenv errors."""

    http_status = 500


class ProfileNotFoundError(CcenvError):
    """Raised when a named profile does not exist."""

    http_status = 404

    def __init__(self, name: str):
        super().__init__(f'Profile "{name}" not found.')
        self.name = name


class ProfileExistsError(CcenvError):
    """Raised when creating or importing a profile whose name is taken."""

    http_status = 409

    def __init__(self, name: str):
        super().__init__(f'Profile "{name}" already exists.')
        self.name = name


class ValidationError(CcenvError):
    """Raised for bad user input: names, URLs, unknown templates, malformed JSON."""

    http_status = 400


class StoreError(CcenvError):
    """Raised when the config file cannot be read or written."""
