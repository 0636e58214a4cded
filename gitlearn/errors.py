"""gitlearn error types."""


class GitLearnError(Exception):
    """Base class for gitlearn exceptions."""


class CorruptRepository(GitLearnError):
    """Raised when stored session state breaks a repository invariant.

    Rejected user operations never raise; they return a falsy
    ``OpResult``. This signals a bug or a damaged session directory.

    Attributes:
        key: The storage key whose contents were inconsistent, if any.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)
