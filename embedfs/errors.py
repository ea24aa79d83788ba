import errno


class EmbedFSError(Exception):
    """Base class for embedfs-specific errors."""


# Serving time
class InvalidPathError(EmbedFSError, ValueError):
    pass


class FileDoesNotExist(EmbedFSError, FileNotFoundError):
    def __init__(self, path: str):
        super().__init__(errno.ENOENT, "file does not exist", path)


# Construction / generation time
class DuplicatePathError(EmbedFSError, ValueError):
    pass


class IntegrityError(EmbedFSError):
    pass


class EncodeError(EmbedFSError):
    pass
