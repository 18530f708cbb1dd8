class PromptSwitchError(Exception):
    """Base class for every error raised by the prompt services."""


class ConfigError(PromptSwitchError):
    """A required path or directory could not be resolved."""

    def __str__(self):
        return f"Config error: {self.args[0] if self.args else ''}"


class FileIOError(PromptSwitchError):
    """Reading, writing or renaming a file failed."""

    def __init__(self, path, source):
        super().__init__(str(path), source)
        self.path = str(path)
        self.source = source

    def __str__(self):
        return f"IO error: {self.path}: {self.source}"


class SerializationError(PromptSwitchError):
    """Persisted data could not be turned back into a prompt record."""

    def __str__(self):
        return f"Serialization error: {self.args[0] if self.args else ''}"


class StorageError(PromptSwitchError):
    """The underlying prompt table failed."""

    def __str__(self):
        return f"Database error: {self.args[0] if self.args else ''}"


class InvalidInputError(PromptSwitchError):
    def __str__(self):
        return f"Invalid input: {self.args[0] if self.args else ''}"


class NotFoundError(InvalidInputError):
    pass
