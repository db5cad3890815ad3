class StorageError(Exception):
    """Exception raised when durable state cannot be read or written."""

    def __init__(self, error: Exception):
        self.error = error
        super().__init__(f"Storage error: {error!s}")


class InvalidState(Exception):  # noqa: N818
    """Exception raised when an operation is not valid for the timer state."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f'Cannot "{operation}": {reason}')


class DoesNotExist(Exception):  # noqa: N818
    """Exception raised when a resource does not exist."""

    def __init__(self, resource_type: str, resource_id: int | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f'{resource_type} with ID "{resource_id!s}" does not exist')
