"""
Exception classes for the dashboard.

- BackendError: The queue store could not complete a call
- InputError: The keyboard input stream ended

Per project patterns:
- Inherit from Exception for base exception type
- Store context data in attributes for error handling
- Include descriptive message with relevant details
"""


class BackendError(Exception):
    """
    Raised when the queue store cannot list queues or fetch attributes.

    Covers connectivity failures, queues deleted concurrently, malformed
    queue data and invalid namespaces.

    Attributes:
        message: What went wrong
        queue: Queue name involved, if any
    """

    def __init__(self, message: str, queue: str | None = None) -> None:
        self.message = message
        self.queue = queue
        if queue is not None:
            super().__init__(f"{message} (queue: {queue})")
        else:
            super().__init__(message)


class InputError(Exception):
    """Raised when the keyboard stream ends unexpectedly."""
