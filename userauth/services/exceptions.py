"""Provides exceptions occurring with external services."""


class Unavailable(RuntimeError):
    """The credential store could not be reached."""


class UserExists(RuntimeError):
    """A user with the given e-mail address is already registered."""


class NoSuchUser(RuntimeError):
    """User does not exist."""


class StoreUnavailable(RuntimeError):
    """Failed to read from the code/token store."""


class StoreWriteFailed(RuntimeError):
    """Failed to write to, or delete from, the code/token store."""


class DeliveryFailed(RuntimeError):
    """Failed to hand a message to the mail transport."""
