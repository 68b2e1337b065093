class ShopError(Exception):
    """Base class for errors surfaced to the user."""


class ValidationError(ShopError):
    """
    Bad user input (empty cart, invalid price, missing or too early pickup time).
    The action is aborted with no state change.
    """


class RemoteOperationError(ShopError):
    """
    A create/update/delete/subscribe call against the document store failed.
    Never retried; the user re-triggers the action.
    """

    def __init__(self, operation: str, collection: str, cause: BaseException = None):
        super().__init__(f"{operation} on {collection} failed: {cause}")
        self.operation = operation
        self.collection = collection
        self.cause = cause


class DeserializationError(ShopError):
    """
    Persisted local state could not be decoded.
    Swallowed by the cart store, which then starts from an empty cart.
    """
