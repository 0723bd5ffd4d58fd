"""Errors raised by the ordering workflow.

Every error carries a human-readable message; the tool layer reports it
verbatim to the caller.
"""


class StarbucksError(Exception):
    """Base class for all ordering workflow failures."""


class NotAuthenticated(StarbucksError):
    def __init__(self, message: str = (
        "Not logged in. Please run login_starbucks first to authenticate, "
        "or set STARBUCKS_EMAIL and STARBUCKS_PASSWORD environment variables."
    )):
        super().__init__(message)


class AutoLoginFailed(StarbucksError):
    pass


class LoginTimeout(StarbucksError):
    pass


class BrowserNotActive(StarbucksError):
    pass


class StoreNotFound(StarbucksError):
    def __init__(self, message: str = (
        "Could not find store search input. The page may have changed or failed to load."
    )):
        super().__init__(message)


class StoreUnavailable(StarbucksError):
    def __init__(self, message: str = (
        "Could not find 'Order Here' button for the store. The store may not be available for ordering."
    )):
        super().__init__(message)


class ItemNotFound(StarbucksError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Could not find item: {name}")


class SizeUnavailable(StarbucksError):
    def __init__(self, name: str, size: str):
        self.name = name
        self.size = size
        super().__init__(f"Size {size} is not available for {name}")


class AddToCartFailed(StarbucksError):
    pass


class CartEmpty(StarbucksError):
    def __init__(self, message: str = (
        "Cart is empty - items failed to add. This may be a headless mode issue."
    )):
        super().__init__(message)


class NoPendingOrder(StarbucksError):
    pass


class FavoriteNotFound(StarbucksError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Favorite "{name}" not found')


class UnknownOperation(StarbucksError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidItems(StarbucksError):
    pass
