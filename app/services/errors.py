"""Exceptions raised while turning listing pages into catalog entries."""


class CatalogSyncError(Exception):
    """Base class for sync failures that are not network errors."""


class MalformedProductError(CatalogSyncError):
    """A product card is missing an element the extractors rely on."""


class PriceFormatError(MalformedProductError):
    """The price element does not hold a non-negative decimal amount."""


class MissingIdentifierError(CatalogSyncError):
    """The product URL carries no trailing numeric identifier."""
