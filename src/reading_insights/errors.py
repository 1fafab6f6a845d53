class CatalogUnavailableError(RuntimeError):
    """Raised inside the catalog client when the upstream catalog cannot serve a page.

    Never escapes :class:`~reading_insights.services.catalog_client.CatalogClient`.
    """

    pass


class MalformedMessageError(ValueError):
    """Raised when a stored chat message cannot be decoded."""

    pass
