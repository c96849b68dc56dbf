"""
Exceptions raised by the matching engine.
Everything except an unavailable catalog is absorbed and reported as data.
"""


class GameMatchError(Exception):
	"""Base class for engine errors."""


class CatalogUnavailable(GameMatchError):
	"""The catalog store could not supply a catalog; search and reconcile cannot proceed."""
