"""Exceptions for programming-level faults inside the simulation.

Ordinary rule violations (no money, occupied plot, ...) are reported through
result records instead; these errors only cover malformed data and are caught
at the unit-of-work boundary that triggered them.
"""

from __future__ import annotations


class FarmSimError(RuntimeError):
	"""Base class for unexpected simulation faults."""


class CatalogLookupError(FarmSimError, LookupError):
	"""Raised when a crop or technology id is missing from its catalog."""


class MalformedEventError(FarmSimError, ValueError):
	"""Raised when a pending event lacks the payload its type requires."""


class UnknownEventTypeError(FarmSimError):
	"""Raised when no handler exists for a pending event's type."""
