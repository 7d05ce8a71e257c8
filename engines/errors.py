"""Failure categories raised by the inspection engines."""


class InspectionError(Exception):
    """Base class for every inspection failure."""

    category = "error"


class OpenError(InspectionError):
    """Input could not be opened or read."""

    category = "open"


class FormatError(InspectionError):
    """Header or coefficient structure is not decodable."""

    category = "format"


class StoreAccessError(InspectionError):
    """A block row could not be fetched from an otherwise valid session."""

    category = "store"


class ExtractionError(InspectionError):
    """DC extraction for one component failed."""

    category = "extraction"


class OutputError(InspectionError):
    """An output artifact could not be written."""

    category = "output"


class InvalidArgument(InspectionError, ValueError):
    """Caller-level contract violation."""

    category = "argument"
