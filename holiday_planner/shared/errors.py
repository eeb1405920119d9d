"""
Error taxonomy for the AI endpoints.

Every error carries the HTTP status it maps to. ``StoreError`` is the only
class that the request pipeline swallows: a broken cache must never stop a
fresh answer from being served.
"""


class HolidayPlannerError(Exception):
    """Base class for all service errors."""

    status_code: int = 500


class ValidationError(HolidayPlannerError):
    """Missing or invalid request input."""

    status_code = 400


class AuthError(HolidayPlannerError):
    """Missing, invalid or non-allowlisted session."""

    status_code = 401


class NotFoundError(HolidayPlannerError):
    """A referenced trip, plan version or item does not exist for the caller."""

    status_code = 404


class FetchError(HolidayPlannerError):
    """An external web page could not be fetched."""

    status_code = 400


class ExtractionError(HolidayPlannerError):
    """A fetched page did not contain enough text to extract from."""

    status_code = 400


class UpstreamError(HolidayPlannerError):
    """Reading or writing domain rows failed."""

    status_code = 500


class ProviderError(HolidayPlannerError):
    """The generative AI provider call failed."""

    status_code = 500


class StoreError(HolidayPlannerError):
    """The result cache could not be read or written."""

    status_code = 500
