class RankingsException(Exception):
    """Base exception for rankings-related errors."""
    pass


class ClientInputError(RankingsException):
    """Raised when a request carries a missing or invalid level/location."""
    pass


class ConfigurationError(RankingsException):
    """Raised when the profile store is not configured."""
    pass


class StoreQueryError(RankingsException):
    """Raised when a profile store query fails."""
    pass


class UpstreamProviderError(RankingsException):
    """Raised when a geocoding or IP-location provider call fails or times out."""
    pass


class RankingsClientError(RankingsException):
    """Raised by the rankings API client when a request fails."""
    pass
