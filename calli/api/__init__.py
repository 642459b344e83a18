from calli.api.client import BookingApiClient

__all__ = ["BookingApiClient"]
