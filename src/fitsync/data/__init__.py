"""Static demo data."""

from .mock_data import get_mock

__all__ = ["get_mock"]
