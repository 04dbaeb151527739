"""Pipeline stages for keyrpc."""

from ..providers.base import BaseSubprovider
from ..providers.fixture import FixtureSubprovider
from ..providers.http import AuthenticatedFetchSubprovider

__all__ = [
    "BaseSubprovider",
    "FixtureSubprovider",
    "AuthenticatedFetchSubprovider",
]
