"""
Client bundles: declarations, argument preprocessing and launching.
"""

from .client import Client
from .launcher import ClientLauncher
from .models import ClientConfiguration, PlayerConfiguration
from .preprocessor import Preprocessor

__all__ = [
    "Client",
    "ClientLauncher",
    "ClientConfiguration",
    "PlayerConfiguration",
    "Preprocessor",
]
