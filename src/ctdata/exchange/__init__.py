"""Exchange layer — codec, signing, envelope, and artifact transports.

Pure byte-level operations. Depends on the domain layer plus msgpack;
never touches the store, services, or commands.
"""

from ctdata.exchange.keys import KeyProvider, SettingsKeyProvider, StaticKeyProvider
from ctdata.exchange.pipeline import ExchangePipeline
from ctdata.exchange.signing import IntegritySigner

__all__ = [
    "ExchangePipeline",
    "IntegritySigner",
    "KeyProvider",
    "SettingsKeyProvider",
    "StaticKeyProvider",
]
