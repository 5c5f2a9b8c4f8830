"""ExchangePipeline — export and open signed artifacts end to end.

Export: document → envelope → MessagePack → HMAC → text or file framing.
Open:   framing → HMAC check → MessagePack → envelope tag check → schema.

The pipeline never writes to storage. Callers that need the import
state machine pass an ``observer`` which is called on entering each
:class:`ImportStage`; the merge stages belong to the service layer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from ctdata.domain.schemas import validate
from ctdata.domain.types import ImportStage
from ctdata.exchange import envelope, transport

if TYPE_CHECKING:
    from pydantic import BaseModel

    from ctdata.domain.schemas import ExchangeState
    from ctdata.exchange.signing import IntegritySigner

logger = logging.getLogger(__name__)

StageObserver = Callable[[ImportStage], None]


def _noop(_stage: ImportStage) -> None:
    return None


class ExchangePipeline:
    """Codec, signer, envelope and validator composed into one object."""

    def __init__(self, signer: IntegritySigner) -> None:
        self._signer = signer

    @property
    def signer(self) -> IntegritySigner:
        return self._signer

    # ── Export ────────────────────────────────────────────────────────

    def seal(self, source: str, document: Mapping[str, Any] | BaseModel) -> tuple[bytes, bytes]:
        """Wrap and sign *document*. Returns ``(mac, body)``."""
        body = envelope.wrap(source, document)
        return self._signer.sign(body), body

    def export_bytes(self, source: str, document: Mapping[str, Any] | BaseModel) -> bytes:
        """Build a file artifact for *document* tagged with *source*."""
        mac, body = self.seal(source, document)
        logger.debug("Sealed %s export (%d body bytes, file)", source, len(body))
        return transport.encode_file(mac, body)

    def export_text(self, source: str, document: Mapping[str, Any] | BaseModel) -> str:
        """Build a text artifact for *document* tagged with *source*."""
        mac, body = self.seal(source, document)
        logger.debug("Sealed %s export (%d body bytes, text)", source, len(body))
        return transport.encode_text(mac, body)

    # ── Open ──────────────────────────────────────────────────────────

    def open_bytes(
        self,
        data: bytes,
        expected_source: str,
        *,
        observer: StageObserver | None = None,
    ) -> ExchangeState:
        """Verify, unwrap and validate a file artifact."""
        notify = observer or _noop
        notify(ImportStage.DECODING)
        mac, body = transport.decode_file(data)
        notify(ImportStage.VERIFYING)
        self._signer.require_valid(body, mac)
        return self._open_body(body, expected_source, notify)

    def open_text(
        self,
        text: str,
        expected_source: str,
        *,
        observer: StageObserver | None = None,
    ) -> ExchangeState:
        """Verify, unwrap and validate a text artifact."""
        notify = observer or _noop
        notify(ImportStage.DECODING)
        mac_hex, body = transport.decode_text(text)
        notify(ImportStage.VERIFYING)
        self._signer.require_valid_hex(body, mac_hex)
        return self._open_body(body, expected_source, notify)

    def _open_body(
        self,
        body: bytes,
        expected_source: str,
        notify: StageObserver,
    ) -> ExchangeState:
        notify(ImportStage.SOURCE_CHECKING)
        payload = envelope.unwrap(body, expected_source)
        notify(ImportStage.VALIDATING)
        return validate(payload, expected_source)
