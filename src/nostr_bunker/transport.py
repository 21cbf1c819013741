"""Signer-side message listener: shapes requests, dispatches, replies to sender."""

from __future__ import annotations

import logging

from nostr_bunker.channel import MessageChannel, MessageEvent
from nostr_bunker.dispatcher import Dispatcher
from nostr_bunker.errors import MalformedRequestError
from nostr_bunker.types import Request, Response

logger = logging.getLogger(__name__)


class SignerTransport:
    def __init__(self, channel: MessageChannel, dispatcher: Dispatcher):
        self._channel = channel
        self._dispatcher = dispatcher
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._channel.on_message(self.handle)
        self._started = True

    async def handle(self, event: MessageEvent) -> Response | None:
        try:
            request = Request.from_message(event.data)
        except MalformedRequestError as error:
            # The channel carries unrelated traffic too; never answer it.
            logger.debug("Ignoring message from %s: %s", event.origin, error)
            return None

        logger.debug("Received %s request %s from %s", request.type, request.id, event.origin)
        # Origin comes from the envelope, never from the payload.
        response = await self._dispatcher.dispatch(request, event.origin)

        if event.source is None:
            logger.warning("No reply target for request %s from %s", request.id, event.origin)
            return response

        event.source.post_message(response.to_message(), event.origin)
        logger.debug("Sent %s response %s to %s", "ok" if response.ok else "error", response.id, event.origin)
        return response


def install_signer(
    channel: MessageChannel,
    dispatcher: Dispatcher,
) -> SignerTransport:
    """Register the signer listener on ``channel``."""
    transport = SignerTransport(channel, dispatcher)
    transport.start()
    return transport
