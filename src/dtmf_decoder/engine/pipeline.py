#!/usr/bin/env python3
"""
Decoder Pipeline - Concurrent Stage Wiring

Architecture:
    ┌────────────┐   ┌───────────┐   ┌────────┐   ┌──────────┐
    │ Classifier │──▶│ Debouncer │──▶│ Framer │──▶│ Verifier │──▶ caller
    │ (reads src)│   │           │   │        │   │          │
    └────────────┘   └───────────┘   └────────┘   └──────────┘
         raw_symbols      symbols        messages      payloads

Each stage runs in its own daemon thread and owns its state exclusively.
Links are rendezvous handoffs: send() returns only once the consumer has
taken the item, so the classifier is never more than one block ahead of the
debouncer, and so on down the chain.

The caller drains the last link. first_payload() returns the first verified
payload and leaves the stage threads to die with the process.

When the audio source is exhausted (or a stage fails) an
end-of-stream marker is pushed through the remaining links; the caller gets
SourceExhaustedError instead of waiting forever.
"""

import logging
import queue
import threading
from typing import Any, Callable, Iterator, List, Optional

from ..detection.dtmf_constants import DetectorConfig, ProtocolConfig
from ..detection.tone_classifier import ToneClassifier
from ..protocol.debouncer import SymbolDebouncer
from ..protocol.framer import MessageFramer
from ..protocol.payload import PayloadVerifier
from ..sources.audio_source import AudioSource, AudioSourceError, EndOfStreamError

logger = logging.getLogger(__name__)

# Marker forwarded through every link once the source is exhausted
END_OF_STREAM = object()


class SourceExhaustedError(RuntimeError):
    """The audio stream ended before (another) verified payload was found."""


class HandoffQueue:
    """
    Single-producer/single-consumer rendezvous link.

    A one-slot queue whose send() also waits for the consumer to acknowledge
    the item, giving zero-buffer semantics.
    """

    def __init__(self, name: str):
        self.name = name
        self._queue: queue.Queue = queue.Queue(maxsize=1)

    def send(self, item: Any):
        """Block until the consumer has received `item`."""
        self._queue.put(item)
        self._queue.join()

    def receive(self) -> Any:
        """Block until an item is available and acknowledge it."""
        item = self._queue.get()
        self._queue.task_done()
        return item


class DecoderPipeline:
    """
    Runs classifier → debouncer → framer → verifier concurrently.

    Usage:
        pipeline = DecoderPipeline(WavAudioSource('message.wav'))
        payload = pipeline.first_payload()
    """

    def __init__(
        self,
        source: AudioSource,
        detector_config: Optional[DetectorConfig] = None,
        protocol_config: Optional[ProtocolConfig] = None
    ):
        self.source = source
        self.detector_config = detector_config or DetectorConfig()
        self.protocol_config = protocol_config or ProtocolConfig()

        self.classifier = ToneClassifier(source.sample_rate, self.detector_config)
        self.debouncer = SymbolDebouncer(self.protocol_config.debounce_run)
        self.framer = MessageFramer(self.protocol_config.blank_limit)
        self.verifier = PayloadVerifier()

        self.raw_symbols = HandoffQueue('raw_symbols')
        self.symbols = HandoffQueue('symbols')
        self.messages = HandoffQueue('messages')
        self.payload_link = HandoffQueue('payloads')

        self.source_error: Optional[AudioSourceError] = None
        self.stage_error: Optional[Exception] = None
        self.running = False
        self.exhausted = False
        self._threads: List[threading.Thread] = []

    def start(self):
        """Start the stage threads (idempotent)."""
        if self.running:
            return
        self.running = True

        stages = [
            ('ToneClassifier', self._classifier_loop, ()),
            ('SymbolDebouncer', self._stage_loop,
             (self.debouncer.push, self.raw_symbols, self.symbols)),
            ('MessageFramer', self._stage_loop,
             (self.framer.push, self.symbols, self.messages)),
            ('PayloadVerifier', self._stage_loop,
             (self.verifier.push, self.messages, self.payload_link)),
        ]
        for name, target, args in stages:
            thread = threading.Thread(target=target, args=args, name=name, daemon=True)
            thread.start()
            self._threads.append(thread)

        logger.info("DecoderPipeline started")

    def _classifier_loop(self):
        try:
            self.classifier.run(self.source, self.raw_symbols.send)
        except EndOfStreamError as e:
            logger.info(f"Audio source exhausted: {e}")
            self.source_error = e
        except AudioSourceError as e:
            logger.error(f"Audio source failed: {e}")
            self.source_error = e
        finally:
            self.raw_symbols.send(END_OF_STREAM)

    def _stage_loop(self, push: Callable[[Any], Any], inbox: HandoffQueue, outbox: HandoffQueue):
        try:
            while True:
                item = inbox.receive()
                if item is END_OF_STREAM:
                    return
                result = push(item)
                if result is not None:
                    outbox.send(result)
        except Exception as e:
            logger.error(f"{threading.current_thread().name} stage failed: {e}", exc_info=True)
            self.stage_error = e
        finally:
            outbox.send(END_OF_STREAM)

    def first_payload(self) -> bytes:
        """
        Block until the first verified payload is available.

        Raises:
            SourceExhaustedError: the stream ended without a verified payload
        """
        self.start()
        if self.exhausted:
            raise SourceExhaustedError("audio stream already exhausted")

        item = self.payload_link.receive()
        if item is END_OF_STREAM:
            self.exhausted = True
            raise SourceExhaustedError(
                "audio stream ended without a verified payload"
            ) from (self.stage_error or self.source_error)
        return item

    def payloads(self) -> Iterator[bytes]:
        """Yield every verified payload until the stream is exhausted."""
        while True:
            try:
                yield self.first_payload()
            except SourceExhaustedError:
                return
