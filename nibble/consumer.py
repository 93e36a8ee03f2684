"""
Data consumers.

A consumer parses a byte stream piece by piece, telling the driver after each
call how much of the buffer it used and how much it wants next, and optionally
where the producer should move to before the next read. This makes it possible
to skip over or come back to parts of a file.

Example, a consumer that prints four-byte samples five times then stops:

    class PrintConsumer(Consumer):
        def __init__(self):
            self.counter = 0

        def consume(self, input):
            outcome = take(4)(input)
            if outcome.is_failed():
                return ConsumerError(0)
            if outcome.is_incomplete():
                return Await(0, 4)
            print(self.counter, outcome.value)
            self.counter += 1
            return Await(4, 4) if self.counter < 5 else Done()

        def on_failure(self, code):
            print("failed with error code", code)

        def on_finish(self):
            print("finished")

    PrintConsumer().run(MemProducer(b"abcdefghijklmnopqrstuvwx", 4))
"""

import io
import logging
from typing import Optional
from dataclasses import dataclass

from .producer import Data, Eof, Producer, ProducerError, Retry, SeekFrom

logger = logging.getLogger("nibble.consumer")

class ConsumerState:
    pass

@dataclass(frozen=True)
class Await(ConsumerState):
    """Used `consumed` bytes, wants a buffer of at least `needed` bytes next."""
    consumed: int
    needed: int

@dataclass(frozen=True)
class Seek(ConsumerState):
    """
    Like Await, but the producer moves to `position` before the next read.

    A `SeekFrom.current` offset counts from the end of the window the consumer
    asked for last, i.e. from buffer start + previous `needed`.
    """
    consumed: int
    position: SeekFrom
    needed: int

@dataclass(frozen=True)
class Pending(ConsumerState):
    """No decision yet; supply more data without changing the bookkeeping."""

@dataclass(frozen=True)
class Done(ConsumerState):
    pass

@dataclass(frozen=True)
class ConsumerError(ConsumerState):
    code: int

class Consumer:
    """
    Owns its parsing state; the driver only ever calls these three methods.
    """
    # Size of the first window pulled before `consume` is first called.
    initial_needed: int = 1

    def consume(self, input: bytes) -> ConsumerState:
        raise NotImplementedError("Subclasses must implement this method")

    def on_failure(self, code: int) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    def on_finish(self) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    def run(self, producer: Producer) -> None:
        run(self, producer)

def _fill(producer: Producer, buffer: bytearray, needed: int) -> Optional[bool]:
    """
    Pull chunks into `buffer` until it holds `needed` bytes.

    Returns True when the stream ended with data, False when it did not end,
    and None when it ended with nothing left to read.
    """
    while True:
        state = producer.produce()
        if isinstance(state, Data):
            buffer.extend(state.chunk)
        elif isinstance(state, Eof):
            if not state.chunk:
                return None
            buffer.extend(state.chunk)
            return True
        elif isinstance(state, ProducerError):
            # Best effort: consume whatever made it into the buffer.
            logger.warning(f"Producer error {state.code}, consuming {len(buffer)} buffered bytes")
            return False
        elif isinstance(state, Retry):
            continue
        else:
            raise TypeError(f"Unexpected producer state: {state!r}")
        if len(buffer) >= needed:
            return False

def run(consumer: Consumer, producer: Producer) -> None:
    """
    Feed `consumer` from `producer` until it is done, fails, or the data runs out.
    """
    buffer = bytearray()
    consumed = 0
    needed = consumer.initial_needed
    seek_to: Optional[SeekFrom] = None
    starved = False
    eof = False
    end = False
    error: Optional[int] = None

    while True:
        if seek_to is None and not starved and len(buffer) - consumed >= needed:
            del buffer[:consumed]
            consumed = 0
        else:
            if seek_to is not None:
                position = producer.seek(seek_to)
                if position is None:
                    logger.warning(f"Seek to {seek_to} failed, reading from current position")
                else:
                    logger.debug(f"Seeked to {position}")
                seek_to = None
                eof = False
                buffer.clear()
            else:
                del buffer[:consumed]
            consumed = 0
            starved = False

            ended = _fill(producer, buffer, needed)
            if ended is None:
                logger.debug("Producer exhausted")
                consumer.on_finish()
                return
            eof = eof or ended

        state = consumer.consume(bytes(buffer))
        logger.debug(f"Consumer returned {state!r} for {len(buffer)} bytes")

        if isinstance(state, ConsumerError):
            error = state.code
        elif isinstance(state, Done):
            end = True
        elif isinstance(state, Seek):
            target = state.position
            if target.whence == io.SEEK_CUR:
                target = SeekFrom.current(target.offset - (len(buffer) - needed))
            seek_to = target
            consumed = state.consumed
            needed = state.needed
        elif isinstance(state, Await):
            consumed = state.consumed
            needed = state.needed
        elif isinstance(state, Pending):
            starved = True
        else:
            raise TypeError(f"Unexpected consumer state: {state!r}")

        if error is not None:
            logger.debug(f"Consumer failed with error code {error}")
            consumer.on_failure(error)
            return
        if (eof and seek_to is None) or end:
            consumer.on_finish()
            return
