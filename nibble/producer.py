import io
import os
import logging
from typing import Optional, Union
from dataclasses import dataclass

logger = logging.getLogger("nibble.producer")

DEFAULT_CHUNK_SIZE = 4096

@dataclass(frozen=True)
class SeekFrom:
    """
    A repositioning target, using the `io` module's whence values.
    """
    whence: int
    offset: int

    @classmethod
    def start(cls, offset: int) -> 'SeekFrom':
        return cls(io.SEEK_SET, offset)

    @classmethod
    def current(cls, offset: int) -> 'SeekFrom':
        return cls(io.SEEK_CUR, offset)

    @classmethod
    def end(cls, offset: int) -> 'SeekFrom':
        return cls(io.SEEK_END, offset)

    def is_relative(self) -> bool:
        return self.whence == io.SEEK_CUR

    def resolve(self, position: int, length: int) -> int:
        """Absolute position this target points at, unclamped."""
        if self.whence == io.SEEK_SET:
            return self.offset
        if self.whence == io.SEEK_CUR:
            return position + self.offset
        if self.whence == io.SEEK_END:
            return length + self.offset
        raise ValueError(f"Unknown whence: {self.whence}")

class ProducerState:
    pass

@dataclass(frozen=True)
class Data(ProducerState):
    chunk: bytes

@dataclass(frozen=True)
class Eof(ProducerState):
    """Last chunk of the stream, possibly empty."""
    chunk: bytes = b""

@dataclass(frozen=True)
class ProducerError(ProducerState):
    code: int = 0

@dataclass(frozen=True)
class Retry(ProducerState):
    pass

class Producer:
    """
    A source of byte chunks that can be repositioned.
    """
    def produce(self) -> ProducerState:
        raise NotImplementedError("Subclasses must implement this method")

    def seek(self, position: SeekFrom) -> Optional[int]:
        """
        Move to `position`. Returns the new absolute position, or None when
        the target is not reachable (the position is then unchanged).
        """
        raise NotImplementedError("Subclasses must implement this method")

def _check_chunk_size(chunk_size: int) -> int:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return chunk_size

class MemProducer(Producer):
    """
    Serves an in-memory buffer in chunks of at most `chunk_size` bytes.
    """
    def __init__(self, data: Union[bytes, bytearray], chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.data: bytes = bytes(data)
        self.chunk_size: int = _check_chunk_size(chunk_size)
        self.index: int = 0

    def produce(self) -> ProducerState:
        remaining = len(self.data) - self.index
        if remaining > self.chunk_size:
            chunk = self.data[self.index:self.index + self.chunk_size]
            self.index += self.chunk_size
            return Data(chunk)
        chunk = self.data[self.index:]
        self.index = len(self.data)
        return Eof(chunk)

    def seek(self, position: SeekFrom) -> Optional[int]:
        target = position.resolve(self.index, len(self.data))
        if target < 0:
            logger.warning(f"Cannot seek before start of buffer: {position}")
            return None
        self.index = min(target, len(self.data))
        return self.index

class FileProducer(Producer):
    """
    Reads a file in fixed-size chunks.

    Every non-empty read is `Data`; only a read past the end is `Eof`, so the
    consumer keeps working through buffered bytes until it asks for more than
    the file holds. Usable as a context manager.
    """
    def __init__(self, path: Union[str, os.PathLike], chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.path = path
        self.chunk_size: int = _check_chunk_size(chunk_size)
        try:
            self.file = open(path, 'rb')
        except PermissionError:
            logger.error(f"Permission denied when opening {path}")
            raise
        except OSError as e:
            logger.error(f"Error opening file {path}: {str(e)}")
            raise
        logger.debug(f"File producer created for {path}")

    def _size(self) -> int:
        return os.fstat(self.file.fileno()).st_size

    def produce(self) -> ProducerState:
        try:
            chunk = self.file.read(self.chunk_size)
        except OSError as e:
            logger.warning(f"Error reading from {self.path}: {str(e)}")
            return ProducerError(getattr(e, 'errno', None) or 0)
        if not chunk:
            return Eof()
        return Data(chunk)

    def seek(self, position: SeekFrom) -> Optional[int]:
        size = self._size()
        target = position.resolve(self.file.tell(), size)
        if target < 0:
            logger.warning(f"Cannot seek before start of {self.path}: {position}")
            return None
        return self.file.seek(min(target, size), io.SEEK_SET)

    def close(self) -> None:
        self.file.close()

    def __enter__(self) -> 'FileProducer':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
