"""Fan-out of child process output to the terminal and a capture buffer."""

from __future__ import annotations

import codecs
import threading
from typing import IO, Protocol

_CHUNK_SIZE = 4096


class ByteDestination(Protocol):
    def write(self, chunk: bytes) -> object: ...


class CaptureBuffer:
    """Accumulates chunks from several streams in arrival order."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._lock = threading.Lock()

    def write(self, chunk: bytes) -> int:
        with self._lock:
            self._chunks.append(chunk)
        return len(chunk)

    def getvalue(self) -> bytes:
        with self._lock:
            return b"".join(self._chunks)

    def text(self) -> str:
        return self.getvalue().decode("utf-8", errors="replace")


class TerminalDestination:
    """Byte writer over a text stream such as `sys.stdout`."""

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def write(self, chunk: bytes) -> int:
        binary = getattr(self.stream, "buffer", None)
        if binary is not None:
            self.stream.flush()
            binary.write(chunk)
            binary.flush()
        else:
            self.stream.write(self._decoder.decode(chunk))
            self.stream.flush()
        return len(chunk)

    def finish(self) -> None:
        # Emit whatever partial character is left once the stream hits EOF.
        tail = self._decoder.decode(b"", final=True)
        if tail:
            self.stream.write(tail)
            self.stream.flush()


class TeeSink:
    """Writes every chunk to all destinations, in order."""

    def __init__(self, *destinations: ByteDestination) -> None:
        self.destinations = destinations

    def write(self, chunk: bytes) -> int:
        for destination in self.destinations:
            destination.write(chunk)
        return len(chunk)

    def finish(self) -> None:
        for destination in self.destinations:
            finish = getattr(destination, "finish", None)
            if finish is not None:
                finish()


def start_forwarding(source: IO[bytes], sink: TeeSink, *, name: str) -> threading.Thread:
    """Copy `source` into `sink` on a daemon thread until EOF."""

    thread = threading.Thread(target=_pump, args=(source, sink), name=name, daemon=True)
    thread.start()
    return thread


def _pump(source: IO[bytes], sink: TeeSink) -> None:
    read = getattr(source, "read1", source.read)
    try:
        for chunk in iter(lambda: read(_CHUNK_SIZE), b""):
            sink.write(chunk)
    finally:
        source.close()
        sink.finish()
