from __future__ import annotations

import sys
from typing import BinaryIO, Optional


class IOBridge:
    """One byte in, one byte out. The engine talks to nothing else."""

    def read(self) -> Optional[int]:
        """Return the next input byte, or None at end of input."""
        raise NotImplementedError

    def write(self, value: int) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass


class StreamIO(IOBridge):
    def __init__(self, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None):
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer

    def read(self) -> Optional[int]:
        data = self.stdin.read(1)
        if not data:
            return None
        return data[0]

    def write(self, value: int) -> None:
        self.stdout.write(bytes((value & 0xFF,)))

    def flush(self) -> None:
        self.stdout.flush()


class BufferedIO(IOBridge):
    def __init__(self, input_data: bytes | str = b""):
        if isinstance(input_data, str):
            input_data = input_data.encode("utf-8")
        self.input_data = bytes(input_data)
        self.input_pos = 0
        self.output = bytearray()

    def read(self) -> Optional[int]:
        if self.input_pos >= len(self.input_data):
            return None
        value = self.input_data[self.input_pos]
        self.input_pos += 1
        return value

    def write(self, value: int) -> None:
        self.output.append(value & 0xFF)