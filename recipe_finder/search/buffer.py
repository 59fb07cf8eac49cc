"""Growable, memory-aware response buffer."""

from __future__ import annotations

import sys
from collections.abc import Callable

import psutil
from loguru import logger

KIB = 1024
MIB = 1024 * KIB

MAX_DOWNLOAD_SIZE = 32 * MIB

DEFAULT_CAPACITY = 128 * KIB
LOW_CAPACITY = 16 * KIB
MID_CAPACITY = 64 * KIB
HIGH_CAPACITY = 256 * KIB

_LOW_RAM_LIMIT = 128 * MIB
_MID_RAM_LIMIT = 512 * MIB


def detect_initial_capacity() -> int:
    """Pick the starting buffer capacity from installed RAM."""
    try:
        total_ram = int(psutil.virtual_memory().total)
    except (OSError, RuntimeError, AttributeError) as e:
        logger.debug("Unable to detect system memory ({}), using default buffer size", e)
        return DEFAULT_CAPACITY

    if total_ram <= 0:
        return DEFAULT_CAPACITY
    if total_ram < _LOW_RAM_LIMIT:
        return LOW_CAPACITY
    if total_ram < _MID_RAM_LIMIT:
        return MID_CAPACITY
    return HIGH_CAPACITY


def available_memory() -> int:
    """Bytes of RAM currently available; 0 when it cannot be read."""
    try:
        return int(psutil.virtual_memory().available)
    except (OSError, RuntimeError, AttributeError) as e:
        logger.warning("Failed to read available memory: {}", e)
        return 0


class GrowableBuffer:
    """
    Accumulates streamed response bytes into one NUL-terminated block.

    Capacity doubles on demand up to MAX_DOWNLOAD_SIZE. Before every grow the
    available system memory is checked against the new capacity. Any refused
    write returns 0 and leaves the buffer unchanged.
    """

    def __init__(
        self,
        initial_capacity: int | None = None,
        *,
        max_size: int = MAX_DOWNLOAD_SIZE,
        free_memory: Callable[[], int] = available_memory,
        label: str = "",
    ):
        self.initial_capacity = initial_capacity or detect_initial_capacity()
        self.max_size = max_size
        self.label = label
        self._free_memory = free_memory
        self._data = bytearray()
        self.size = 0

    @property
    def capacity(self) -> int:
        return len(self._data)

    def write(self, chunk: bytes) -> int:
        """Append a chunk; returns len(chunk) on success and 0 when refused."""
        length = len(chunk)
        if length > sys.maxsize - self.size - 1:
            logger.warning("Buffer size overflow detected, incoming chunk too large")
            return 0

        required = self.size + length + 1
        if required > self.max_size:
            logger.warning(
                "Exceeded maximum allowed download size ({} MB)",
                self.max_size // MIB,
            )
            return 0

        if required > self.capacity and not self._grow(required):
            return 0

        self._data[self.size:self.size + length] = chunk
        self.size += length
        self._data[self.size] = 0
        return length

    def getvalue(self) -> bytes:
        """The valid region, without the terminator."""
        return bytes(self._data[:self.size])

    def text(self, encoding: str = "utf-8") -> str:
        return self.getvalue().decode(encoding, errors="replace")

    def clear(self) -> None:
        self._data = bytearray()
        self.size = 0

    def _grow(self, required: int) -> bool:
        old_capacity = self.capacity
        new_capacity = old_capacity or self.initial_capacity
        while new_capacity < required:
            if new_capacity > self.max_size // 2:
                new_capacity = self.max_size
                break
            new_capacity *= 2
        new_capacity = min(new_capacity, self.max_size)

        free = self._free_memory()
        if free < new_capacity:
            logger.warning(
                "Insufficient free memory to expand buffer to {} bytes (free memory: {} bytes)",
                new_capacity,
                free,
            )
            return False

        try:
            self._data.extend(bytes(new_capacity - old_capacity))
        except MemoryError:
            logger.warning("Failed to grow buffer to {} bytes", new_capacity)
            return False

        logger.debug(
            "Buffer grown for {}: {:.1f} KB -> {:.1f} KB (needed {:.1f} KB, free {:.2f} MB)",
            self.label or "(unknown)",
            old_capacity / KIB,
            new_capacity / KIB,
            required / KIB,
            free / MIB,
        )
        return True
