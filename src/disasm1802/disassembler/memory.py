"""
Memory Image
============

The CDP1802 addresses 64 KiB. The image keeps a full-size buffer so
any address can be read directly; only [start, end) holds loaded
bytes, everything else reads as zero.
"""

from dataclasses import dataclass, field


MEMORY_SIZE = 0x10000


@dataclass
class MemoryImage:
    """
    The loaded program bytes.

    Attributes:
        data: 64 KiB buffer indexed by address
        start: Lowest loaded address
        end: Address just past the highest loaded byte
    """
    data: bytearray = field(default_factory=lambda: bytearray(MEMORY_SIZE))
    start: int = 0
    end: int = 0

    @classmethod
    def from_bytes(cls, code: bytes, start: int = 0) -> "MemoryImage":
        """
        Build an image from a contiguous block of bytes.

        Args:
            code: Bytes to place in memory
            start: Address of the first byte

        Raises:
            ValueError: If the block does not fit below $10000
        """
        if start < 0 or start + len(code) > MEMORY_SIZE:
            raise ValueError(
                f"{len(code)} bytes at ${start:04X} do not fit in 64K"
            )
        image = cls(start=start, end=start + len(code))
        image.data[start:start + len(code)] = code
        return image

    def __getitem__(self, address: int) -> int:
        # Operand reads past $FFFF wrap like the CPU's program counter
        return self.data[address & 0xFFFF]

    def __len__(self) -> int:
        """Number of bytes in the loaded extent."""
        return self.end - self.start
