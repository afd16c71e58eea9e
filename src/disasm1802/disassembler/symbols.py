"""
Symbol Table
============

Maps addresses to label names. Names come from two places:

- the definition file, loaded before any decoding starts;
- the disassembler, which names every branch target it reaches that
  does not have a name yet ("L" followed by the four-digit address).

A name, once bound, never changes. The table refuses to rebind an
address, which is what lets user-supplied names take priority over
generated ones: the engine only adds a name after has_name() says the
address is free.
"""

from typing import Dict, Iterator, Set, Tuple

from disasm1802.errors import DuplicateSymbolError


class SymbolTable:
    """
    Address-to-name mapping, append-only.

    Attributes:
        label_prefix: Prefix used for generated names
    """

    def __init__(self, label_prefix: str = "L"):
        self.label_prefix = label_prefix
        self._names: Dict[int, str] = {}
        self._user: Set[int] = set()

    def has_name(self, address: int) -> bool:
        """Check if there is a name for an address."""
        return address in self._names

    def add(self, name: str, address: int, user: bool = False) -> None:
        """
        Bind a name to an address.

        Args:
            name: The label name
            address: The address to name
            user: True if the name comes from the definition file

        Raises:
            DuplicateSymbolError: If the address already has a name
        """
        if address in self._names:
            raise DuplicateSymbolError(address, self._names[address], name)
        self._names[address] = name
        if user:
            self._user.add(address)

    def get_name(self, address: int) -> str:
        """
        Get the name for an address.

        Returns the bound name if there is one, otherwise the generated
        form. The generated name is NOT bound; use add() or
        bind_target() for that.
        """
        name = self._names.get(address)
        if name is None:
            return f"{self.label_prefix}{address:04X}"
        return name

    def bind_target(self, address: int) -> str:
        """Return the name for a branch target, binding a generated one if needed."""
        name = self.get_name(address)
        if not self.has_name(address):
            self.add(name, address)
        return name

    def is_user_defined(self, address: int) -> bool:
        """True if the address was named by the definition file."""
        return address in self._user

    def items(self) -> Iterator[Tuple[int, str]]:
        """Iterate (address, name) pairs in address order."""
        return iter(sorted(self._names.items()))

    def __contains__(self, address: int) -> bool:
        return address in self._names

    def __len__(self) -> int:
        return len(self._names)
