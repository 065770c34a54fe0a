"""Tagged stack references resolved once at the entry boundary."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StackById:
    stack_id: int

    def __str__(self) -> str:
        return str(self.stack_id)


@dataclass(frozen=True)
class StackByName:
    name: str

    def __str__(self) -> str:
        return self.name


StackRef = StackById | StackByName
