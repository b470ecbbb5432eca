from typing import Optional, Protocol


class KeyValueStorage(Protocol):
    """Whole-value string storage keyed by name."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...
