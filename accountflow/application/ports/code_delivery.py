from typing import Protocol


class CodeDelivery(Protocol):
    def deliver(self, phone: str, code: str) -> None:
        ...
