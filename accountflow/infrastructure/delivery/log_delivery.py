import logging

from ...application.ports.code_delivery import CodeDelivery


class LoggingCodeDelivery(CodeDelivery):
    """Simulated delivery: the code is written to the log instead of sent by SMS."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def deliver(self, phone: str, code: str) -> None:
        self._logger.info(f"Verification code for {phone}: {code}")
