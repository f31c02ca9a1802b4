from __future__ import annotations

import logging
import unittest

from tickettrack.log_buffer import SERVICE_LOGGERS, BufferHandler, install_buffer_handler


class BufferHandlerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.handler = BufferHandler(maxlen=3)
        self.handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger = logging.getLogger("tickettrack.tests.buffer")
        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG)
        self.logger.addHandler(self.handler)

    def tearDown(self) -> None:
        self.logger.removeHandler(self.handler)

    def test_keeps_newest_entries_first(self) -> None:
        for index in range(5):
            self.logger.info("refresh %s", index)

        messages = [entry["message"] for entry in self.handler.entries(limit=10)]

        self.assertEqual(["refresh 4", "refresh 3", "refresh 2"], messages)

    def test_filters_by_minimum_level(self) -> None:
        self.logger.info("scrape done")
        self.logger.warning("scrape timed out")
        self.logger.error("store fault")

        entries = self.handler.entries(limit=10, min_level=logging.WARNING)

        self.assertEqual(["ERROR", "WARNING"], [entry["level"] for entry in entries])
        self.assertEqual("tickettrack.tests.buffer", entries[0]["logger"])


class InstallBufferHandlerTests(unittest.TestCase):
    def test_attaches_once_to_service_loggers(self) -> None:
        handler = install_buffer_handler()
        install_buffer_handler()

        for name in SERVICE_LOGGERS:
            self.assertEqual(1, logging.getLogger(name).handlers.count(handler))


if __name__ == "__main__":
    unittest.main()
