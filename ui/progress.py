# ui/progress.py
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ProgressCallback(ABC):
    """
    Receives per-document progress from the pipeline.

    In a batch run the callbacks of different documents may arrive from
    different worker threads.
    """

    @abstractmethod
    def on_start(self, document: str, total_pages: int) -> None:
        pass

    @abstractmethod
    def on_page_processed(self, document: str, page_number: int) -> None:
        pass

    @abstractmethod
    def on_finish(self, document: str, output_path: str) -> None:
        pass

    def on_error(self, document: str, error: BaseException) -> None:
        pass

    def update(self, message: str) -> None:
        pass


class LoggingProgress(ProgressCallback):
    def on_start(self, document: str, total_pages: int) -> None:
        logger.info("Processing %s (%d pages)...", document, total_pages)

    def on_page_processed(self, document: str, page_number: int) -> None:
        logger.debug("%s: page %d done", document, page_number)

    def on_finish(self, document: str, output_path: str) -> None:
        logger.info("Finished writing %s -> %s", document, output_path)

    def update(self, message: str) -> None:
        logger.info(message)
