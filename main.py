# main.py
import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from reflow.config import ReflowConfig, load_config
from reflow.html_builder import HTMLBuilder
from reflow.page_parser import BlockClassifier
from reflow.pdf_loader import DecodeError, open_loader
from ui.progress import LoggingProgress, ProgressCallback
from ui.server import serve_forever

logger = logging.getLogger("pdf_reflow")


class PDFToHTMLPipeline:
    def __init__(
        self,
        pdf_path: Path,
        output_path: Path,
        config: Optional[ReflowConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self._pdf_path = Path(pdf_path)
        self._output_path = Path(output_path)
        self._config = config or ReflowConfig()
        self._loader = open_loader(self._pdf_path)
        self._classifier = BlockClassifier(self._config)
        self._progress = progress_callback

    def run(self) -> Path:
        """
        Convert one document and write its HTML file.

        Raises:
            DecodeError: the document could not be decoded; nothing is written
            OSError: the output file could not be written
        """
        name = self._pdf_path.name
        # the whole document is decoded before the first page is classified
        raw_pages = self._loader.load()
        total_pages = len(raw_pages)

        if self._progress:
            self._progress.on_start(name, total_pages)

        builder = HTMLBuilder(title=self._config.document_title)
        for idx, fragments in enumerate(raw_pages, start=1):
            page = self._classifier.parse(idx, fragments)
            builder.add_page(page)

            if self._progress:
                self._progress.on_page_processed(name, idx)

        builder.build(self._output_path)

        if self._progress:
            self._progress.on_finish(name, str(self._output_path))
        return self._output_path


@dataclass
class BatchResult:
    converted: Dict[Path, Path] = field(default_factory=dict)
    failed: Dict[Path, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def output_path_for(input_path: Path, output_dir: Path, suffix: str = ".html") -> Path:
    """``report.pdf`` -> ``<output_dir>/report.pdf.html``"""
    return Path(output_dir) / f"{Path(input_path).name}{suffix}"


def list_documents(input_dir: Path, extensions: Iterable[str] = (".pdf",)) -> List[Path]:
    """
    List the input documents of a directory, sorted by name.

    An unreadable directory raises ``OSError``; there is nothing to isolate
    per document before the listing succeeds.
    """
    extensions = tuple(ext.lower() for ext in extensions)
    return sorted(
        path for path in Path(input_dir).iterdir()
        if path.is_file() and path.suffix.lower() in extensions
    )


def convert_directory(
    input_dir: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    config: Optional[ReflowConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> BatchResult:
    config = config or ReflowConfig()
    input_dir = Path(input_dir or config.input_dir)
    output_dir = Path(output_dir or config.output_dir)

    documents = list_documents(input_dir, config.document_extensions)
    output_dir.mkdir(parents=True, exist_ok=True)

    result = BatchResult()
    if not documents:
        logger.warning("No documents found in %s", input_dir)
        return result
    if progress_callback:
        progress_callback.update(f"Found {len(documents)} document(s) in {input_dir}")

    def convert(document: Path) -> Path:
        pipeline = PDFToHTMLPipeline(
            pdf_path=document,
            output_path=output_path_for(document, output_dir, config.output_suffix),
            config=config,
            progress_callback=progress_callback,
        )
        return pipeline.run()

    # one task per document; failures stay with their document
    with ThreadPoolExecutor(max_workers=min(config.workers, len(documents))) as executor:
        future_to_document = {executor.submit(convert, doc): doc for doc in documents}
        for future in as_completed(future_to_document):
            document = future_to_document[future]
            try:
                result.converted[document] = future.result()
            except (DecodeError, OSError) as e:
                logger.error("Failed to convert %s: %s", document.name, e)
                _record_failure(result, document, e, progress_callback)
            except Exception as e:
                logger.exception("Unexpected error converting %s", document.name)
                _record_failure(result, document, e, progress_callback)

    return result


def _record_failure(
    result: BatchResult,
    document: Path,
    error: BaseException,
    progress_callback: Optional[ProgressCallback],
) -> None:
    result.failed[document] = error
    if progress_callback:
        progress_callback.on_error(document.name, error)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert PDFs into structured HTML (headings, paragraphs, lists)"
    )
    parser.add_argument('--input', '-i', default=None, help="Input folder containing PDFs (default: ./input)")
    parser.add_argument('--output', '-o', default=None, help="Output folder for HTML (default: ./output)")
    parser.add_argument('--config', '-c', default=None, help="YAML configuration file")
    parser.add_argument('--workers', type=int, default=None, help="Documents converted concurrently")
    parser.add_argument('--serve', action='store_true', help="Serve the output folder after converting")
    parser.add_argument('--host', default=None, help="Static server host (default: 0.0.0.0)")
    parser.add_argument('--port', type=int, default=None, help="Static server port (default: 3000)")
    parser.add_argument('--verbose', '-v', action='store_true', help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config).with_overrides(
            input_dir=args.input,
            output_dir=args.output,
            workers=args.workers,
            host=args.host,
            port=args.port,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    try:
        result = convert_directory(config=config, progress_callback=LoggingProgress())
    except OSError as e:
        logger.error("Cannot start batch in %s: %s", config.input_dir, e)
        return 2

    logger.info(
        "Converted %d document(s), %d failed", len(result.converted), len(result.failed)
    )

    if args.serve:
        serve_forever(Path(config.output_dir), config.host, config.port)

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
