"""Main entry point for hanzilens.

This module is executed when running:
- python -m hanzilens
- hanzilens (via pyproject.toml entry point)
"""

import argparse
import sys

from . import log
from .backends.base import DictionaryError, Language, OCREngineError
from .config import Config

logger = log.get_logger()


def _parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="hanzilens",
        description="OCR lens for reading Chinese text on screen",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config file (default: config.ini)",
    )
    parser.add_argument(
        "--language", "-l",
        type=str,
        choices=[language.value for language in Language],
        default=None,
        help="OCR language variant (overrides config)",
    )
    parser.add_argument(
        "--image", "-i",
        type=str,
        default=None,
        help="Recognize an image file, print the words and exit (no GUI)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging and save preprocessing stages",
    )
    return parser.parse_args(argv)


def run_headless(config: Config, image_path: str, debug: bool = False) -> int:
    """Run one pass over an image file and print the results.

    Returns:
        Exit code.
    """
    from .capture.convert import load_image
    from .pipeline import create_pipeline
    from .segment import remove_whitespace

    pipeline = create_pipeline(config, debug)
    try:
        pipeline.load()
    except (OCREngineError, DictionaryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        frame = load_image(image_path)
    except OSError as e:
        print(f"Error: cannot read image '{image_path}': {e}", file=sys.stderr)
        return 1

    try:
        result = pipeline.process(frame)
    except (OCREngineError, RuntimeError, OSError, ValueError) as e:
        # pytesseract.TesseractError is a RuntimeError
        logger.error("OCR error", err=str(e), image=image_path)
        print(f"Error: OCR failed on '{image_path}': {e}", file=sys.stderr)
        return 1

    words = result.words

    print(f"Final OCR - {remove_whitespace(result.text)}")
    print(f"{len(words)} tokens")
    for word in words:
        definitions = [entry.definitions for entry in word.entries if entry.definitions]
        if not definitions:
            print(f"{word.text} - []")
        for entry_definitions in definitions:
            print(f"{word.text} - {entry_definitions}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parse_arguments(argv)
    # Headless results go to stdout, keep log lines out of them
    log.configure(debug=args.debug, stream=sys.stderr if args.image else None)

    config = Config.load(args.config)
    if args.language:
        config.language = Language.from_config(args.language)

    if args.image:
        return run_headless(config, args.image, debug=args.debug)

    from .gui import run

    return run(config, debug=args.debug)


if __name__ == "__main__":
    sys.exit(main())
