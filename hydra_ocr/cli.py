import argparse
import getpass
import logging
import os
import sys

from dotenv import load_dotenv

from .config.settings import get_settings
from .hydra_client.client import HydraClient
from .hydra_client.types import RecognizeConfig
from .logging import setup_logging
from .output import write_rows
from .utils.error_taxonomy import (
    ERROR_FRIENDLY_MESSAGES,
    HydraError,
    build_error_details,
    classify_error,
)

logger = logging.getLogger(__name__)

API_KEY_TEMPLATE = "xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx"


def _jpg_quality(value: str) -> int:
    try:
        quality = int(value)
    except ValueError:
        quality = 0
    if not 1 <= quality <= 100:
        raise argparse.ArgumentTypeError(
            "--jpg-quality is supposed to be followed by a number between 1 and 100 inclusive."
        )
    return quality


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hydra",
        description="Recognize text in images and documents with the Hydra API.",
        epilog=(
            "examples:\n"
            "  hydra -d my-data-source receipt_1.jpg receipt_2.pdf --prompt-api-key invoice.png\n"
            "  hydra -d my-data-source invoice.pdf receipt.png --api-key-file my_api_key.txt"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    key_group = parser.add_mutually_exclusive_group()
    key_group.add_argument(
        "--prompt-api-key", action="store_true", help="Read the API key from the terminal"
    )
    key_group.add_argument(
        "--api-key-file", help="File containing the API key on a single line"
    )
    parser.add_argument("-d", "--data-source-id", required=True)
    parser.add_argument("-o", "--output", help="Output file path (default: stdout)")
    parser.add_argument(
        "-f",
        "--do-faster",
        action="store_true",
        help="Process files in half the time at the risk of inaccurate results",
    )
    parser.add_argument(
        "-j",
        "--return-jpgs",
        action="store_true",
        help="Return cropped images in JPG format (PNG is default)",
    )
    parser.add_argument(
        "-q", "--jpg-quality", type=_jpg_quality, help="JPG quality, 1-100 (default 85)"
    )
    parser.add_argument("--env-file", default=".env", help="Path to .env file")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("files", nargs="+", metavar="FILE")
    return parser


def read_api_key(args: argparse.Namespace) -> str:
    if args.prompt_api_key:
        raw = getpass.getpass("enter your Hydra API key: ")
    elif args.api_key_file:
        with open(args.api_key_file, "r", encoding="utf-8") as f:
            raw = f.read()
    else:
        raw = get_settings().api_key or ""
        if not raw:
            raise ValueError(
                "You must specify either --prompt-api-key or --api-key-file <filename>, "
                "or set HYDRA_API_KEY."
            )

    api_key = raw.strip()
    if len(api_key) != len(API_KEY_TEMPLATE):
        message = (
            "the provided API key is not valid\n"
            f"API keys should look like {API_KEY_TEMPLATE}"
        )
        if args.api_key_file:
            message += f"\nyou specified to read the API key from the file {args.api_key_file}"
        raise ValueError(message)
    return api_key


def report_error(error: Exception) -> None:
    code = classify_error(error)
    print(f"error: {ERROR_FRIENDLY_MESSAGES[code]}\n{error}", file=sys.stderr)
    logger.debug(build_error_details(error), extra={"stage": "cli"})


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    if args.jpg_quality is not None and not args.return_jpgs:
        parser.error("You must specify --return-jpgs (-j) if you use --jpg-quality (-q).")

    if os.path.exists(args.env_file):
        load_dotenv(dotenv_path=args.env_file)

    setup_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        api_key = read_api_key(args)
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    config = RecognizeConfig(
        do_faster=args.do_faster,
        return_jpgs=args.return_jpgs,
        jpg_quality=args.jpg_quality,
    )
    client = HydraClient(api_key)

    if args.output:
        print("Uploading files...")

    try:
        channel = client.recognize_cfg(config, args.data_source_id, *args.files)
    except (HydraError, OSError) as e:
        report_error(e)
        return 1

    total = len(args.files)

    def report(done: int) -> None:
        print(f"{done} out of {total} input files are complete")

    try:
        if args.output:
            with open(args.output, "w", encoding="utf-8") as of:
                write_rows(channel, of, on_row=report)
        else:
            write_rows(channel, sys.stdout)
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
