"""Command-line entry point for Sell My Images."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from sell_my_images.config.environment import load_environment_config
from sell_my_images.config.exceptions import ConfigurationError
from sell_my_images.config.loader import load_config, validate_config_file
from sell_my_images.config.models import AppConfig
from sell_my_images.config.options import DictOptionsStore
from sell_my_images.domain.models import Job
from sell_my_images.downloads import build_download_url, compute_expiry, generate_download_token
from sell_my_images.logging import get_logger
from sell_my_images.logging.config import configure_logging
from sell_my_images.notifications import DownloadNotificationService, NotificationError
from sell_my_images.pricing import CostCalculator, ImageInfo, PricingError
from sell_my_images.ui import UIRenderError, UploaderRenderer
from sell_my_images.utils.timestamps import format_expiry_date, format_timestamp

logger = get_logger(__name__, component="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sell-my-images",
        description="Sell My Images - download emails, pricing and uploader markup",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    preview = commands.add_parser("preview-email", help="Print the download email for a job file")
    preview.add_argument("job_file", type=Path, help="YAML or JSON job record")
    preview.add_argument("--html", action="store_true", help="Print the HTML body instead of text")

    send = commands.add_parser("send-email", help="Send the download email for a job file")
    send.add_argument("job_file", type=Path, help="YAML or JSON job record")

    quote = commands.add_parser("quote", help="Price an image at every resolution")
    quote.add_argument("width", type=int)
    quote.add_argument("height", type=int)

    commands.add_parser("issue-link", help="Generate a download token, URL and expiry")

    uploader = commands.add_parser("render-uploader", help="Print uploader block HTML")
    uploader.add_argument(
        "--attributes",
        default=None,
        help='Block attributes as JSON, e.g. \'{"title": "Get prints", "maxFileSize": 5}\'',
    )

    commands.add_parser("render-modal", help="Print purchase modal HTML")

    commands.add_parser("validate-config", help="Validate the configuration file and exit")

    return parser


def resolve_log_level(app_config: Optional[AppConfig], override: Optional[str]) -> str:
    """CLI flag > LOG_LEVEL environment variable > config file > INFO."""
    if override:
        return override
    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        return env_level.upper()
    if app_config is not None:
        return app_config.logging.level
    return "INFO"


def load_job_file(path: Path) -> Job:
    """Read a job record from a YAML (or JSON) file.

    Raises:
        ConfigurationError: If the file is missing or not a valid job
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Job file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in job file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Job file {path} must contain a mapping")

    try:
        return Job.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid job record in {path}",
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e


def _parse_attributes(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        attributes = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"--attributes is not valid JSON: {e}") from e
    if not isinstance(attributes, dict):
        raise ConfigurationError("--attributes must be a JSON object")
    return attributes


def run_command(args: argparse.Namespace, app_config: AppConfig) -> int:
    options = DictOptionsStore(app_config.options)

    if args.command == "preview-email":
        job = load_job_file(args.job_file)
        service = DownloadNotificationService()
        context = service.build_context(job, app_config, options)
        if args.html:
            print(service.composer.compose_html(context))
        else:
            composed = service.composer.compose(context)
            print(f"Subject: {composed.subject}\n")
            print(composed.message)
        return 0

    if args.command == "send-email":
        job = load_job_file(args.job_file)
        env_config = load_environment_config()
        result = DownloadNotificationService().send_download_notification(
            job, app_config, env_config, options
        )
        print(
            f"{result.job_id}: {result.status} "
            f"(attempts={result.attempts}, customer={result.customer_notified}, "
            f"admin={result.admin_notified})"
        )
        if result.error:
            print(f"  {result.error}")
        return 1 if result.status == "failed" else 0

    if args.command == "quote":
        calculator = CostCalculator(options)
        image = ImageInfo(width=args.width, height=args.height)
        print(f"Source: {image.label} (markup {calculator.markup_percentage:g}%)")
        for resolution, quote in calculator.quote_all(image).items():
            print(
                f"  {resolution.value}: {quote.price_label} - {quote.output_label}, "
                f"{quote.output_megapixels} MP, {quote.credits} credits"
            )
        return 0

    if args.command == "issue-link":
        token = generate_download_token()
        expires_at = compute_expiry(options)
        print(f"Token:   {token}")
        print(f"URL:     {build_download_url(app_config.site.url, token, app_config.api.base_path)}")
        print(f"Expires: {format_expiry_date(expires_at)} ({format_timestamp(expires_at)})")
        return 0

    renderer = UploaderRenderer(options=options, uploader_config=app_config.uploader)
    if args.command == "render-uploader":
        print(renderer.render_uploader_block(_parse_attributes(args.attributes)))
        return 0
    if args.command == "render-modal":
        print(renderer.render_purchase_modal())
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = build_parser().parse_args(argv)

    if args.command == "validate-config":
        path = args.config or Path("config.yaml")
        return 0 if validate_config_file(path) else 1

    try:
        app_config = load_config(args.config)
        configure_logging(
            level=resolve_log_level(app_config, args.log_level),
            format_type=app_config.logging.format,
            environment=os.getenv("ENVIRONMENT", "local"),
        )
        logger.debug(
            f"Running {args.command}",
            extra={"event": "cli.command", "command": args.command},
        )
        return run_command(args, app_config)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except (NotificationError, PricingError, UIRenderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.error(
            f"{args.command} failed: {e}",
            extra={"event": "cli.error", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
