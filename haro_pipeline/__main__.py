"""
Debug command: parse one HARO email file and print the result as JSON.

    python -m haro_pipeline email.html --subject "HARO: Technology Queries"
    python -m haro_pipeline forwarded.eml --console-logs --log-level DEBUG

No storage access.
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from haro_pipeline.config import get_settings
from haro_pipeline.logging import setup_logging
from haro_pipeline.services.email_parser import parse_haro_email, parse_result_to_dict
from haro_pipeline.services.eml_reader import read_eml


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="haro_pipeline",
        description="Parse a HARO email (raw body or .eml) and print the extracted queries.",
    )
    parser.add_argument("file", help="Path to a raw HTML/text body or a .eml file.")
    parser.add_argument("--subject", help="Email subject; read from the file for .eml input.")
    parser.add_argument("--email-id", default="debug", help="Identifier copied into every query.")
    parser.add_argument("--log-level", help="Log level, e.g. DEBUG (default: LOG_LEVEL).")
    parser.add_argument("--console-logs", action="store_true", help="Human-readable logs instead of JSON.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(
        json=settings.log_json and not args.console_logs,
        level=args.log_level or settings.log_level,
    )

    path = Path(args.file)
    now = datetime.now(timezone.utc)

    if path.suffix.lower() == ".eml":
        content = read_eml(path.read_bytes())
        body = content.body
        subject = args.subject or content.subject
        received_at = content.date or now
    else:
        body = path.read_text(encoding="utf-8", errors="replace")
        subject = args.subject or ""
        received_at = now

    result = parse_haro_email(body, args.email_id, subject, received_at, now=now)
    print(json.dumps(parse_result_to_dict(result), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
