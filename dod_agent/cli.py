"""
dod-gen: generate a Definition of Done from the command line.

Examples:
    dod-gen --ticket-url https://example.atlassian.net/browse/ABC-123
    dod-gen --ticket-json '{"key": "ABC-1", "summary": "Add login API"}' --type backend
    dod-gen --ticket-url ABC-123 --mr-url https://gitlab.com/group/app/-/merge_requests/7 --post-comment
"""
import argparse
import json
import logging
import sys
from typing import List, Optional
from dotenv import load_dotenv
from dod_agent.agent.orchestrator import generate_dod_from_input
from dod_agent.config import ConfigError, ConfigLoader
from dod_agent.models.enums import OutputFormat
from dod_agent.services.input_parser import VALID_TYPES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dod-gen",
        description="Generate Definition-of-Done tables from Jira tickets and GitLab merge requests",
    )
    parser.add_argument("--ticket-url", help="Jira ticket URL or ticket key")
    parser.add_argument("--ticket-json", help="Jira ticket data as a JSON string")
    parser.add_argument("--mr-url", help="GitLab merge request URL")
    parser.add_argument("--type", choices=VALID_TYPES, help="Ticket type")
    parser.add_argument(
        "--post-comment",
        action="store_true",
        default=None,
        help="Post the generated DoD as a comment to the Jira ticket",
    )
    parser.add_argument(
        "--jira-format",
        action="store_true",
        help="Print Jira wiki markup instead of markdown",
    )
    parser.add_argument("--config", help="Directory to start searching for .dodrc.json")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader().resolve_config(config_dir=args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        stream=sys.stderr,
    )

    if not args.ticket_url and not args.ticket_json:
        print("Error: Either --ticket-url or --ticket-json must be provided", file=sys.stderr)
        return 1

    dod_input = {
        "jira_token": config.jira_api_token,
        "gitlab_token": config.gitlab_token,
        "post_comment": args.post_comment if args.post_comment is not None else config.default_post_comment,
        "mr_url": args.mr_url,
        "type": args.type,
        "output_format": OutputFormat.JIRA if args.jira_format else OutputFormat.MARKDOWN,
    }
    if args.ticket_url:
        dod_input["ticket_url"] = args.ticket_url
    else:
        try:
            dod_input["ticket_json"] = json.loads(args.ticket_json)
        except json.JSONDecodeError:
            print("Error: Invalid JSON provided for --ticket-json", file=sys.stderr)
            return 1

    result = generate_dod_from_input(dod_input, config)

    output = result.jira_markup if args.jira_format and result.jira_markup else result.dod
    if output:
        print(output)

    if result.errors:
        print("\nWarnings/Errors:", file=sys.stderr)
        for error in result.errors:
            print(f"  - {error}", file=sys.stderr)

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
