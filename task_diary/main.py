#!/usr/bin/env python
"""
Task Diary – CLI entry point.

Usage:
    # Build the document model from a file, a sheet link, or the saved state
    python -m task_diary.main build [tasks.xlsx | --link URL] [--details details.yaml]
                                    [--font Times-Roman] [--layout compact]
                                    [--format json|markdown|xml] [--output out.json]

    # Replace the task text shown on a content page (1-based)
    python -m task_diary.main edit <page> <text>

    # Write a blank daily-task workbook for an internship
    python -m task_diary.main template 2025-01-06 2025-03-28 [--output tasks.xlsx]
"""

import argparse
import datetime
import logging
import os
import sys

import yaml

from task_diary.config import load_config
from task_diary.controller import DiaryController
from task_diary.formatters import to_json, to_markdown, to_xml
from task_diary.store import JsonFileStore, MemoryStore
from task_diary.template import generate_task_template

FORMATTERS = {"json": to_json, "markdown": to_markdown, "xml": to_xml}

logger = logging.getLogger(__name__)


def setup_logging(level_str: str = "INFO"):
    """Configure logging."""
    level = getattr(logging, level_str.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a date as YYYY-MM-DD, got '{value}'")


def _make_controller(args, config):
    store = MemoryStore() if args.no_state else JsonFileStore(config["state_file"])
    return DiaryController(store=store, config=config)


def cmd_build(args, config) -> int:
    controller = _make_controller(args, config)

    if args.details:
        if not os.path.exists(args.details):
            logger.error(f"Details file not found: {args.details}")
            return 1
        with open(args.details, "r") as f:
            controller.set_user_details(yaml.safe_load(f) or {})

    if args.link:
        ok = controller.fetch_link(args.link)
    elif args.tasks_file:
        if not os.path.exists(args.tasks_file):
            logger.error(f"File not found: {args.tasks_file}")
            return 1
        ok = controller.upload_file(args.tasks_file)
    else:
        ok = bool(controller.records)
        if not ok:
            controller.error = "No tasks loaded. Pass a file or --link."
    if not ok:
        logger.error(controller.error)
        return 1

    if args.font:
        controller.set_font(args.font)
    if args.layout:
        controller.set_layout(args.layout)

    document = controller.document()
    text = FORMATTERS[args.format](document)

    classification = controller.classification
    logger.info(f"Pages: {document.total_pages} "
                f"({len(classification.content)} content, "
                f"{len(classification.holidays)} holidays, "
                f"{len(classification.leaves)} leaves)")
    logger.info(f"Suggested file name: {document.filename}")

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Wrote {args.output}")
    else:
        print(text)
    return 0


def cmd_edit(args, config) -> int:
    controller = _make_controller(args, config)
    if not controller.records:
        logger.error("No saved tasks to edit. Run 'build' with a file or link first.")
        return 1
    # page 1 is the cover, so content page N is display index N - 2
    if not controller.edit_content_page(args.page - 2, args.text):
        logger.error(f"Page {args.page} is not a content page.")
        return 1
    logger.info(f"Document now has {controller.document().total_pages} pages")
    return 0


def cmd_template(args, config) -> int:
    try:
        generate_task_template(args.start, args.end, args.output,
                               skip_weekends=args.skip_weekends)
    except ValueError as e:
        logger.error(str(e))
        return 1
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Turn daily task sheets into an internship diary document"
    )
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config YAML file (default: config.yaml)")
    parser.add_argument("--log-level", default=None,
                        help="Logging level: DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--no-state", action="store_true",
                        help="Do not read or write the saved state file")
    sub = parser.add_subparsers(dest="command", required=True)

    # ---- build ----
    p_build = sub.add_parser("build", help="Build the diary document model")
    p_build.add_argument("tasks_file", nargs="?", default=None,
                         help="Task sheet (.csv, .xls or .xlsx)")
    p_build.add_argument("--link", default=None,
                         help="Published Google Sheets CSV link")
    p_build.add_argument("--details", default=None,
                         help="YAML file with the intern's details")
    p_build.add_argument("--font", default=None,
                         help="Font family: Helvetica, Times-Roman or Courier")
    p_build.add_argument("--layout", default=None,
                         help="Layout preset: default or compact")
    p_build.add_argument("--format", choices=sorted(FORMATTERS), default="json",
                         help="Output format (default: json)")
    p_build.add_argument("--output", default=None,
                         help="Output path (default: stdout)")

    # ---- edit ----
    p_edit = sub.add_parser("edit", help="Edit the task shown on a content page")
    p_edit.add_argument("page", type=int, help="Page number as shown in the document")
    p_edit.add_argument("text", help="New task text (Markdown)")

    # ---- template ----
    p_tpl = sub.add_parser("template", help="Write a blank daily-task workbook")
    p_tpl.add_argument("start", type=_parse_date, help="First day (YYYY-MM-DD)")
    p_tpl.add_argument("end", type=_parse_date, help="Last day (YYYY-MM-DD)")
    p_tpl.add_argument("--output", default=os.path.join("output", "tasks.xlsx"),
                       help="Output path (default: ./output/tasks.xlsx)")
    p_tpl.add_argument("--skip-weekends", action="store_true",
                       help="Leave Saturdays and Sundays out")

    args = parser.parse_args(argv)
    config = load_config(args.config)
    setup_logging(args.log_level or config["log_level"])

    commands = {"build": cmd_build, "edit": cmd_edit, "template": cmd_template}
    sys.exit(commands[args.command](args, config))


if __name__ == "__main__":
    main()
