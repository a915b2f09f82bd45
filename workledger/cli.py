#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Report CLI - Command-line interface for rendering work reports

Usage:
    workledger render layout.json entry.json -o out/report.pdf
    workledger render layout.json entry1.json entry2.json -o out/week.html
    workledger validate layout.json
    workledger templates --type PMC
    workledger export-template photo_focused -o photo_focused.json

Layout files may be a bare schema or a layout export envelope.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from config.logging_config import setup_logger
from config.settings import get_settings
from workledger.contracts import (
    ContractError,
    LayoutSchema,
    SchemaValidator,
    export_layout,
    import_layout,
    migrate_schema,
)
from workledger.layout.generator import ReportGenerator
from workledger.layout.templates import get_layout_template, list_layout_templates


def load_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_schema(path: str) -> LayoutSchema:
    """Schema from a bare schema file or an export envelope"""
    text = Path(path).read_text(encoding="utf-8")
    raw = json.loads(text)
    if isinstance(raw, dict) and "layout" in raw:
        return import_layout(text).schema
    return LayoutSchema.from_dict(migrate_schema(raw), page_defaults=get_settings().page_defaults())


def cmd_render(args) -> int:
    """Render one or more records"""
    schema = load_schema(args.layout)
    records: List[Dict[str, Any]] = [load_json(p) for p in args.records]
    generator = ReportGenerator(inline_html_images=args.inline_images)

    output = args.output
    if output is None:
        output = generator.default_output_path(records[0], args.format or "pdf")

    if len(records) == 1:
        path = generator.generate(schema, records[0], output, output_format=args.format)
    else:
        path = generator.generate_combined(schema, records, output, output_format=args.format)

    print(f"✅ Report written: {path}")
    return 0


def cmd_validate(args) -> int:
    """Validate a layout schema file"""
    raw = load_json(args.layout)
    if isinstance(raw, dict) and "layout" in raw:
        raw = (raw.get("layout") or {}).get("layout_schema")
    errors = SchemaValidator().validate(migrate_schema(raw) if isinstance(raw, dict) else raw)

    if errors:
        print(f"❌ {len(errors)} error(s) in {args.layout}:")
        for error in errors:
            print(f"   - {error}")
        return 1

    print(f"✅ {args.layout} is valid")
    return 0


def cmd_templates(args) -> int:
    """List built-in layout templates"""
    templates = list_layout_templates(args.type)
    if not templates:
        print("No templates found")
        return 0

    print(f"{'ID':<22} {'CATEGORY':<10} NAME")
    print("-" * 60)
    for template in templates:
        print(f"{template.id:<22} {template.category:<10} {template.name}")
    return 0


def cmd_export_template(args) -> int:
    """Write a built-in template as a layout export file"""
    template = get_layout_template(args.template_id)
    if template is None:
        print(f"❌ Unknown template: {args.template_id}")
        return 1

    text = export_layout(
        template.name,
        template.to_schema(),
        layout_description=template.description,
        compatible_template_types=template.compatible_types,
    )
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"✅ Template exported: {args.output}")
    else:
        print(text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workledger",
        description="Render work entry reports from layout schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging on the console')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Render command
    render_parser = subparsers.add_parser('render', help='Render records to PDF or HTML')
    render_parser.add_argument('layout', help='Layout schema or export file')
    render_parser.add_argument('records', nargs='+', help='Work entry record JSON file(s)')
    render_parser.add_argument('--output', '-o', help='Output file (default: <output_dir>/report_<id>.<format>)')
    render_parser.add_argument('--format', '-f', choices=['pdf', 'html'], help='Output format (default: from output suffix)')
    render_parser.add_argument('--inline-images', action='store_true', help='Embed images as data URIs in HTML output')

    # Validate command
    validate_parser = subparsers.add_parser('validate', help='Validate a layout schema')
    validate_parser.add_argument('layout', help='Layout schema or export file')

    # Templates command
    templates_parser = subparsers.add_parser('templates', help='List built-in layout templates')
    templates_parser.add_argument('--type', help='Only templates compatible with this contract type')

    # Export template command
    export_parser = subparsers.add_parser('export-template', help='Export a built-in template')
    export_parser.add_argument('template_id', help='Template ID')
    export_parser.add_argument('--output', '-o', help='Output file (default: stdout)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = get_settings()
    settings.ensure_dirs()
    logger = setup_logger('workledger', log_file=str(settings.logs_dir / 'workledger.log'))
    if args.verbose:
        for handler in logger.handlers:
            handler.setLevel('DEBUG')
        logger.setLevel('DEBUG')

    # Route to command handlers
    commands = {
        'render': cmd_render,
        'validate': cmd_validate,
        'templates': cmd_templates,
        'export-template': cmd_export_template,
    }

    try:
        return commands[args.command](args)
    except (ContractError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
