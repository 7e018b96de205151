"""CLI entry point for the template flattener.

Imports layered documents into canonical templates saved as YAML, appends
slides to saved templates, and prints a template's layer stack.

Usage::

    # Import three PSDs as one template
    template-flattener import hero.psd story.psd feed.psd \\
        -o output/campaign.yaml --brand acme --category social

    # Append one more slide to a saved template
    template-flattener append square.psd --template output/campaign.yaml

    # Show slides and layers in render order
    template-flattener inspect output/campaign.yaml -v

    # Override import defaults
    template-flattener import hero.psd -o out.yaml --config settings.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

from template_flattener.config import ImportSettings, load_settings
from template_flattener.errors import ImportFailure
from template_flattener.processor.batch import BatchImporter
from template_flattener.schema.loader import load_template, save_template
from template_flattener.store.memory import MemoryTemplateStore


# ---------------------------------------------------------------------------
# Settings loading
# ---------------------------------------------------------------------------

def _load_settings(args) -> ImportSettings:
    """Load ImportSettings from --config, or the defaults."""
    config = getattr(args, "config", None)
    if not config:
        return ImportSettings()
    path = Path(config)
    if not path.exists():
        _error(f"Config file not found: {path}")
    try:
        return load_settings(path)
    except ValueError as exc:
        _error(str(exc))


def _check_input(path) -> Path:
    path = Path(path)
    if not path.exists():
        _error(f"Document not found: {path}")
    return path


def _load_template(path):
    """Load a saved template, exiting with an error if it is missing or malformed."""
    path = Path(path)
    if not path.exists():
        _error(f"Template file not found: {path}")
    try:
        return load_template(path)
    except ValueError as exc:
        _error(str(exc))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_import(args):
    """Import documents as a new template."""
    settings = _load_settings(args)
    files = [Path(p) for p in args.files]

    importer = BatchImporter(MemoryTemplateStore(), settings=settings)
    _info(f"Importing {len(files)} document(s)...")
    try:
        result = importer.import_template(
            files, name=args.name, brand=args.brand, category=args.category)
    except ImportFailure as exc:
        for outcome in exc.outcomes:
            _warn(str(outcome))
        _error(str(exc))

    for outcome in result.failed:
        _warn(f"Skipped {outcome}")
    _info(result.summary())

    save_template(result.template, args.output)
    _info(f"Written: {args.output}")


def cmd_append(args):
    """Append one document as a new slide of a saved template."""
    settings = _load_settings(args)
    template_path = Path(args.template)
    template = _load_template(template_path)
    document = _check_input(args.file)

    store = MemoryTemplateStore()
    template_id = store.put_template(template)

    importer = BatchImporter(store, settings=settings)
    try:
        outcome = importer.append_slide(template_id, document)
    except ImportFailure as exc:
        _error(str(exc))

    template.slides.append(outcome.slide)
    output = Path(args.output) if args.output else template_path
    save_template(template, output)
    _info(f"Appended '{outcome.slide.name}' as slide {outcome.order_index}")
    _info(f"Written: {output}")


def cmd_inspect(args):
    """Show template slides and their layer stacks."""
    template = _load_template(args.template)

    print(f"Template:  {template.name}")
    if template.brand:
        print(f"Brand:     {template.brand}")
    if template.category:
        print(f"Category:  {template.category}")
    print(f"Published: {'yes' if template.published else 'no'}")
    print(f"Slides:    {len(template.slides)}")
    print(f"Layers:    {template.layer_count()}")

    for slide in template.ordered_slides():
        print()
        print(f"  [{slide.order_index:2d}] {slide.name}"
              f" — {slide.width}x{slide.height}"
              f" — {len(slide.layers)} layer(s)")
        if args.verbose:
            for layer in slide.ordered_layers():
                g = layer.geometry
                print(f"       {layer.order_index:3d} {layer.kind.value:5s}"
                      f" {layer.name:30s} @ ({g.x}, {g.y}) {g.width}x{g.height}"
                      f" α={layer.opacity:.2f}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="template-flattener",
        description="Flatten layered design documents into editable templates.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- import ----
    imp = subparsers.add_parser(
        "import",
        help="Import one or more documents as a new template.",
    )
    imp.add_argument(
        "files",
        nargs="+",
        help="Layered documents (.psd), one slide each, in slide order.",
    )
    imp.add_argument(
        "-o", "--output",
        required=True,
        help="Output template YAML path.",
    )
    imp.add_argument(
        "--name",
        help="Template name (default: first document's base name).",
    )
    imp.add_argument("--brand", help="Brand tag.")
    imp.add_argument("--category", help="Category tag.")
    _add_config_arg(imp)
    imp.set_defaults(func=cmd_import)

    # ---- append ----
    app = subparsers.add_parser(
        "append",
        help="Append a document as a new slide of a saved template.",
    )
    app.add_argument("file", help="Layered document (.psd) to append.")
    app.add_argument(
        "--template",
        required=True,
        help="Template YAML to append to.",
    )
    app.add_argument(
        "-o", "--output",
        help="Write the result here instead of overwriting --template.",
    )
    _add_config_arg(app)
    app.set_defaults(func=cmd_append)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Show template slides and layers.",
    )
    insp.add_argument("template", help="Template YAML file.")
    insp.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="List every layer in render order.",
    )
    insp.set_defaults(func=cmd_inspect)

    return parser


def _add_config_arg(parser):
    parser.add_argument(
        "--config",
        help="YAML file overriding import defaults.",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
