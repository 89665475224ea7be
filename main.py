"""
Script Storyboard Parser - CLI Interface

Parse comic scripts, screenplays, stage plays and TV scripts into
pages, panels, speech bubbles and characters.

Usage:
    python main.py script.txt [more...] [--dialect DIALECT] [--json] [--preview] [-o OUTPUT_DIR]
"""
import argparse
import json
import os
import sys
from pathlib import Path

from tqdm import tqdm

from models import Dialect
from pdf_extractor import load_script_text
from script_parser import parse_script
from script_sync import get_source_page_for_panel
from summary import get_script_summary, write_summary

DEFAULT_DIALECT = os.environ.get("STORYBOARD_DIALECT", Dialect.COMIC.value)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Parse scripts into storyboard pages, panels and bubbles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py issue1.md                          # Comic script with defaults
    python main.py pilot.pdf --dialect tv-series      # TV script from PDF
    python main.py hamlet.txt --dialect stage-play --preview
    python main.py a.fountain b.fountain -o parsed/   # Several scripts at once
        """
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Script files (.pdf, .txt, .md, .fountain)"
    )
    parser.add_argument(
        "-d", "--dialect",
        choices=[d.value for d in Dialect],
        default=DEFAULT_DIALECT,
        help=f"Script dialect (default: {DEFAULT_DIALECT}, or $STORYBOARD_DIALECT)"
    )
    parser.add_argument(
        "-o", "--output-dir",
        help="Output directory (default: <input>_parsed/ next to each input)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the parse result as JSON instead of a summary"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the summary without writing files"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed output"
    )

    args = parser.parse_args(argv)

    # Validate input files
    input_paths = [Path(p) for p in args.inputs]
    for input_path in input_paths:
        if not input_path.exists():
            print(f"Error: File not found: {input_path}")
            sys.exit(1)

    failures = 0
    for input_path in tqdm(input_paths, desc="Parsing", disable=not sys.stdout.isatty() or len(input_paths) == 1):
        print(f"\nProcessing: {input_path.name} ({args.dialect})")

        try:
            text, source_pages = load_script_text(str(input_path))
        except (ValueError, RuntimeError) as e:
            print(f"Error: {e}")
            failures += 1
            continue

        result = parse_script(text, args.dialect)
        if not result.success:
            failures += 1

        if args.json:
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(f"\n{'='*50}")
            print(get_script_summary(result))
            print(f"{'='*50}")

        if args.verbose:
            for page in result.pages:
                print(f"\n  Page {page.page_number}: {len(page.panels)} panels")
                for panel in page.panels[:3]:
                    description = panel.description[:55] + "..." if len(panel.description) > 55 else panel.description
                    print(f"    - {panel.panel_number}. {description}")
                if len(page.panels) > 3:
                    print(f"    ... and {len(page.panels) - 3} more panels")

        if args.preview:
            continue

        # Determine output directory
        if args.output_dir:
            output_dir = Path(args.output_dir) / input_path.stem
        else:
            output_dir = input_path.parent / f"{input_path.stem}_parsed"
        output_dir.mkdir(parents=True, exist_ok=True)

        data = result.to_dict()
        data["source_pages"] = [
            [get_source_page_for_panel(source_pages, panel) for panel in page.panels]
            for page in result.pages
        ]
        json_path = output_dir / f"{input_path.stem}_parsed.json"
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        summary_path = write_summary(result, str(output_dir), str(input_path))
        print(f"\nCreated: {json_path}")
        print(f"Summary: {summary_path}")

    if args.preview:
        print("\nTo create files, run without --preview flag")
    print("\nDone!")
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
