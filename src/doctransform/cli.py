"""Command-line interface for DocTransform."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import uvicorn

from .config import UserPreferences, settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="DocTransform - fill Word and Excel templates from spreadsheet rows"
    )
    parser.add_argument(
        "--log-level", default=settings.log_level, help="Logging level (default: from LOG_LEVEL)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Placeholder preview command
    placeholders_parser = subparsers.add_parser(
        "placeholders", help="List the placeholders of a template"
    )
    placeholders_parser.add_argument("template", help="A .docx or .xlsx template")

    # Generate command
    generate_parser = subparsers.add_parser(
        "generate", help="Generate one document per data row"
    )
    generate_parser.add_argument("--word", help="Word (.docx) template")
    generate_parser.add_argument("--excel", help="Excel (.xlsx) template")
    generate_parser.add_argument(
        "--data", nargs="+", required=True, help="Data spreadsheet(s); several are merged"
    )
    generate_parser.add_argument("--key", help="Key column used to merge several tables")
    generate_parser.add_argument("--output", "-o", help="Output directory")
    generate_parser.add_argument("--name", help="Output file name template, e.g. '{row}_{name}'")

    args = parser.parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "placeholders":
        sys.exit(run_placeholders(args.template))
    elif args.command == "generate":
        sys.exit(asyncio.run(run_generate(args)))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "doctransform.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def run_placeholders(template: str) -> int:
    """Print the placeholders of a template; returns the exit code."""
    from .services import ExcelTemplateService, WordTemplateService

    path = Path(template)
    if path.suffix.lower() == ".docx":
        service = WordTemplateService()
    elif path.suffix.lower() in (".xlsx", ".xlsm"):
        service = ExcelTemplateService()
    else:
        print(f"Unsupported template type: {path.suffix}")
        return 1

    if not service.is_valid_template(path):
        print(f"Not a valid template: {path}")
        return 1

    placeholders = service.extract_placeholders(path)
    if not placeholders:
        print("No placeholders found.")
    for placeholder in placeholders:
        print(placeholder)
    return 0


async def run_generate(args) -> int:
    """Run a batch from the command line; returns the exit code."""
    from .generation import GenerationRequest
    from .generation.batch import BatchGenerator, select_rows
    from .tables import TableReadError, TableSet, read_all_sheets, read_first_sheet

    preferences = UserPreferences.load(settings.preferences_path)
    output_directory = args.output or preferences.last_output_directory
    file_name_template = args.name or preferences.file_name_template or settings.file_name_template

    table_set = TableSet()
    try:
        if len(args.data) == 1:
            table_set.add_table(read_first_sheet(args.data[0]))
        else:
            for path in args.data:
                for table in read_all_sheets(path):
                    table_set.add_table(table)
    except TableReadError as e:
        print(f"Failed to load data: {e}")
        return 1

    rows, error = select_rows(table_set, args.key)
    if error:
        print(error)
        return 1
    print(f"Loaded {table_set.total_row_count} row(s) from {len(table_set.tables)} table(s); "
          f"generating {len(rows)} document set(s)")

    def show_progress(value: int):
        print(f"\rProgress: {value:3d}%", end="", flush=True)

    generator = BatchGenerator(max_concurrent=settings.max_concurrent_documents)
    summary = await generator.generate(
        rows,
        GenerationRequest(
            output_directory=output_directory,
            word_template=args.word,
            excel_template=args.excel,
            file_name_template=file_name_template,
        ),
        progress=show_progress,
    )
    print()
    print(summary.message)
    if summary.last_error:
        print(f"Last error: {summary.last_error}")

    if summary.succeeded:
        preferences.last_output_directory = str(Path(output_directory).resolve())
        preferences.file_name_template = file_name_template
        preferences.save(settings.preferences_path)

    return 0 if summary.success else 1


if __name__ == "__main__":
    main()
