"""
Command-line interface for primextract.

Runs the detector over a raw pixel buffer file and prints the extracted
primitives as JSON.
"""

import argparse
import sys

from primextract.config import load_config, save_default_config
from primextract.tracer import configure_from, configure_tracer, get_tracer


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="primextract: extract lines, circles and arcs from raw raster images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    
    # Detect command
    detect_parser = subparsers.add_parser("detect", help="Extract primitives from a raw buffer")
    detect_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Raw pixel buffer file (row-major, channel-interleaved uint8)",
    )
    detect_parser.add_argument("--width", type=int, required=True, help="Image width in pixels")
    detect_parser.add_argument("--height", type=int, required=True, help="Image height in pixels")
    detect_parser.add_argument(
        "--channels",
        type=int,
        default=1,
        help="Channels per pixel: 1, 3 (BGR) or 4 (BGRA)",
    )
    detect_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    detect_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    detect_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    detect_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    detect_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )
    
    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="primextract_config.yaml",
        help="Output path for config file",
    )
    
    args = parser.parse_args(argv)
    
    if args.command == "detect":
        return handle_detect(args)
    elif args.command == "init-config":
        return handle_init_config(args)
    
    parser.print_help()
    return 0


def handle_detect(args):
    """Handle the detect command."""
    # Command-line flags win over the config file
    if args.trace:
        configure_tracer(
            enabled=True,
            level=args.trace_level,
            file_path=args.trace_file,
            json_output=args.trace_json,
        )
    
    tracer = get_tracer()
    
    try:
        config = load_config(args.config)
        if not args.trace:
            configure_from(config.tracing)
        
        from primextract.pipeline import process_image
        
        with open(args.input, "rb") as f:
            buffer = f.read()
        
        with tracer.span("cli_detect", module="cli"):
            primitives = process_image(
                buffer, args.width, args.height, args.channels, config=config
            )
        
        print(primitives.model_dump_json(indent=2))
        return 0
        
    except Exception as e:
        tracer.event(f"Detection failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    
    finally:
        tracer.config.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
