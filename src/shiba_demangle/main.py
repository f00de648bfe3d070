import sys
import os
import argparse
from typing import List, Optional
from .parsing import DemangleError, parse, demangle_line, demangle_generic, cxa_demangle
from .runtime import print_stacktrace
from .ui.app import run_tui
from .utils.config import ConfigManager


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser("shiba-demangle", description="Demangler for Shiba symbols.")
    parser.add_argument("symbols", nargs="*", help="Symbols to demangle. Reads stdin when omitted.")
    parser.add_argument("--generic", "-g", action="store_true",
                        help="Fall back to the C++ demangler for symbols that are not Shiba symbols")
    parser.add_argument("--verbose", "-v", action="store_true", help="Explain why a symbol could not be demangled")
    parser.add_argument("--backtrace", action="store_true", help="Print the stack trace of this process")
    parser.add_argument("--tui", metavar="FILE", help="Open an interactive viewer on FILE")
    return parser


def _generic_demangler(config: ConfigManager):
    if config.get("generic_demangler") == "c++filt":
        cxxfilt = config.get("cxxfilt", "c++filt")
        return lambda symbol: demangle_generic(symbol, cxxfilt=cxxfilt)
    return cxa_demangle


def demangle_args(symbols: List[str], config: ConfigManager, generic: bool = False, verbose: bool = False) -> int:
    """Print one result line per symbol; returns the number of failures."""
    allow_sign = bool(config.get("allow_signed_integers", False))
    fallback = _generic_demangler(config) if generic else None
    failures = 0
    for symbol in symbols:
        try:
            print(f"{symbol} => {parse(symbol, allow_sign=allow_sign)}")
            continue
        except DemangleError as e:
            error = e

        text = fallback(symbol) if fallback else None
        if text:
            print(f"{symbol} => {text}")
            continue

        failures += 1
        if verbose:
            print(f"could not demangle {symbol}: {error}")
        else:
            print(f"could not demangle {symbol}")
    return failures


def demangle_stdin(config: ConfigManager) -> None:
    allow_sign = bool(config.get("allow_signed_integers", False))
    for line in sys.stdin:
        print(demangle_line(line.rstrip("\n"), allow_sign=allow_sign))


def run(argv: Optional[List[str]] = None):
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = ConfigManager()

    if args.backtrace:
        print_stacktrace(
            max_depth=int(config.get("max_stack_depth", 256)),
            generic=_generic_demangler(config),
            allow_sign=bool(config.get("allow_signed_integers", False)),
        )
        sys.exit(0)

    if args.tui:
        abs_path = os.path.abspath(args.tui)
        if not os.path.exists(abs_path):
            print(f"Error: File not found: {abs_path}")
            sys.exit(1)
        try:
            run_tui(abs_path, config)
        except KeyboardInterrupt:
            pass
        return

    if args.symbols:
        failures = demangle_args(args.symbols, config, generic=args.generic, verbose=args.verbose)
        sys.exit(1 if failures else 0)
    else:
        demangle_stdin(config)

if __name__ == "__main__":
    run()
