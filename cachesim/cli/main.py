from __future__ import annotations
import argparse
import sys
from ..config import LOG_LEVELS, SimConfig
from ..errors import ConfigError
from ..runtime.geometry import CacheGeometry
from ..runtime.simulator import run as run_sim
from ..trace.generator import generate_trace, write_trace
from ..trace.reader import read_trace
from ..utils.logging import get_logger
from ..utils.reporting import format_configuration, format_geometry, generate_report


def cmd_run(args):
    """Handles the 'run' command."""
    logger = get_logger(level=args.log_level or "INFO")
    try:
        config = SimConfig.from_args(args)
        logger = get_logger(level=config.log_level)
        print(format_configuration(config))
        # 1. Geometry; a bad config stops here, before any access
        geometry = CacheGeometry.from_config(config)
    except ConfigError as e:
        logger.error("Error: %s", e)
        return 1
    print(format_geometry(geometry))

    # 2. Trace
    if config.generate_trace:
        write_trace(generate_trace(config.num_accesses, config.seed), config.trace_file)

    # 3. Simulate
    try:
        result = run_sim(read_trace(config.trace_file), geometry, config.history_interval)
    except OSError as e:
        logger.error("Error: Could not open trace file %s (%s)", config.trace_file, e.strerror)
        return 1

    # 4. Report
    generate_report(result, config)
    logger.info("[OK] Simulation finished. Reports are in %s", config.report_dir)
    return 0


def cmd_gen_trace(args):
    """Handles the 'gen-trace' command."""
    get_logger(level=args.log_level)
    if args.num_accesses < 0:
        get_logger().error("Error: --num-accesses must be non-negative")
        return 1
    write_trace(generate_trace(args.num_accesses, args.seed), args.output)
    return 0


def cmd_geometry(args):
    """Handles the 'geometry' command."""
    logger = get_logger(level=args.log_level or "INFO")
    try:
        config = SimConfig.from_args(args)
        geometry = CacheGeometry.from_config(config)
    except ConfigError as e:
        logger.error("Error: %s", e)
        return 1
    print(format_configuration(config))
    print(format_geometry(geometry))
    return 0


def _add_geometry_args(p):
    p.add_argument("-c", "--config", type=str, default=None,
                   help="Path to YAML or 'KEY: value' config file to override defaults")
    group = p.add_argument_group('Cache Geometry Arguments')
    group.add_argument("--cache-size-kb", type=int, default=None, dest="cache_size_kb",
                       help="Total cache size in KB")
    group.add_argument("--block-size", type=int, default=None, dest="block_size_bytes",
                       help="Block (line) size in bytes, a power of two")
    group.add_argument("--associativity", type=int, default=None,
                       help="Ways per set")


def build_parser():
    p = argparse.ArgumentParser(
        prog="cachesim",
        description="Set-associative LRU cache simulator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # --- Run Command ---
    pr = sub.add_parser("run", help="Simulate a trace and report hit/miss statistics",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    pr.add_argument("trace_file", nargs='?', default=None,
                    help="Path to the access trace (optional if specified in config)")
    _add_geometry_args(pr)
    pr.add_argument("--report", type=str, default=None, dest="report_dir",
                    help="Directory to save simulation reports")
    pr.add_argument("--no-html", action="store_false", default=None, dest="html_report",
                    help="Skip the HTML hit-rate chart")
    pr.add_argument("--history-interval", type=int, default=None, dest="history_interval",
                    help="Sample the hit rate every N accesses")
    pr.add_argument("--log-level", type=str.upper, default=None, choices=LOG_LEVELS,
                    dest="log_level", help="Logging level")

    gen_group = pr.add_argument_group('Trace Generation Arguments')
    gen_group.add_argument("--gen-trace", action="store_true", default=None, dest="generate_trace",
                           help="Generate a synthetic trace into the trace path before simulating")
    gen_group.add_argument("--num-accesses", type=int, default=None, dest="num_accesses",
                           help="Number of accesses to generate")
    gen_group.add_argument("--seed", type=int, default=None,
                           help="Random seed for trace generation")
    pr.set_defaults(func=cmd_run)

    # --- Trace Generation Command ---
    pg = sub.add_parser("gen-trace", help="Write a synthetic access trace",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    pg.add_argument("-o", "--output", default="trace.txt", help="Output trace path")
    pg.add_argument("-n", "--num-accesses", type=int, default=5000, dest="num_accesses",
                    help="Number of accesses to generate")
    pg.add_argument("--seed", type=int, default=None, help="Random seed")
    pg.add_argument("--log-level", type=str.upper, default="INFO", choices=LOG_LEVELS,
                    dest="log_level", help="Logging level")
    pg.set_defaults(func=cmd_gen_trace)

    # --- Geometry Command ---
    pq = sub.add_parser("geometry", help="Print the derived cache geometry",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_geometry_args(pq)
    pq.add_argument("--log-level", type=str.upper, default=None, choices=LOG_LEVELS,
                    dest="log_level", help="Logging level")
    pq.set_defaults(func=cmd_geometry)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
