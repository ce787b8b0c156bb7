#!/usr/bin/env python3
#----------------------------------------------------------------------------------------------------------------------
#    main.py
#----------------------------------------------------------------------------------------------------------------------
# Command-line entry point: load stance.ini, solve the stance, print it as JSON.
#----------------------------------------------------------------------------------------------------------------------

import sys
import json
import logging
import argparse
from pathlib import Path

import config_manager
from stance import HexapodStance, StanceFlags

logger = logging.getLogger("hexapod_stance")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve the static stance of a hexapod pose")
    parser.add_argument("--config", type=Path, default=None,
                        help="INI file with dimensions/pose/flags (default: stance.ini beside this file)")
    parser.add_argument("--no-gravity", action="store_true",
                        help="Skip ground solving and leave the body dangling")
    parser.add_argument("--shifted-up", action="store_true",
                        help="Lift a dangling body by the total leg length")
    parser.add_argument("--verbose", action="store_true",
                        help="Debug logging")
    parser.add_argument("--indent", type=int, default=2,
                        help="JSON indent (default: 2)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.config is not None and not args.config.is_file():
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 1

    cfg = config_manager.load_config(str(args.config) if args.config else None)

    verbose = args.verbose or cfg.logging.verbose
    level = logging.DEBUG if verbose else getattr(logging, cfg.logging.level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    flags = StanceFlags(
        no_gravity=args.no_gravity or cfg.flags.no_gravity,
        shifted_up=args.shifted_up or cfg.flags.shifted_up,
    )
    stance = HexapodStance(cfg.dimensions.to_dimensions(), cfg.pose, flags, cfg.solver)

    if not stance.ground_contact_points:
        logger.info("No ground support for this pose, body is dangling")

    print(json.dumps(stance.to_dict(), indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
