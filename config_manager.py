"""
config_manager.py - Configuration loading and persistence for the stance solver.

Handles stance.ini parsing, defaults, and save functions. Pose angles are
stored in degrees as 'alpha/beta/gamma' triplets and converted to radians
by StanceConfig.pose.
"""

from __future__ import annotations
import os
import logging
import configparser
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from kinematics import Dimensions, Pose, POSITION_NAMES_LIST
from pose_templates import DEFAULT_DIMENSIONS, pose_from_degrees, pose_to_degrees
from stance import SolverConfig

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Configuration file path (module-level state shared with save functions)
# -----------------------------------------------------------------------------
_cfg: Optional[configparser.ConfigParser] = None
_cfg_path: Optional[str] = None


def _get_config_path() -> str:
    """Return path to stance.ini relative to this module."""
    if '__file__' in globals():
        return os.path.join(os.path.dirname(__file__), 'stance.ini')
    return 'stance.ini'


def set_config_state(cfg: configparser.ConfigParser, cfg_path: str) -> None:
    """Set shared config state so save functions write to an already-loaded file."""
    global _cfg, _cfg_path
    _cfg = cfg
    _cfg_path = cfg_path


# -----------------------------------------------------------------------------
# Default configuration values
# -----------------------------------------------------------------------------
@dataclass
class DimensionsConfig:
    front: float = DEFAULT_DIMENSIONS.front
    side: float = DEFAULT_DIMENSIONS.side
    middle: float = DEFAULT_DIMENSIONS.middle
    coxia: float = DEFAULT_DIMENSIONS.coxia
    femur: float = DEFAULT_DIMENSIONS.femur
    tibia: float = DEFAULT_DIMENSIONS.tibia

    def to_dimensions(self) -> Dimensions:
        return Dimensions(self.front, self.side, self.middle,
                          self.coxia, self.femur, self.tibia)


@dataclass
class FlagsConfig:
    no_gravity: bool = False
    shifted_up: bool = False


@dataclass
class LoggingConfig:
    level: str = 'WARNING'
    verbose: bool = False


def _default_pose_deg() -> Dict[str, Tuple[float, float, float]]:
    return {position: (0.0, 0.0, 0.0) for position in POSITION_NAMES_LIST}


@dataclass
class StanceConfig:
    """Master configuration container."""
    dimensions: DimensionsConfig = field(default_factory=DimensionsConfig)
    pose_deg: Dict[str, Tuple[float, float, float]] = field(default_factory=_default_pose_deg)
    flags: FlagsConfig = field(default_factory=FlagsConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def pose(self) -> Pose:
        return pose_from_degrees(self.pose_deg)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------
def _parse_ini_triplet_float(s: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """Parse 'a/b/c' string into (float, float, float)."""
    if s is None:
        return None
    parts = str(s).strip().split('/')
    if len(parts) != 3:
        return None
    try:
        return (float(parts[0]), float(parts[1]), float(parts[2]))
    except ValueError:
        return None


def _fmt_triplet(tri) -> str:
    """Format a 3-sequence to 'a/b/c' string."""
    return f"{float(tri[0]):.3f}/{float(tri[1]):.3f}/{float(tri[2]):.3f}"


def _get_float(parser: configparser.ConfigParser, section: str, key: str,
               default: float) -> float:
    """Read one float; a malformed value logs a warning and keeps `default`."""
    try:
        return parser.getfloat(section, key, fallback=default)
    except ValueError:
        logger.warning("Bad value for [%s] %s: %r (keeping default %s)",
                       section, key, parser.get(section, key, raw=True), default)
        return default


def _get_bool(parser: configparser.ConfigParser, section: str, key: str,
              default: bool) -> bool:
    """Read one boolean; a malformed value logs a warning and keeps `default`."""
    try:
        return parser.getboolean(section, key, fallback=default)
    except ValueError:
        logger.warning("Bad value for [%s] %s: %r (keeping default %s)",
                       section, key, parser.get(section, key, raw=True), default)
        return default


# -----------------------------------------------------------------------------
# Load configuration
# -----------------------------------------------------------------------------
def load_config(config_path: Optional[str] = None) -> StanceConfig:
    """Load configuration from stance.ini.

    Returns a StanceConfig dataclass with all values populated.
    Missing keys use defaults.
    """
    global _cfg, _cfg_path

    cfg = StanceConfig()

    if config_path is None:
        config_path = _get_config_path()

    _cfg_path = config_path
    _cfg = configparser.ConfigParser()

    try:
        read_ok = _cfg.read(config_path)
    except (configparser.Error, UnicodeDecodeError) as e:
        logger.warning("Config read error (using defaults): %s", e)
        return cfg
    if not read_ok:
        logger.info("No config at %s, using defaults", config_path)
        return cfg

    try:
        # Dimensions section
        if 'dimensions' in _cfg:
            d = cfg.dimensions
            for key in ('front', 'side', 'middle', 'coxia', 'femur', 'tibia'):
                setattr(d, key, _get_float(_cfg, 'dimensions', key, getattr(d, key)))

        # Pose section
        if 'pose' in _cfg:
            for position in POSITION_NAMES_LIST:
                if position not in _cfg['pose']:
                    continue
                tri = _parse_ini_triplet_float(_cfg.get('pose', position))
                if tri is None:
                    logger.warning("Bad pose entry for %s: %r (keeping default)",
                                   position, _cfg.get('pose', position))
                    continue
                cfg.pose_deg[position] = tri
            unknown = set(_cfg['pose']) - set(POSITION_NAMES_LIST)
            if unknown:
                logger.warning("Ignoring unknown pose keys: %s", sorted(unknown))

        # Flags section
        if 'flags' in _cfg:
            cfg.flags.no_gravity = _get_bool(_cfg, 'flags', 'no_gravity', cfg.flags.no_gravity)
            cfg.flags.shifted_up = _get_bool(_cfg, 'flags', 'shifted_up', cfg.flags.shifted_up)

        # Solver section
        if 'solver' in _cfg:
            cfg.solver.on_plane_tolerance = _get_float(_cfg, 'solver', 'on_plane_tolerance',
                                                       cfg.solver.on_plane_tolerance)
            cfg.solver.twist_tolerance = _get_float(_cfg, 'solver', 'twist_tolerance',
                                                    cfg.solver.twist_tolerance)

        # Logging section
        if 'logging' in _cfg:
            cfg.logging.level = _cfg.get('logging', 'level', fallback=cfg.logging.level).upper()
            cfg.logging.verbose = _get_bool(_cfg, 'logging', 'verbose', cfg.logging.verbose)

    except configparser.Error as e:
        logger.warning("Config parse error (keeping values read so far): %s", e)

    return cfg


# -----------------------------------------------------------------------------
# Save functions
# -----------------------------------------------------------------------------
def _write_config() -> None:
    with open(_cfg_path, 'w') as f:
        _cfg.write(f)


def save_pose(pose: Pose) -> bool:
    """Save pose angles (as degrees) to stance.ini [pose] section."""
    global _cfg, _cfg_path
    if _cfg is None or _cfg_path is None:
        return False
    try:
        if 'pose' not in _cfg:
            _cfg.add_section('pose')
        for position, tri in pose_to_degrees(pose).items():
            _cfg.set('pose', position, _fmt_triplet(tri))
        _write_config()
        return True
    except (IOError, OSError, configparser.Error) as e:
        logger.warning("Failed to save pose: %s", e)
        return False


def save_dimensions(dimensions: Dimensions) -> bool:
    """Save body and leg dimensions to stance.ini [dimensions] section."""
    global _cfg, _cfg_path
    if _cfg is None or _cfg_path is None:
        return False
    try:
        if 'dimensions' not in _cfg:
            _cfg.add_section('dimensions')
        for key in ('front', 'side', 'middle', 'coxia', 'femur', 'tibia'):
            _cfg.set('dimensions', key, f"{float(getattr(dimensions, key)):.3f}")
        _write_config()
        return True
    except (IOError, OSError, configparser.Error) as e:
        logger.warning("Failed to save dimensions: %s", e)
        return False
