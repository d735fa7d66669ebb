"""
Configuration management for AGP analysis.

This module provides dataclasses for the clinical thresholds, time-of-day
band settings and summary bundle defaults, with support for loading from
YAML files.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, Tuple
import yaml


@dataclass
class GlucoseThresholds:
    """Reference glucose breakpoints in mg/dL.

    Consensus thresholds (Battelino 2019). Breakpoints for any display unit
    are always derived from these values.
    """
    very_low: float = 54    # Level 2 hypoglycemia
    low: float = 70         # Level 1 hypoglycemia / target lower bound
    high: float = 180       # Target upper bound
    very_high: float = 250  # Clinically significant hyperglycemia


@dataclass
class BandSettings:
    """Settings for time-of-day percentile bands."""
    bucket_minutes: int = 5
    window_minutes: int = 60
    percentiles: Tuple[float, ...] = (5, 25, 50, 75, 95)

    # Optional Savitzky-Golay pass over the bucket percentiles
    savgol_window: Optional[int] = None  # Must be odd
    savgol_polyorder: int = 2


@dataclass
class ReportSettings:
    """Defaults for summary bundle generation."""
    target_unit: str = "mg/dL"
    trailing_days: int = 120
    anchor: str = "now"  # "now" or "latest"
    include_source_data: bool = True
    coding_system: str = "https://tx.argo.run"


@dataclass
class AnalysisConfig:
    """Master configuration container."""
    glucose: GlucoseThresholds = field(default_factory=GlucoseThresholds)
    bands: BandSettings = field(default_factory=BandSettings)
    report: ReportSettings = field(default_factory=ReportSettings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        data = asdict(self)
        data['bands']['percentiles'] = list(self.bands.percentiles)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        """Create config from dictionary."""
        bands = dict(data.get('bands', {}))
        if 'percentiles' in bands:
            bands['percentiles'] = tuple(bands['percentiles'])
        return cls(
            glucose=GlucoseThresholds(**data.get('glucose', {})),
            bands=BandSettings(**bands),
            report=ReportSettings(**data.get('report', {})),
        )


def load_config(config_path: Optional[Path] = None) -> AnalysisConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config.yaml. If None, looks for config.yaml
                    in the agp_analyzer package directory.

    Returns:
        AnalysisConfig with values from file merged with defaults.
    """
    if config_path is None:
        config_path = Path(__file__).parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        return AnalysisConfig()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    # Create config with defaults, then override with file values
    config = AnalysisConfig()

    for section in ('glucose', 'bands', 'report'):
        target = getattr(config, section)
        for key, value in (data.get(section) or {}).items():
            if hasattr(target, key):
                setattr(target, key, value)

    if isinstance(config.bands.percentiles, list):
        config.bands.percentiles = tuple(config.bands.percentiles)

    return config


def save_config(config: AnalysisConfig, config_path: Path) -> None:
    """Save configuration to YAML file."""
    with open(config_path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
