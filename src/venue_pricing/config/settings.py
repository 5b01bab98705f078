"""
Centralized settings and path configuration for the pricing service.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


DATA_DIR_ENV = 'VENUE_PRICING_DATA_DIR'
CURRENCY_ENV = 'VENUE_PRICING_CURRENCY'
DISPLAY_PLACES_ENV = 'VENUE_PRICING_DISPLAY_PLACES'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Catalog files
    tax_settings_csv: Path
    packages_csv: Path
    services_csv: Path

    # Display
    currency_symbol: str = '$'
    display_places: int = 2

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        if data_dir is None:
            env_dir = os.environ.get(DATA_DIR_ENV)
            data_dir = Path(env_dir) if env_dir else root / 'data'

        return cls(
            project_root=root,
            data_dir=data_dir,
            tax_settings_csv=data_dir / 'tax_settings.csv',
            packages_csv=data_dir / 'packages.csv',
            services_csv=data_dir / 'services.csv',
            currency_symbol=os.environ.get(CURRENCY_ENV, '$'),
            display_places=int(os.environ.get(DISPLAY_PLACES_ENV, '2')),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
