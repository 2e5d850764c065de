"""Pet list loading from the pet-management export."""

from pathlib import Path

import structlog
import yaml

from petdash.adapters.base import FetchError
from petdash.config.settings import settings
from petdash.models import Pet

logger = structlog.get_logger()


def load_pets(path: Path | None = None) -> list[Pet]:
    """Read the pet list (YAML or JSON). A missing file means no pets."""
    path = (path or settings.pets_file).expanduser()
    if not path.exists():
        logger.warning("Pets file not found", path=str(path))
        return []

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    except yaml.YAMLError as e:
        raise FetchError("pets", f"Invalid pets file: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("pets", [])
    return [Pet.model_validate(item) for item in raw]
