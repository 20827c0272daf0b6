"""Loading of upload configurations."""

from os import PathLike
from pathlib import Path

from loguru import logger

from .common.schema_image import UploadConfig


def load_upload_config(path: str | PathLike[str]) -> UploadConfig:
    """
    Read an UploadConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the content is not a valid configuration
    """
    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise FileNotFoundError(f"Upload config not found: {config_path}")

    config = UploadConfig.model_validate_json(config_path.read_text(encoding="utf-8"))
    logger.debug(f"Loaded upload config from {config_path}: {len(config.image_sizes)} image size(s)")
    return config
