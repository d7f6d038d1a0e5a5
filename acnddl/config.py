# Copyright 2021-2024 Nokia

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

__all__ = ("CollectionConfig", "load_config", "MODULE_PATH_ENV", "DEFAULT_EXTENSION", )

logger = logging.getLogger(__name__)

MODULE_PATH_ENV = "ACNDDL_MODULE_PATH"
DEFAULT_EXTENSION = ".ddl.xml"


@dataclass
class CollectionConfig:
    """Settings of a :py:class:`acnddl.document.DocumentCollection`.

    :param module_folders: folders searched for module files, in order
    :param default_extension: file name extension of module files
    :param language: default language for label texts
    """
    module_folders: List[Path] = field(default_factory=list)
    default_extension: str = DEFAULT_EXTENSION
    language: Optional[str] = None


def load_config(path: Optional[Path] = None) -> CollectionConfig:
    """Load settings from a TOML file and the environment.

    The file holds a ``[collection]`` table::

        [collection]
        module_folders = ["ddl", "/usr/share/acn/ddl"]
        default_extension = ".ddl.xml"
        language = "en"

    Relative folders are relative to the file.  Folders listed in the
    ``ACNDDL_MODULE_PATH`` environment variable (separated by
    :py:data:`os.pathsep`) are searched after the configured folders.
    """
    config = CollectionConfig()
    if path is not None:
        path = Path(path)
        if path.exists():
            data = tomllib.loads(path.read_text(encoding="utf-8"))
            section = data.get("collection", {})
            base = path.parent
            config.module_folders = [base / folder for folder in section.get("module_folders", [])]
            config.default_extension = section.get("default_extension", config.default_extension)
            config.language = section.get("language", config.language)
            logger.debug("loaded config from %s", path)
        else:
            logger.warning("config file %s not found, using defaults", path)
    env = os.environ.get(MODULE_PATH_ENV)
    if env:
        config.module_folders.extend(Path(folder) for folder in env.split(os.pathsep) if folder)
    return config
