# Copyright 2021-2024 Nokia

import logging
import os

from acnddl.config import DEFAULT_EXTENSION, MODULE_PATH_ENV, CollectionConfig, load_config
from acnddl.document import DocumentCollection


class TestLoadConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv(MODULE_PATH_ENV, raising=False)
        config = load_config()
        assert config == CollectionConfig()
        assert config.default_extension == DEFAULT_EXTENSION

    def test_file(self, monkeypatch, tmp_path):
        monkeypatch.delenv(MODULE_PATH_ENV, raising=False)
        path = tmp_path / "acnddl.toml"
        path.write_text(
            '[collection]\n'
            f'module_folders = ["ddl", "{(tmp_path / "shared").as_posix()}"]\n'
            'default_extension = ".xml"\n'
            'language = "de"\n',
            encoding="utf-8")
        config = load_config(path)
        assert config.module_folders == [tmp_path / "ddl", tmp_path / "shared"]
        assert config.default_extension == ".xml"
        assert config.language == "de"

    def test_missing_file(self, monkeypatch, tmp_path, caplog):
        monkeypatch.delenv(MODULE_PATH_ENV, raising=False)
        with caplog.at_level(logging.WARNING, logger="acnddl.config"):
            config = load_config(tmp_path / "missing.toml")
        assert config == CollectionConfig()
        assert "not found" in caplog.text

    def test_environment(self, monkeypatch, tmp_path):
        path = tmp_path / "acnddl.toml"
        path.write_text('[collection]\nmodule_folders = ["ddl"]\n', encoding="utf-8")
        monkeypatch.setenv(MODULE_PATH_ENV, os.pathsep.join(["/opt/ddl", "", "/usr/share/ddl"]))
        config = load_config(path)
        assert [folder.as_posix() for folder in config.module_folders] == [
            (tmp_path / "ddl").as_posix(), "/opt/ddl", "/usr/share/ddl",
        ]

    def test_collection_uses_config(self, tmp_path):
        config = CollectionConfig(module_folders=[tmp_path], language="en")
        collection = DocumentCollection(config=config)
        assert collection.module_folders == [tmp_path]
        assert collection.default_extension == DEFAULT_EXTENSION
        assert collection.language == "en"

    def test_arguments_take_precedence(self, tmp_path):
        config = CollectionConfig(module_folders=[tmp_path], default_extension=".xml")
        collection = DocumentCollection(["ddl"], ".ddl", config)
        assert [folder.as_posix() for folder in collection.module_folders] == ["ddl"]
        assert collection.default_extension == ".ddl"
