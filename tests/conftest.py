# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""Module implementing fixtures used in unit tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from click.testing import CliRunner
from path import Path
from pytest import fixture

import plugkit
from plugkit.project import Project

if TYPE_CHECKING:
    import pathlib


@fixture()
def cli_runner() -> CliRunner:
    return CliRunner()


@fixture()
def project() -> Project:
    """A fresh project without any tasks."""
    return Project("test-project")


@fixture()
def tmp_path(tmp_path: pathlib.Path) -> Path:
    """
    Using the custom Path simplifies tests, since plugkit is using this
    type a lot.
    """
    return Path(tmp_path)


@fixture()
def projectfile(tmp_path: Path) -> Path:
    """A project file applying the greeting plugin."""
    fn = tmp_path / "plugkit.yaml"
    fn.write_text(
        "plugins:\n  - example.gradle.plugin.greeting\n",
        encoding="utf-8",
    )
    return fn


@fixture(autouse=True)
def reset_verbosity():
    plugkit.set_verbosity(plugkit.Verbosity.NORMAL)
    yield
    plugkit.set_verbosity(plugkit.Verbosity.NORMAL)


@fixture(scope="session", autouse=True)
def disable_global_yaml():
    os.environ["PLUGKIT_DISABLE_GLOBAL_YAML"] = "True"
