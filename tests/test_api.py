# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""
Module implementing the unit tests regarding the API functions and classes
implemented in src/plugkit/__init__.py
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

import click
import pytest

import plugkit
from plugkit.tree import ConfigTree

if TYPE_CHECKING:
    from pytest import LogCaptureFixture, MonkeyPatch
    from pytest_mock.plugin import MockerFixture


def test_echo(mocker: MockerFixture) -> None:
    """plugkit.echo is echo'ing by default"""
    mocker.patch("click.echo")
    marker = "ZIOhddu"
    plugkit.echo(marker)
    assert click.echo.call_count == 2  # type: ignore[attr-defined]
    for call in click.echo.call_args_list:  # type: ignore[attr-defined]
        assert any(
            expected in call.args[0] for expected in ("plugkit: ", marker)
        ), f"None of the expected values found in {call.args[0]=}"


def test_echo_quiet(mocker: MockerFixture) -> None:
    """plugkit.echo is not echo'ing if run quietly"""
    mocker.patch("click.echo")
    plugkit.set_verbosity(plugkit.Verbosity.QUIET)

    plugkit.echo("Should not be shown")
    assert not click.echo.called  # type: ignore[attr-defined]


def test_info(mocker: MockerFixture) -> None:
    """plugkit.info is silent by default"""
    mocker.patch("click.echo")
    plugkit.info("ZIOhddu")
    assert not click.echo.called  # type: ignore[attr-defined]


def test_info_verbose(mocker: MockerFixture) -> None:
    mocker.patch("click.echo")
    plugkit.set_verbosity(plugkit.Verbosity.INFO)
    plugkit.info("ZIOhddu")
    assert "ZIOhddu" in repr(click.echo.call_args_list)  # type: ignore[attr-defined]


def test_debug(mocker: MockerFixture, caplog: LogCaptureFixture) -> None:
    """plugkit.debug always logs, but prints only with -vv"""
    mocker.patch("click.echo")
    with caplog.at_level(logging.DEBUG):
        plugkit.debug("ZIOhddu")
    assert "ZIOhddu" in caplog.text
    assert not click.echo.called  # type: ignore[attr-defined]

    plugkit.set_verbosity(5)
    assert plugkit.get_verbosity() == plugkit.Verbosity.DEBUG
    plugkit.debug("ZIOhddu")
    assert "ZIOhddu" in repr(click.echo.call_args_list)  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    "function,message",
    ((plugkit.warn, "warning"), (plugkit.error, "error")),
)
def test_echo_extended(function: Callable, message: str, mocker: MockerFixture) -> None:
    """plugkit.warn and plugkit.error write to stderr, even when quiet"""
    mocker.patch("click.echo")
    plugkit.set_verbosity(plugkit.Verbosity.QUIET)
    marker = "ZIOhddu"
    function(marker)
    assert click.echo.call_count == 2  # type: ignore[attr-defined]
    for call in click.echo.call_args_list:  # type: ignore[attr-defined]
        assert call.kwargs["err"] is True
        assert any(
            expected in call.args[0] for expected in (f"plugkit: {message}", marker)
        ), f"None of the expected values found in {call.args[0]=}"


def test_die() -> None:
    """plugkit.die will raise click.Abort"""
    with pytest.raises(click.Abort, match="You shall not pass!"):
        plugkit.die("You shall", "not pass!")


def test_exceptions() -> None:
    assert issubclass(plugkit.DuplicateTaskError, plugkit.TaskError)
    assert issubclass(plugkit.UnknownTaskError, plugkit.TaskError)
    assert issubclass(plugkit.UnknownPluginError, plugkit.PluginError)
    assert issubclass(plugkit.TaskError, plugkit.PlugkitError)
    assert issubclass(plugkit.PluginError, plugkit.PlugkitError)
    assert str(plugkit.DuplicateTaskError("greeting")) == (
        "Cannot add task 'greeting' as a task with that name already exists."
    )


def test_interpolate1(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("PLUGKIT_TEST_VAR", "from-env")
    cfg = ConfigTree(
        greeting=ConfigTree(plugin_id="example.gradle.plugin.greeting"),
        nested="{greeting.plugin_id}!",
    )

    assert (
        plugkit.interpolate1("Hello from '{greeting.plugin_id}'", cfg)
        == "Hello from 'example.gradle.plugin.greeting'"
    )
    assert plugkit.interpolate1("{nested}", cfg) == "example.gradle.plugin.greeting!"
    assert plugkit.interpolate1("{PLUGKIT_TEST_VAR}") == "from-env"
    assert plugkit.interpolate1(42) == "42"


def test_interpolate1_escapes() -> None:
    cfg = ConfigTree(lang="en")
    assert (
        plugkit.interpolate1('{{"header": {{"language": "{lang}"}}}}', cfg)
        == '{"header": {"language": "en"}}'
    )


def test_interpolate1_recursion() -> None:
    cfg = ConfigTree(a="{b}", b="{a}")
    with pytest.raises(RecursionError):
        plugkit.interpolate1("{a}", cfg)


def test_interpolate() -> None:
    cfg = ConfigTree(a="alpha")
    assert plugkit.interpolate(["{a}", None, "b"], cfg) == ["alpha", "b"]


def test_config() -> None:
    cfg = plugkit.config(a="alpha", sub=plugkit.config(b="beta"))
    assert isinstance(cfg, ConfigTree)
    assert cfg.sub.b == "beta"


def test_option_and_argument() -> None:
    @click.command()
    def cmd():
        pass

    plugkit.option("--name", default="world")("name")(cmd)
    plugkit.argument(required=False)("path")(cmd)
    assert [param.name for param in cmd.params] == ["name", "path"]
    assert isinstance(cmd.params[0], click.Option)
    assert isinstance(cmd.params[1], click.Argument)
