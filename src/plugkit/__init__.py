# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""This is the plugin API of plugkit. It contains the functions and
classes plugins use to talk to the user and to declare their settings,
e.g. :py:func:`echo` and :py:func:`config`, as well as the exceptions
raised by the project model.

Tasks are thin wrappers on top of `package click
<https://click.palletsprojects.com/en/8.1.x/>`_, so task parameters are
declared using :py:func:`option` and :py:func:`argument`, which accept
the same arguments as their click counterparts.

"""

from __future__ import annotations

import collections
import enum
import logging
import os
from typing import TYPE_CHECKING, Iterable

import click

if TYPE_CHECKING:
    from typing import Any, Callable, Hashable

    from plugkit.tree import ConfigTree

__all__ = [
    "Verbosity",
    "set_verbosity",
    "get_verbosity",
    "echo",
    "info",
    "warn",
    "error",
    "debug",
    "die",
    "interpolate1",
    "interpolate",
    "config",
    "argument",
    "option",
    "PlugkitError",
    "TaskError",
    "DuplicateTaskError",
    "UnknownTaskError",
    "PluginError",
    "UnknownPluginError",
]


class PlugkitError(Exception):
    """Base class of the errors raised by the project model."""


class TaskError(PlugkitError):
    pass


class DuplicateTaskError(TaskError):
    """A task with the same name is already registered."""

    def __init__(self: DuplicateTaskError, name: str) -> None:
        super().__init__(
            f"Cannot add task '{name}' as a task with that name already exists."
        )
        self.name = name


class UnknownTaskError(TaskError):
    def __init__(self: UnknownTaskError, name: str) -> None:
        super().__init__(f"Task with name '{name}' not found.")
        self.name = name


class PluginError(PlugkitError):
    pass


class UnknownPluginError(PluginError):
    def __init__(self: UnknownPluginError, plugin_id: str) -> None:
        super().__init__(f"Plugin with id '{plugin_id}' not found.")
        self.plugin_id = plugin_id


class Verbosity(enum.IntEnum):
    QUIET = -1
    NORMAL = 0
    INFO = 1
    DEBUG = 2


_verbosity = Verbosity.NORMAL


def set_verbosity(verbosity: int) -> Verbosity:
    # Intentionally undocumented; used by the command line front-end.
    global _verbosity  # pylint: disable=global-statement
    _verbosity = Verbosity(max(Verbosity.QUIET, min(verbosity, Verbosity.DEBUG)))
    return _verbosity


def get_verbosity() -> Verbosity:
    return _verbosity


def echo(*msg: str, **kwargs: Any) -> None:
    """Print a message to the console by joining the positional arguments
    `msg` with spaces.

    `echo` is meant for messages that explain to the user what plugkit is
    doing. It will remain silent though when ``plugkit`` is run with the
    ``--quiet`` flag.

    `echo` supports the same keyword arguments as Click's
    :py:func:`click.echo`.

    """
    if _verbosity > Verbosity.QUIET:
        click.echo(click.style("plugkit: ", fg="green"), nl=False)
        click.echo(click.style(" ".join(msg), bold=True), **kwargs)


def info(*msg: str, **kwargs: Any) -> None:
    """Print a message to the console by joining the positional arguments
    `msg` with spaces.

    `info` will remain silent unless ``plugkit`` is run with the
    ``--verbose`` flag. It is meant for messages that provide additional
    details.

    """
    if _verbosity >= Verbosity.INFO:
        click.echo(click.style("plugkit: ", fg="green"), nl=False)
        click.echo(" ".join(msg), **kwargs)


def debug(*msg: str, **kwargs: Any) -> None:
    """Log `msg` and, when run with ``-vv``, print it to the console."""
    text = " ".join(msg)
    logging.debug(text)
    if _verbosity >= Verbosity.DEBUG:
        click.echo(click.style("plugkit: debug: ", fg="blue"), nl=False)
        click.echo(text, **kwargs)


def warn(*msg: str, **kwargs: Any) -> None:
    """Print a warning message to standard error by joining the positional
    arguments `msg` with spaces.

    """
    click.echo(click.style("plugkit: warning: ", fg="yellow"), nl=False, err=True)
    click.echo(" ".join(msg), err=True, **kwargs)


def error(*msg: str, **kwargs: Any) -> None:
    """Print an error message to standard error by joining the positional
    arguments `msg` with spaces.

    """
    click.echo(click.style("plugkit: error: ", fg="red"), nl=False, err=True)
    click.echo(" ".join(msg), err=True, **kwargs)


def die(*msg: Any) -> None:
    """Terminates ``plugkit`` with a non-zero return code and print the
    error message `msg`.

    """
    msg = tuple(str(m) for m in msg)
    error(*msg)
    raise click.Abort(" ".join(msg))


def interpolate1(literal: Any, *namespaces: dict) -> str:
    """Interpolate a string against `namespaces` and the environment.

    The string is treated like the body of an f-string, so dotted
    expressions work for configuration trees:

    >>> interpolate1("Hello from '{greeting.plugin_id}'", cfg)
    "Hello from 'example.gradle.plugin.greeting'"

    Interpolation is repeated until the result does not change anymore,
    which allows for nested references. Double curly braces escape curly
    braces, like in regular f-strings.

    """
    if not isinstance(literal, str):
        literal = str(literal)

    where_to_look = collections.ChainMap(*namespaces, os.environ)  # type: ignore[arg-type]
    seen = set()

    while True:
        previous = literal
        seen.add(literal)
        # Protect escaped braces, so they survive the evaluation
        # below; string reversal makes sure the outer pairs of "}}}"
        # are replaced, not the inner ones.
        literal = literal[::-1].replace("}}", "<DOUBLE_BRACE_CLOSE>"[::-1])
        literal = literal[::-1].replace("{{", "<DOUBLE_BRACE_OPEN>")
        literal = eval(rf"rf''' {literal} '''", {}, where_to_look)[1:-1]  # noqa
        literal = literal.replace("<DOUBLE_BRACE_OPEN>", "{{")
        literal = literal.replace("<DOUBLE_BRACE_CLOSE>", "}}")
        if previous == literal:
            literal = literal.replace("{{", "{").replace("}}", "}")
            break
        if literal in seen:
            raise RecursionError(literal)
    return literal


def interpolate(literals: Iterable[Hashable], *namespaces: dict) -> list:
    """Interpolate an iterable of items, dropping ``None`` values."""
    return [
        interpolate1(literal, *namespaces) for literal in literals if literal is not None
    ]


def config(*args: Any, **kwargs: Any) -> ConfigTree:
    """`config` creates a configuration subtree:

    >>> config(a="alpha", b="beta")
    {"a": "alpha", "b": "beta"}

    Plugins use `config` to declare their ``defaults`` tree.

    """
    from plugkit.tree import ConfigTree

    return ConfigTree(*args, **kwargs)


def argument(**kwargs: Any) -> Callable:
    """Annotation for task arguments.

    This works just like :py:func:`click.argument`, accepting all the
    same parameters. Example:

    .. code-block:: python

        @project.tasks.task()
        def copy(source: argument(type=click.Path(exists=True))):
            ...

    """

    def wrapper(param_name: str) -> Callable:
        return click.argument(param_name, **kwargs)

    return wrapper


def option(*args: Any, **kwargs: Any) -> Callable:
    """Annotation for task options.

    This works just like :py:func:`click.option`, accepting the same
    parameters. Example:

    .. code-block:: python

        @project.tasks.task()
        def greet(name: option("--name", default="world")):
            echo(f"Hello {name}")

    """

    def wrapper(param_name: str) -> Callable:
        return click.option(*args, **kwargs)

    return wrapper
