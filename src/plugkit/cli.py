# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""plugkit runs the tasks of a project.

plugkit requires a ``plugkit.yaml`` in the project's top-level directory.
It can be started from anywhere in the project tree, and searches the
path up for ``plugkit.yaml``. Tasks are provided by the plugins listed
under ``plugins`` in ``plugkit.yaml``; ``plugkit tasks`` lists them.

Options can also be given as environment variables, using the prefix
``PLUGKIT_`` (e.g. ``PLUGKIT_QUIET=1``).
"""

from __future__ import annotations

import importlib.metadata as importlib_metadata
import os
from typing import TYPE_CHECKING

import click
import xdg
from path import Path

from plugkit import (
    PlugkitError,
    config,
    debug,
    die,
    interpolate1,
    set_verbosity,
    tree,
)
from plugkit.builtin import PLUGIN_ID as BUILTIN_PLUGIN_ID
from plugkit.project import Project

if TYPE_CHECKING:
    from typing import Any, Callable


os.environ["PLUGKIT_CONFIG"] = os.environ.get(
    "PLUGKIT_CONFIG", Path(xdg.xdg_config_home()) / "plugkit"
)


def get_version() -> str:
    try:
        return importlib_metadata.version("plugkit")
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


# These are the basic defaults for the top-level configuration
# tree. Sections and values will be added by applying plugins and
# reading the project file (plugkit.yaml).
DEFAULTS = config(
    plugkit=config(
        projectfile="plugkit.yaml",
        config=Path("{PLUGKIT_CONFIG}"),
        version=get_version(),
    ),
    plugins=[],
)


def find_projectfile(projectfile: str | None) -> str | None:
    """Return the absolute path of `projectfile` in the current directory
    or the closest of its parents, or ``None``.
    """
    name = projectfile or DEFAULTS.plugkit.projectfile
    directory = Path(os.getcwd())
    while True:
        candidate = directory / name
        if candidate.exists():
            return os.path.normpath(candidate.absolute())
        if directory.parent == directory:
            return None
        directory = directory.parent


def load_config_tree(
    projectfile: str | Path,
    properties: tuple = (),
) -> tree.ConfigTree:
    """Build the configuration tree of the project described by
    ``projectfile``.

    The tree is made from the project file, the user's global settings
    (``{PLUGKIT_CONFIG}/global.yaml``, which overrides the project file)
    and :py:data:`DEFAULTS` for everything not set otherwise. Settings
    given as ``property=value`` in ``properties`` take precedence over
    all of them.
    """
    debug(f"Loading {projectfile}")
    cfg = config()
    tree.tree_update(cfg, tree.tree_load(projectfile))

    if not os.getenv("PLUGKIT_DISABLE_GLOBAL_YAML"):
        global_yaml = interpolate1("{PLUGKIT_CONFIG}/global.yaml")
        if os.path.exists(global_yaml):
            debug(f"Merging user settings from {os.path.normpath(global_yaml)}")
            tree.tree_update(cfg, tree.tree_load(global_yaml))

    tree.tree_merge(cfg, DEFAULTS)

    cfg.plugkit.projectfile = Path(projectfile).absolute()
    cfg.plugkit.project_root = cfg.plugkit.projectfile.normpath().dirname()
    cfg.plugkit.project_name = cfg.plugkit.project_root.basename()
    cfg.plugkit.config = Path(interpolate1(cfg.plugkit.config))

    tree.tree_update_properties(cfg, properties)

    # -p can replace the list, so check it last
    if not isinstance(cfg.plugins, list):
        die("'plugins' configuration is invalid!")
    return cfg


def create_project(cfg: tree.ConfigTree) -> Project:
    """Create the project for `cfg` and apply its plugins.

    The builtin plugin is applied first, followed by the plugins listed
    under ``plugins``, in that order.
    """
    project = Project(cfg.plugkit.project_name, cfg)
    debug("applying plugins:")
    for plugin_id in [BUILTIN_PLUGIN_ID, *cfg.plugins]:
        project.apply(plugin_id)
    return project


def base_options(fn: Callable) -> Callable:
    decorators = [
        click.option(
            "--version",
            "version",
            is_flag=True,
            help="Display plugkit's version and exit.",
        ),
        click.option(
            "--change-directory",
            "-C",
            "cwd",
            type=click.Path(file_okay=False, exists=True),
            help=(
                "Change directory before doing anything else. "
                "In this case, the project file (plugkit.yaml) "
                "is expected to live in the directory changed to."
            ),
        ),
        click.option(
            "-f",
            "projectfile",
            default=None,
            type=click.Path(dir_okay=False, exists=False),
            help=(
                "An alternative name for the project file. "
                "This can be a relative or absolute path when "
                "used without -C."
            ),
        ),
        click.option(
            "--quiet",
            "-q",
            is_flag=True,
            default=False,
            help="Be more quiet. With -q, tasks will not report what they do.",
        ),
        click.option(
            "--verbose",
            "-v",
            count=True,
            default=0,
            help="Be more verbose. Use -vv to see debug messages.",
        ),
        click.option(
            "--dump",
            is_flag=True,
            default=False,
            help=(
                "Dump the configuration tree after the plugins have been"
                " applied. This is useful to analyze problems with"
                " plugkit.yaml and for plugin developers."
            ),
        ),
        click.option(
            "-p",
            "properties",
            multiple=True,
            help=(
                "Override a setting in plugkit's configuration tree, using"
                " 'property=value'. Example: plugkit -p greeting.message=Hi greeting"
            ),
        ),
    ]
    for decorator in decorators:
        fn = decorator(fn)
    return fn


@click.command(
    help=__doc__,
    context_settings={
        "allow_extra_args": True,
        "allow_interspersed_args": False,
        "auto_envvar_prefix": "PLUGKIT",
    },
)
@base_options
@click.pass_context
def cli(  # pylint: disable=too-many-arguments
    ctx: click.Context,
    version: bool,
    cwd: str,
    projectfile: str,
    quiet: bool,
    verbose: int,
    dump: bool,
    properties: tuple,
) -> None:
    if version:
        click.echo(get_version())
        return

    set_verbosity(-1 if quiet else verbose)

    if cwd:
        os.chdir(cwd)
    _projectfile = find_projectfile(projectfile)
    if not _projectfile:
        if projectfile:
            die(f"{projectfile} not found")
        die("No project file found")

    cfg = load_config_tree(_projectfile, properties=properties)
    try:
        project = create_project(cfg)
        if dump:
            click.echo(tree.tree_dump(cfg))
        if ctx.args:
            project.run(*ctx.args)
        elif not dump:
            project.run("tasks")
    except PlugkitError as exc:
        die(exc)


def main(*args: Any, **kwargs: Any) -> Any:
    kwargs["auto_envvar_prefix"] = "PLUGKIT"
    kwargs.setdefault("standalone_mode", True)
    return cli.main(list(args) or None, **kwargs)
