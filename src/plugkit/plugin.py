# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""Resolving plugin identifiers and applying plugins to projects.

A plugin is a module providing a function ``apply(project)`` and,
optionally, a ``defaults`` configuration tree. Plugins are addressed by
dotted identifiers. The plugins shipping with plugkit are listed in
:py:data:`BUILTIN_PLUGINS`; other packages make their plugins known via
the ``plugkit.plugin`` entry point group, using the plugin identifier as
the entry point name::

    [project.entry-points."plugkit.plugin"]
    "acme.plugin.deploy" = "acme_plugins.deploy"

"""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import TYPE_CHECKING

import entrypoints

from plugkit import PluginError, UnknownPluginError, config, debug, tree

if TYPE_CHECKING:
    from plugkit.project import Project

ENTRYPOINT_GROUP = "plugkit.plugin"

BUILTIN_PLUGINS = {
    "plugkit.builtin": "plugkit.builtin",
    "example.gradle.plugin.greeting": "plugkit.plugins.greeting",
}


def find_plugin_module(plugin_id: str) -> str:
    """Return the import spec of the module implementing `plugin_id`."""
    if plugin_id in BUILTIN_PLUGINS:
        return BUILTIN_PLUGINS[plugin_id]
    try:
        ep = entrypoints.get_single(ENTRYPOINT_GROUP, plugin_id)
    except entrypoints.NoSuchEntryPoint:
        raise UnknownPluginError(plugin_id) from None
    return ep.module_name  # type: ignore[no-any-return]


def resolve_plugin(plugin_id: str) -> ModuleType:
    """Import and return the module implementing the plugin `plugin_id`."""
    import_spec = find_plugin_module(plugin_id)
    debug(f"import plugin {plugin_id} from {import_spec}")
    mod = importlib.import_module(import_spec)
    if not callable(getattr(mod, "apply", None)):
        raise PluginError(f"Plugin '{plugin_id}' ({import_spec}) has no apply()")
    return mod


def apply_plugin(project: Project, plugin_id: str) -> None:
    """Apply the plugin `plugin_id` to `project`.

    The plugin's ``defaults`` are merged into the subtree of the
    project's configuration named after the plugin module (or
    ``defaults.__name__``, if given), keeping values that have been set
    by the project already. Afterwards the plugin's ``apply`` function
    is called with the project. Errors raised by ``apply`` are not
    handled here.
    """
    mod = resolve_plugin(plugin_id)

    plugin_defaults = getattr(mod, "defaults", config())
    settings_name = plugin_defaults.get("__name__", mod.__name__.split(".")[-1])
    debug(f"add subtree {settings_name}")
    if project.cfg.get(settings_name, None) is None:
        project.cfg[settings_name] = config()
    plugin_config_tree = project.cfg[settings_name]
    if not isinstance(plugin_config_tree, tree.ConfigTree):
        raise PluginError(
            f"The configuration of '{plugin_id}' is invalid: '{settings_name}'"
            " must be a mapping"
        )
    tree.tree_merge(plugin_config_tree, plugin_defaults)
    plugin_config_tree.pop("__name__", None)

    mod.apply(project)
    project.plugins.append(plugin_id)
    debug(f"applied plugin {plugin_id} to project '{project.name}'")
