# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""The configuration tree of a project and the functions working on it."""

from __future__ import annotations

from collections import OrderedDict, namedtuple
from typing import TYPE_CHECKING

import ruamel.yaml
import ruamel.yaml.error

from plugkit import die

if TYPE_CHECKING:
    from typing import Any, Generator, Hashable

ParentInfo = namedtuple("ParentInfo", ["parent", "key"])


class ConfigTree(OrderedDict):
    """A specialization of `OrderedDict` that we use to store the
    configuration tree of a project.

    `ConfigTree` has two features over `OrderedDict`: first, it behaves
    like a "bunch", i.e. items can be accessed as dot expressions
    (``cfg.greeting.message``). Second, each subtree is linked to its
    parent, to enable the computation of full names:

    >>> tree_keyname(cfg.greeting, "message")
    'greeting.message'

    Note that the API used to access the parent link is *not* part of
    this class, as each identifier we add may clash with property names
    used.
    """

    def __init__(self: ConfigTree, *args: Any, **kwargs: Any) -> None:
        self.__parentinfo = None
        super().__init__(*args, **kwargs)

    def __setitem__(self: ConfigTree, key: Hashable, value: Any) -> None:
        super().__setitem__(key, value)
        tree_set_parent(value, self, key)  # type: ignore[arg-type]

    def setdefault(self: ConfigTree, key: Hashable, default: Any = None) -> Any:
        val = super().setdefault(key, default)
        tree_set_parent(val, self, key)  # type: ignore[arg-type]
        return val

    # __setattr__ and __getattr__ give the configuration tree "bunch"
    # behaviour, i.e. one can access the dictionary items as if they
    # were properties; this makes for a more convenient notation when
    # using the settings in code and f-like interpolation expressions.

    def __setattr__(self: ConfigTree, name: str, value: Any) -> None:
        if any(name.startswith(f"{char}_ConfigTree__") for char in ("", "_")):
            object.__setattr__(self, name, value)
        else:
            self[name] = value

    def __getattr__(self: ConfigTree, name: str) -> Any:
        if name in self:
            return self.get(name)
        raise AttributeError(f"No property '{name}'")


def tree_set_parent(tree: Any, parent: ConfigTree, name: str) -> None:
    if isinstance(tree, ConfigTree):
        tree._ConfigTree__parentinfo = ParentInfo(  # pylint: disable=protected-access
            parent, name
        )


def tree_keyname(tree: ConfigTree, key: str) -> str:
    """Return the full, dotted name of `key` in `tree`."""
    if key not in tree:
        raise AttributeError(f"{key=} not in {tree=}")

    path = [key]
    parentinfo = tree._ConfigTree__parentinfo  # pylint: disable=protected-access
    while parentinfo:
        path.insert(0, parentinfo.key)
        parentinfo = (
            parentinfo.parent._ConfigTree__parentinfo  # pylint: disable=protected-access
        )
    return ".".join(path)


def _to_tree(data: Any) -> Any:
    if isinstance(data, dict):
        return ConfigTree((key, _to_tree(value)) for key, value in data.items())
    if isinstance(data, list):
        return [_to_tree(item) for item in data]
    return data


def tree_load(fn: str) -> ConfigTree:
    """Read the YAML file `fn` into a configuration tree.

    An empty file results in an empty tree; a file that does not hold a
    mapping on its top-level is rejected.
    """
    yaml = ruamel.yaml.YAML(typ="rt")
    with open(fn, encoding="utf-8") as f:
        try:
            data = yaml.load(f)
        except ruamel.yaml.error.YAMLError as ex:
            mark = getattr(ex, "problem_mark", None)
            where = f"{fn}:{mark.line + 1}" if mark else fn
            die(f"\n{where}: {ex}")
    if data is None:
        return ConfigTree()
    if not isinstance(data, dict):
        die(f"{fn}: expected a mapping on the top-level")
    return _to_tree(data)  # type: ignore[no-any-return]


def tree_walk(config: ConfigTree, indent: str = "") -> Generator:
    """Walk configuration tree depth-first, yielding the key, its value,
    the full name of the key and an indentation string that increases by
    ``"  "`` for each level.
    """
    for key, value in config.items():
        yield key, value, tree_keyname(config, key), indent
        if isinstance(value, ConfigTree):
            yield from tree_walk(value, indent + "  ")


def tree_dump(tree: ConfigTree) -> str:
    text = []
    for key, value, _fullname, indent in tree_walk(tree):
        if isinstance(value, list):
            if value:
                text.append(f"{indent}{key}:")
                for item in value:
                    text.append(f"{indent}  - {item!r}")
            else:
                text.append(f"{indent}{key}: []")
        elif isinstance(value, dict):
            text.append(f"{indent}{key}:" if value else f"{indent}{key}: {{}}")
        else:
            text.append(f"{indent}{key}: {value!r}")
    return "\n".join(text)


def tree_merge(target: ConfigTree, source: ConfigTree) -> None:
    """Merge the 'source' configuration tree into 'target'.

    Merging is done by adding values from 'source' to 'target' if they
    do not yet exist. Subtrees are merged recursively.
    """
    if not isinstance(target, ConfigTree):
        die("Can't merge trees since 'target' is not type 'plugkit.tree.ConfigTree'")
    if not isinstance(source, ConfigTree):
        die("Can't merge trees since 'source' is not type 'plugkit.tree.ConfigTree'")

    for key, value in source.items():
        if target.get(key, None) is None:
            if isinstance(value, ConfigTree):
                target[key] = ConfigTree()
                tree_merge(target[key], value)
            elif isinstance(value, list):
                target[key] = list(value)
            else:
                target[key] = value
        elif isinstance(value, ConfigTree) and isinstance(target[key], ConfigTree):
            tree_merge(target[key], value)


def tree_update(target: ConfigTree, source: ConfigTree) -> None:
    # This will *overwrite*, not fill up, like tree_merge.
    for key, value in source.items():
        if isinstance(value, dict):
            if not isinstance(target.get(key, None), ConfigTree):
                target[key] = ConfigTree()
            tree_update(target[key], value)  # type: ignore[arg-type]
        else:
            target[key] = value


def tree_update_properties(tree: ConfigTree, properties: tuple) -> None:
    """Override settings using strings of the form ``key.path=value``.

    Missing subtrees along the path are created, so settings of plugins
    can be given before the plugins are applied. Overriding a subtree as
    a whole is rejected.
    """
    for prop in properties:
        if "=" not in prop:
            die(f"Invalid property '{prop}', expected 'property=value'")
        fullname, value = prop.split("=", 1)
        *path, key = fullname.strip().split(".")
        subtree = tree
        for name in path:
            if subtree.get(name, None) is None:
                subtree[name] = ConfigTree()
            subtree = subtree[name]
            if not isinstance(subtree, ConfigTree):
                die(f"Cannot set '{fullname}': '{name}' is not a subtree")
        if isinstance(subtree.get(key, None), ConfigTree):
            die(f"Cannot set '{fullname}': it is a subtree")
        subtree[key] = value.strip()
