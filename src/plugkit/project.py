# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""The project model: a project owns a configuration tree and a
collection of named tasks. Plugins are applied to a project by their
identifier and register tasks on it.

Tasks are click commands, and the task collection of a project is a
click group, so running a task is just invoking that group with the
task name and its arguments.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

import click

from plugkit import DuplicateTaskError, UnknownTaskError, config, debug

if TYPE_CHECKING:
    from typing import Any, Callable, Iterable

    from plugkit.tree import ConfigTree


class TaskContainer(click.Group):
    """The tasks of one project, keyed by their unique name.

    Besides its name, a task may be reachable through aliases. Aliases
    are resolved by :py:meth:`find_by_name` and when running tasks, but
    they are not task names of their own.
    """

    def __init__(self: TaskContainer, project: Project, **kwargs: Any) -> None:
        kwargs.setdefault("name", project.name)
        click.Group.__init__(self, **kwargs)
        self.project = project
        self._aliases: dict = {}

    def register(
        self: TaskContainer,
        name: str,
        fn: Callable,
        aliases: Iterable[str] = (),
        help: str | None = None,  # pylint: disable=redefined-builtin
    ) -> click.Command:
        """Create a task named `name` that runs `fn`.

        `register` introspects the signature of `fn` and handles certain
        argument names automatically:

        * ``ctx`` (as first parameter) will pass the :py:class:`Click
          context object <click.Context>`

        * ``cfg`` will pass the configuration tree of the project

        * ``args`` will pass through all remaining command line
          arguments

        All other parameters must be annotated with either
        :py:func:`plugkit.option` or :py:func:`plugkit.argument`.

        A :py:class:`plugkit.DuplicateTaskError` is raised if the name
        or one of the aliases is taken already.
        """
        aliases = list(aliases)
        for taken in [name, *aliases]:
            if self.find_by_name(taken) is not None:
                raise DuplicateTaskError(taken)

        pass_context = pass_config = False
        context_settings = config()
        decorators = []
        sig = inspect.signature(fn, eval_str=True)
        param_names = list(sig.parameters.keys())
        if param_names and param_names[0] == "ctx":
            pass_context = True
            param_names.pop(0)
        for pn in param_names:
            if pn == "cfg":
                pass_config = True
                continue
            if pn == "args":
                context_settings.ignore_unknown_options = True
                context_settings.allow_extra_args = True
                decorators.append(click.argument("args", nargs=-1))
                continue
            param = sig.parameters[pn]
            if param.annotation is inspect.Parameter.empty:
                raise TypeError(
                    f"Parameter '{pn}' of task '{name}' needs an option()"
                    " or argument() annotation"
                )
            decorators.append(param.annotation(pn))

        project = self.project

        def run_task(*args: Any, **kwargs: Any) -> Any:
            if pass_config:
                kwargs["cfg"] = project.cfg
            if pass_context:
                return fn(click.get_current_context(), *args, **kwargs)
            return fn(*args, **kwargs)

        task_object = click.Command(
            name,
            callback=run_task,
            help=help if help is not None else inspect.getdoc(fn),
            context_settings=dict(context_settings),
        )
        # click.option and click.argument append to the params of a
        # command object, so the parameters keep their declaration order.
        for decorator in decorators:
            decorator(task_object)
        self.add_command(task_object, name)
        for alias in aliases:
            self._aliases[alias] = task_object
        debug(f"registered task '{name}' in project '{project.name}'")
        return task_object

    def task(self: TaskContainer, name: str | None = None, **kwargs: Any) -> Callable:
        """Decorator form of :py:meth:`register`.

        .. code-block:: python

           @project.tasks.task(aliases=["hi"])
           def hello(cfg):
               echo("Hello")

        Without an explicit `name`, the task is named after the function,
        with underscores replaced by dashes.
        """

        def task_decorator(fn: Callable) -> click.Command:
            task_name = name or fn.__name__.replace("_", "-")
            return self.register(task_name, fn, **kwargs)

        return task_decorator

    def find_by_name(self: TaskContainer, name: str) -> click.Command | None:
        """Return the task named `name`, or ``None``."""
        cmd = self.commands.get(name, None)
        if cmd is None:
            cmd = self._aliases.get(name, None)
        return cmd

    def get_by_name(self: TaskContainer, name: str) -> click.Command:
        """Return the task named `name` or raise
        :py:class:`plugkit.UnknownTaskError`.
        """
        cmd = self.find_by_name(name)
        if cmd is None:
            raise UnknownTaskError(name)
        return cmd

    def names(self: TaskContainer) -> list[str]:
        return sorted(self.commands)

    def get_command(
        self: TaskContainer, ctx: click.Context, cmd_name: str
    ) -> click.Command | None:
        return self.find_by_name(cmd_name)

    def __contains__(self: TaskContainer, name: object) -> bool:
        return name in self.commands


class Project:
    """A buildable unit that owns a configuration tree and its tasks.

    A project starts out without any tasks; tasks are added by applying
    plugins:

    >>> project = Project("demo")
    >>> project.apply("example.gradle.plugin.greeting")
    >>> project.tasks.find_by_name("greeting")
    <Command greeting>

    """

    def __init__(
        self: Project, name: str = "project", cfg: ConfigTree | None = None
    ) -> None:
        self.name = name
        self.cfg = cfg if cfg is not None else config()
        self.plugins: list[str] = []
        self.tasks = TaskContainer(self)

    def __repr__(self: Project) -> str:
        return f"<Project {self.name!r}>"

    def apply(self: Project, plugin_id: str) -> None:
        """Apply the plugin identified by `plugin_id` to this project."""
        # Import here to avoid an import cycle
        from plugkit.plugin import apply_plugin  # pylint: disable=cyclic-import

        apply_plugin(self, plugin_id)

    def has_plugin(self: Project, plugin_id: str) -> bool:
        return plugin_id in self.plugins

    def run(self: Project, name: str, *args: str) -> Any:
        """Run the task `name`, passing `args` as its command line
        arguments, and return what the task returns.
        """
        task_object = self.tasks.get_by_name(name)
        return self.tasks.main(
            args=[task_object.name, *args],
            prog_name=self.name,
            standalone_mode=False,
            obj=self,
        )
