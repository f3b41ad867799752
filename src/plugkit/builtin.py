# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""Tasks the command line front-end adds to every project."""

import click

from plugkit.project import Project

PLUGIN_ID = "plugkit.builtin"


def list_tasks(ctx):
    """List the tasks of this project."""
    tasks = ctx.find_object(Project).tasks
    names = tasks.names()
    width = max((len(name) for name in names), default=0)
    for name in names:
        short_help = tasks.get_by_name(name).get_short_help_str(limit=60)
        click.echo(f"{name.ljust(width)}  {short_help}".rstrip())


def apply(project):
    project.tasks.register("tasks", list_tasks)
