# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""The greeting plugin. Applying it to a project registers the task
``greeting``, which prints a greeting message.

The message can be configured in the project file:

.. code-block:: yaml

   plugins:
     - example.gradle.plugin.greeting
   greeting:
     message: "Hello from {greeting.plugin_id}, running in {HOME}"

"""

from plugkit import config, echo, interpolate1, option

PLUGIN_ID = "example.gradle.plugin.greeting"
TASK_NAME = "greeting"

defaults = config(
    plugin_id=PLUGIN_ID,
    message="Hello from plugin '{greeting.plugin_id}'",
)


def greeting(
    cfg,
    message: option(
        "-m",
        "--message",
        "message",
        default=None,
        help="Print MESSAGE instead of the configured greeting.",  # noqa: F722
    ),
):
    """Print a greeting."""
    # --message is printed as given, only the configured message is
    # interpolated.
    text = message if message is not None else interpolate1(cfg.greeting.message, cfg)
    echo(text)
    return text


def apply(project):
    project.tasks.register(TASK_NAME, greeting)
