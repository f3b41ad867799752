# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2024 CONTACT Software GmbH
# All rights reserved.
# https://www.contact-software.com/

"""Plugins that come with plugkit. They are registered in
:py:data:`plugkit.plugin.BUILTIN_PLUGINS` and don't have to be installed
separately.
"""
