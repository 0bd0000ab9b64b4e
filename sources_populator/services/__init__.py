# -*- coding: utf-8 -*-
"""Location: ./sources_populator/services/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Services of the Sources populator.
"""
