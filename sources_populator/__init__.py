# -*- coding: utf-8 -*-
"""Location: ./sources_populator/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Sources database populator.

Generates production-scale, referentially consistent fixtures (sources,
applications, endpoints, authentications and RHC connections) against a
running Sources API back end, for load-testing purposes.
"""

__version__ = "1.0.0"
