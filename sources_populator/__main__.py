# -*- coding: utf-8 -*-
"""Location: ./sources_populator/__main__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Allow ``python -m sources_populator``.
"""

# First-Party
from sources_populator.cli import main

if __name__ == "__main__":
    main()
