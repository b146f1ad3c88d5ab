# SPDX-FileCopyrightText: Copyright (c) 2026 bxcan_timing contributors
#
# SPDX-License-Identifier: MIT
import sys

from .cli import main

sys.exit(main())
