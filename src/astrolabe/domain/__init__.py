# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Pure domain layer: orbital propagation, hierarchy resolution, zone
classification and calendar arithmetic. No file or network I/O.
"""
