# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Static sub-commands for the blip-utils CLI."""
