# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Main entry point for running blip_utils as a module."""

from blip_utils.cli import main

if __name__ == "__main__":
    main()
