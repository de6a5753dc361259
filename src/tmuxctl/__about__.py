"""Metadata for tmuxctl package."""

from __future__ import annotations

__title__ = "tmuxctl"
__package_name__ = "tmuxctl"
__version__ = "0.1.0"
__description__ = "Drive tmux sessions, windows, panes and the processes inside them"
__email__ = "maintainers@tmuxctl.dev"
__author__ = "tmuxctl contributors"
__github__ = "https://github.com/tmuxctl/tmuxctl"
__docs__ = "https://github.com/tmuxctl/tmuxctl#readme"
__tracker__ = "https://github.com/tmuxctl/tmuxctl/issues"
__pypi__ = "https://pypi.org/project/tmuxctl/"
__license__ = "MIT"
__copyright__ = "Copyright 2026- tmuxctl contributors"
