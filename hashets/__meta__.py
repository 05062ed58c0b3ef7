# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "hashets"
__summary__ = "Hash-based cache busting for static asset directories."
__url__ = "https://github.com/mavolin/hashets"

__version__ = "0.3.0"

__install_requires__ = ["anyio>=4", "blake3>=0.4"]
__tests_require__ = ["pytest>=7"]

__license__ = "MIT License"
