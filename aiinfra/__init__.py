# -*- coding: utf-8 -*-
"""Client-side sync and cache-invalidation layer for AI providers."""

__version__ = "0.1.0"
