# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("signcad")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

#: one modeling unit is one metre; parameters are millimetres
MM = 0.001
MM_PER_UNIT = 1000.0
