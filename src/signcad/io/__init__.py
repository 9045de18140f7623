"""Export utilities for signcad assemblies."""

import logging
import os
from typing import Iterable, List

from .stl import write_stl, stl_bytes
from .threemf import write_3mf, threemf_bytes

logger = logging.getLogger(__name__)

WRITERS = {
    'stl': write_stl,
    '3mf': write_3mf,
}


def export_assembly(assembly, out_dir, formats: Iterable[str] = ('stl',),
                    prefix: str = '') -> List[str]:
    """Write every part of ``assembly`` to ``out_dir``; returns the paths.

    Files are named ``<prefix><part>.<format>``.
    """

    formats = [f.lower() for f in formats]
    unknown = [f for f in formats if f not in WRITERS]
    if unknown:
        raise ValueError(f"unsupported export format(s): {', '.join(unknown)}")
    os.makedirs(out_dir, exist_ok=True)

    written = []
    for name, solid in assembly.items():
        if solid.is_empty:
            logger.warning("skipping empty part %s", name)
            continue
        for fmt in formats:
            path = os.path.join(out_dir, f"{prefix}{name}.{fmt}")
            WRITERS[fmt](solid, path)
            logger.info("wrote %s", path)
            written.append(path)
    return written


__all__ = ['write_stl', 'stl_bytes', 'write_3mf', 'threemf_bytes',
           'export_assembly', 'WRITERS']
