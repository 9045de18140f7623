"""Boolean engines for signcad solids.

Each engine module exposes ``ENGINE_NAME``, ``is_available()`` and
``solid_boolean(a, b, operation)`` taking realized solids and one of
``'union'``, ``'difference'`` or ``'intersection'``.
"""

__all__ = []

try:
    from . import trimesh_engine as trimesh
except Exception:  # optional dependency
    trimesh = None
else:
    __all__.append('trimesh')

ENGINE_REGISTRY = {}
if trimesh is not None:
    ENGINE_REGISTRY['trimesh'] = trimesh

DEFAULT_ENGINE = 'trimesh'


def get_engine(name: str = DEFAULT_ENGINE):
    return ENGINE_REGISTRY.get(name)


__all__.extend(['ENGINE_REGISTRY', 'DEFAULT_ENGINE', 'get_engine'])
