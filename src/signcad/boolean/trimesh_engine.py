"""Trimesh-backed boolean engine for signcad solids.

Solids are converted to ``trimesh.Trimesh`` instances and dispatched via
:mod:`trimesh.boolean`.  Availability depends on both the ``trimesh``
package and at least one boolean backend supported by ``trimesh``
(``manifold3d`` is the one signcad installs; Blender also works).
"""

from __future__ import annotations

import numpy as np

try:
    import trimesh
except ImportError:  # pragma: no cover - optional dependency
    trimesh = None  # type: ignore[assignment]

from signcad.solid import Solid

ENGINE_NAME = "trimesh"


def engines_available() -> set[str]:
    """Return the set of trimesh boolean backends that are operational."""

    if trimesh is None:  # pragma: no cover - optional dependency
        return set()
    return set(trimesh.boolean.engines_available)


def is_available(backend: str | None = None) -> bool:
    """Check whether the engine can run (trimesh + backend present)."""

    available = engines_available()
    if not available:
        return False
    if backend is None:
        return True
    return backend in available


def _solid_to_mesh(sld: Solid) -> "trimesh.Trimesh":
    mesh = sld.to_trimesh()
    mesh.remove_unreferenced_vertices()
    return mesh


def solid_boolean(a: Solid, b: Solid, operation: str, *,
                  backend: str | None = None) -> Solid:
    """Perform a boolean between ``a`` and ``b`` using trimesh.

    Raises ``RuntimeError`` when no backend is usable or the backend
    fails; the compositor turns that into a non-fatal diagnostic.
    """

    if trimesh is None:  # pragma: no cover - optional dependency
        raise RuntimeError("trimesh is not installed; install trimesh to enable this engine")

    available = engines_available()
    if backend is not None and backend not in available:
        raise RuntimeError(
            f"trimesh backend '{backend}' is not available (available: {available})"
        )
    if backend is None and not available:
        raise RuntimeError(
            "no trimesh boolean backends are available; install manifold3d"
        )

    mesh_a = _solid_to_mesh(a)
    mesh_b = _solid_to_mesh(b)

    op = operation.lower()
    try:
        if op == 'union':
            result = trimesh.boolean.union([mesh_a, mesh_b], engine=backend, check_volume=False)
        elif op == 'intersection':
            result = trimesh.boolean.intersection([mesh_a, mesh_b], engine=backend, check_volume=False)
        elif op == 'difference':
            result = trimesh.boolean.difference([mesh_a, mesh_b], engine=backend, check_volume=False)
        else:
            raise RuntimeError(f"unsupported boolean operation '{operation}' for trimesh engine")
    except RuntimeError:
        raise
    except Exception as exc:
        raise RuntimeError(f"trimesh boolean operation failed: {exc}") from exc

    if result is None or len(result.faces) == 0:
        return Solid.empty(a.tag)

    return Solid(np.asarray(result.vertices), np.asarray(result.faces), tag=a.tag,
                 metadata={'procedure': f'{ENGINE_NAME}:{op}'})


__all__ = ['ENGINE_NAME', 'is_available', 'solid_boolean', 'engines_available']
