"""Namespace for the built-in pdfsuite tools."""

from __future__ import annotations

from .common.pipeline import registry


def load_builtin_plugins() -> None:
    from . import organize  # noqa: F401  # merge, split, rotate and page organisation
    from . import convert_to  # noqa: F401
    from . import convert_from  # noqa: F401
    from . import security  # noqa: F401
    from . import edit  # noqa: F401
    from . import imaging  # noqa: F401
    from . import advanced  # noqa: F401


__all__ = ["registry", "load_builtin_plugins"]
