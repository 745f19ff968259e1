from __future__ import annotations

from soporte.models.computador import Computador  # noqa: F401

__all__ = ["Computador"]
