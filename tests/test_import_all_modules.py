import importlib
import pkgutil

import pytest


def iter_modules(base_pkg="soporte"):
    pkg = importlib.import_module(base_pkg)
    for m in pkgutil.walk_packages(pkg.__path__, prefix=f"{base_pkg}."):
        yield m.name


@pytest.mark.parametrize("modname", list(iter_modules()))
def test_import_module(modname):
    """Importar cada submódulo falla si hay errores graves de import."""
    importlib.import_module(modname)
