"""The package and its submodules import cleanly."""
import importlib

import pytest


@pytest.mark.parametrize("module", [
    "navigator_securekv",
    "navigator_securekv.store",
    "navigator_securekv.auth",
    "navigator_securekv.web",
    "navigator_securekv.storage",
    "navigator_securekv.storage.keyring",
])
def test_import(module):
    assert importlib.import_module(module) is not None


def test_public_api():
    import navigator_securekv

    for name in navigator_securekv.__all__:
        assert hasattr(navigator_securekv, name)
