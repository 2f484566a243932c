"""
Version information for the EarnWallet SDK.
"""
import importlib.metadata
import pathlib

import tomli

# Installed package metadata first, pyproject.toml for source checkouts
try:
    __version__ = importlib.metadata.version("earnwallet-sdk")
except importlib.metadata.PackageNotFoundError:
    try:
        path = pathlib.Path(__file__).parent.parent / "pyproject.toml"
        with open(path, "rb") as f:
            data = tomli.load(f)
        __version__ = data["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        __version__ = "0.3.0"
