"""
Registry of computation apps.

Apps are registered by name at startup, either directly or from a YAML
manifest mapping names to import paths:

    apps:
      echo: oracle_signer.signing_protocol.apps.echo.EchoApp
      price: oracle_signer.signing_protocol.apps.price:PriceApp

An import path may name a ``ComputationApp`` subclass (instantiated with no
arguments) or an already constructed instance.
"""

from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Dict, Final, Iterator, Optional, Union

import yaml

from .config import APPS_MANIFEST_ENV_VAR
from .exceptions import ConfigurationError, ModuleNotFound
from .interfaces import ComputationApp
from .security import keccak256

logger = logging.getLogger(__name__)

BUILTIN_APPS: Final[dict[str, str]] = {
    "echo": "oracle_signer.signing_protocol.apps.echo.EchoApp",
    "price": "oracle_signer.signing_protocol.apps.price.PriceApp",
}


def app_id_for(name: str) -> str:
    """Deterministic app id: keccak256(name) as a decimal string."""
    if not isinstance(name, str):
        raise TypeError(f"app name must be str, got {type(name).__name__}")
    return str(int.from_bytes(keccak256(name.encode("utf-8")), "big"))


def _split_import_path(import_path: str) -> tuple[str, str]:
    if ":" in import_path:
        module_path, _, attr = import_path.partition(":")
    else:
        module_path, _, attr = import_path.rpartition(".")
    if not module_path or not attr:
        raise ConfigurationError(f"Invalid app import path: {import_path!r}")
    return module_path, attr


def load_app(import_path: str) -> ComputationApp:
    """
    Import and instantiate the app named by ``import_path``.

    Raises:
        ConfigurationError: If the path cannot be imported or does not name
            a ComputationApp
    """
    module_path, attr = _split_import_path(import_path)
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(
            f"Unable to import app module {module_path!r}"
        ) from exc

    try:
        target = getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(
            f"App {attr!r} not found in module {module_path!r}"
        ) from exc

    if isinstance(target, type):
        if not issubclass(target, ComputationApp):
            raise ConfigurationError(
                f"App class {target.__name__!r} does not implement ComputationApp"
            )
        target = target()

    if not isinstance(target, ComputationApp):
        raise ConfigurationError(
            f"App reference {import_path!r} did not resolve to a ComputationApp"
        )

    return target


class AppRegistry:
    """Name -> ComputationApp mapping used by the signing pipeline."""

    def __init__(self, apps: Optional[Dict[str, ComputationApp]] = None):
        self._apps: Dict[str, ComputationApp] = {}
        for name, app in (apps or {}).items():
            self.register(name, app)

    def register(self, name: str, app: Union[ComputationApp, str]) -> None:
        """
        Register ``app`` under ``name``, replacing any previous entry.

        ``app`` may be an instance or an import path.
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"App name must be a non-empty string, got {name!r}")
        if isinstance(app, str):
            app = load_app(app)
        if not isinstance(app, ComputationApp):
            raise TypeError(f"{app!r} does not implement ComputationApp")
        if name in self._apps:
            logger.info("Replacing registered app %s", name)
        self._apps[name] = app

    def unregister(self, name: str) -> None:
        self._apps.pop(name, None)

    def resolve(self, name: str) -> ComputationApp:
        """
        Look up an app by name.

        Raises:
            ModuleNotFound: If no app is registered under ``name``
        """
        try:
            return self._apps[name]
        except (KeyError, TypeError):
            raise ModuleNotFound(name) from None

    def names(self) -> list[str]:
        return sorted(self._apps)

    def __contains__(self, name: object) -> bool:
        return name in self._apps

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._apps)

    def load_manifest(self, path: Union[str, Path]) -> None:
        """
        Register every app listed in a YAML manifest.

        Raises:
            ConfigurationError: If the manifest is unreadable or malformed
        """
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read app manifest {path}: {exc}") from exc

        if isinstance(data, dict) and "apps" in data:
            data = data["apps"] or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"App manifest {path} must map app names to import paths"
            )

        for name, import_path in data.items():
            if not isinstance(import_path, str):
                raise ConfigurationError(
                    f"Import path for app {name!r} must be a string"
                )
            self.register(str(name), import_path)
        logger.info("Loaded %d apps from %s", len(data), path)


def default_registry(manifest: Optional[Union[str, Path]] = None) -> AppRegistry:
    """
    Registry with the built-in apps plus any manifest.

    The manifest defaults to ``$ORACLE_SIGNER_APPS_MANIFEST`` when set.
    """
    registry = AppRegistry()
    for name, import_path in BUILTIN_APPS.items():
        registry.register(name, import_path)

    manifest = manifest or os.getenv(APPS_MANIFEST_ENV_VAR) or None
    if manifest:
        registry.load_manifest(manifest)
    return registry
