"""Environment-selected collaborator adapters."""

import importlib
import os


class AdapterRegistry:
    """Builds, once, the adapter named by an environment variable.

    ``adapters`` maps each accepted name to a ``"module:ClassName"`` path. The
    module is imported only when its adapter is selected, so optional
    dependencies of other adapters are never loaded.
    """

    def __init__(self, kind, env_var, default, adapters):
        self.kind = kind
        self.env_var = env_var
        self.default = default
        self.adapters = dict(adapters)
        self._instance = None

    def get(self):
        if self._instance is None:
            name = os.environ.get(self.env_var, self.default)
            if name not in self.adapters:
                raise ValueError(f"Unknown {self.kind} adapter: {name}")

            module_path, _, class_name = self.adapters[name].partition(":")
            adapter_cls = getattr(importlib.import_module(module_path), class_name)
            self._instance = adapter_cls()
        return self._instance

    def reset(self):
        self._instance = None
