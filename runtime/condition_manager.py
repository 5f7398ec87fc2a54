# runtime/condition_manager.py

import importlib
import logging
from collections import Counter

from core.exceptions import UnknownConditionError

logger = logging.getLogger("cloth_solver")


class ConditionModuleManager:
    def __init__(self, module_names):
        self.modules = {}
        counted = Counter(module_names)
        for name, count in counted.items():
            if count > 1:
                logger.warning(f"Condition module '{name}' specified {count} times; using only one instance.")

            try:
                module = importlib.import_module(f"modules.conditions.{name}")
            except ImportError as e:
                logger.error(f"Could not load condition module '{name}': {e}")
                raise UnknownConditionError(name) from e
            if not callable(getattr(module, "build_condition", None)):
                logger.error(f"Condition module '{name}' has no build_condition().")
                raise UnknownConditionError(
                    name, f"Condition module '{name}' does not define build_condition()."
                )
            self.modules[name] = module
            logger.info(f"Loaded condition module: {name}")

    def get_module(self, mod):
        """
        Retrieve a loaded condition module by name.
        """
        if mod in self.modules.keys():
            return self.modules[mod]
        raise KeyError(f"Condition module '{mod}' not found.")

    def build_conditions(self, mesh, global_params):
        """Instantiate one evaluator per loaded module for ``mesh``."""
        return [
            module.build_condition(mesh, global_params)
            for module in self.modules.values()
        ]
