"""
Module registry for terminal-brief.

Maps module names to instances. The registry is constructed explicitly at
startup and handed to the orchestrator; there is no process-wide instance.
"""

import logging
from typing import Dict, List, Optional

from terminal_brief.core.config import BriefConfig
from .base import BriefModule

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Registry of available dashboard modules, keyed by name."""

    def __init__(self):
        self.modules: Dict[str, BriefModule] = {}

    def register(self, module: BriefModule) -> None:
        """Register a module. Re-registering a name replaces the earlier module."""
        if module.name in self.modules:
            logger.debug("Replacing registered module: %s", module.name)
        self.modules[module.name] = module
        logger.debug("Registered module: %s", module.name)

    def get(self, name: str) -> Optional[BriefModule]:
        """Get a module by name."""
        return self.modules.get(name)

    def all(self) -> List[BriefModule]:
        """Get all registered modules in registration order."""
        return list(self.modules.values())

    def names(self) -> List[str]:
        return list(self.modules)

    def get_enabled_modules(self, config: BriefConfig) -> List[BriefModule]:
        """
        Resolve the enabled modules in configured order.

        Names with no registered module are skipped.

        Args:
            config: Configuration holding enabled_modules

        Returns:
            Modules in the order of config.enabled_modules
        """
        enabled = []
        for name in config.enabled_modules:
            module = self.modules.get(name)
            if module is None:
                logger.debug("Enabled module %s is not registered, skipping", name)
                continue
            enabled.append(module)
        return enabled

    def __contains__(self, name: str) -> bool:
        return name in self.modules

    def __len__(self) -> int:
        return len(self.modules)
