"""
Module orchestration for the terminal-brief dashboard.

Drives every enabled module through setup and display and joins their
fragments into the text printed at shell startup. A module that raises or
times out is logged and skipped; it never takes the other modules or the
dashboard down with it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from terminal_brief.core.config import BriefConfig
from terminal_brief.core.timing import Timings
from terminal_brief.modules.base import BriefModule
from terminal_brief.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)

SLOW_MODULE_SECONDS = 0.1


@dataclass
class WelcomeResult:
    """Complete dashboard output."""
    text: str
    modules: List[str]
    timings: Timings = field(default_factory=Timings)


class WelcomeAggregator:
    """
    Central orchestration for the welcome dashboard.

    Resolves the enabled modules from the registry, runs their lifecycle
    either sequentially or concurrently, and combines their fragments in the
    configured order.
    """

    def __init__(self, registry: ModuleRegistry, config: BriefConfig,
                 timings: Optional[Timings] = None):
        """
        Initialize aggregator.

        Args:
            registry: Registry holding the available modules
            config: Configuration for this invocation
            timings: Collector for per-module durations (creates one if not provided)
        """
        self.registry = registry
        self.config = config
        self.timings = timings if timings is not None else Timings()

    def enabled_modules(self) -> List[BriefModule]:
        return self.registry.get_enabled_modules(self.config)

    async def _run_step(self, module: BriefModule, phase: str,
                        step: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run one lifecycle step of one module with failure isolation.

        Args:
            module: Module being driven
            phase: 'setup', 'display' or 'cleanup' (for logs and timings)
            step: Coroutine factory for the step

        Returns:
            The step's result, or None if it failed or timed out
        """
        deadline = self.config.performance.max_execution_time
        label = f"{phase}_{module.name}"

        with self.timings.measure(label):
            try:
                if deadline > 0:
                    result = await asyncio.wait_for(step(), timeout=deadline)
                else:
                    result = await step()
            except asyncio.TimeoutError:
                logger.warning("Module %s %s timed out after %.2fs",
                               module.name, phase, deadline)
                return None
            except Exception as e:
                logger.error("Failed to %s module %s: %s", phase, module.name, e,
                             exc_info=logger.isEnabledFor(logging.DEBUG))
                return None

        elapsed = self.timings.get(label)
        if elapsed > SLOW_MODULE_SECONDS:
            logger.debug("Module %s %s took %.3fs", module.name, phase, elapsed)
        return result

    async def _run_phase(self, phase: str,
                         make_step: Callable[[BriefModule], Callable[[], Awaitable[Any]]]
                         ) -> List[Any]:
        """Run one phase across the enabled modules, preserving configured order."""
        modules = self.enabled_modules()
        logger.debug("Running %s for %d modules", phase, len(modules))

        if self.config.performance.parallel_execution:
            # gather keeps results in argument order
            return list(await asyncio.gather(
                *(self._run_step(module, phase, make_step(module)) for module in modules)
            ))

        results = []
        for module in modules:
            results.append(await self._run_step(module, phase, make_step(module)))
        return results

    async def setup_modules(self) -> None:
        """Call setup on every enabled module. Failures are logged per module."""
        await self._run_phase("setup", lambda module: lambda: module.setup(self.config))

    async def display_welcome(self) -> str:
        """
        Call display on every enabled module and join the fragments.

        Returns:
            Non-empty fragments joined by newlines, framed by a blank line
            before and after
        """
        with self.timings.measure("display_welcome"):
            results = await self._run_phase(
                "display", lambda module: lambda: module.display(self.config)
            )
        fragments = [text for text in results if text]
        logger.debug("Total welcome display time: %.3fs", self.timings.get("display_welcome"))
        return "\n".join(["", *fragments, ""])

    async def cleanup_modules(self) -> None:
        """Call cleanup on every enabled module."""
        await self._run_phase("cleanup", lambda module: module.cleanup)

    async def aggregate(self) -> WelcomeResult:
        """
        Run the full lifecycle: setup, display, cleanup.

        Main entry point for producing the dashboard.

        Returns:
            WelcomeResult with the composed text and timings
        """
        modules = [module.name for module in self.enabled_modules()]
        logger.debug("Enabled and registered modules: %s", ", ".join(modules))

        try:
            await self.setup_modules()
            text = await self.display_welcome()
        finally:
            await self.cleanup_modules()

        return WelcomeResult(text=text, modules=modules, timings=self.timings)
