"""
Plugin loader for handler packages.
"""

import importlib.util
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .bot import Bot

logger = logging.getLogger(__name__)

BOT_ROOT = Path(__file__).parent.parent
HANDLERS_DIR = BOT_ROOT / "handlers"


class PluginLoader:
    """
    Discovers handler packages in subdirectories and registers their routes.

    Each handler folder must contain:
    - routes.py with a register_routes(bot) function
    """

    def __init__(self, root_dir: Path | None = None, allowed_handlers: list[str] | None = None):
        self.root_dir = root_dir if root_dir is not None else HANDLERS_DIR
        self.allowed_handlers = allowed_handlers
        self.excluded_dirs = {'__pycache__', '.git', '.venv', '.tmp'}

    def discover_handlers(self) -> list[str]:
        """
        Find all directories that contain a routes module.

        Returns:
            Sorted list of handler directory names
        """
        handlers = []

        if not self.root_dir.is_dir():
            logger.warning(f"Handlers directory not found: {self.root_dir}")
            return handlers

        for item in sorted(self.root_dir.iterdir()):
            if not item.is_dir():
                continue
            if item.name in self.excluded_dirs or item.name.startswith('.'):
                continue
            if self.allowed_handlers is not None and item.name not in self.allowed_handlers:
                continue

            if (item / "routes.py").exists():
                handlers.append(item.name)
                logger.debug(f"Discovered handlers: {item.name}")

        return handlers

    def load_handler(self, name: str, bot: "Bot") -> bool:
        """
        Load a handler package and let it register its routes on ``bot``.

        Returns:
            True if the routes were registered
        """
        routes_path = self.root_dir / name / "routes.py"

        if not routes_path.exists():
            logger.error(f"Routes file not found: {routes_path}")
            return False

        try:
            spec = importlib.util.spec_from_file_location(f"handlers.{name}", routes_path)
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)

            register = getattr(module, 'register_routes', None)
            if not callable(register):
                logger.error(f"No register_routes() in {name}/routes.py")
                return False

            before = len(bot.router.routes)
            register(bot)
            logger.info(
                f"Loaded handlers: {name} ({len(bot.router.routes) - before} routes)"
            )
            return True

        except Exception as e:
            logger.exception(f"Failed to load handlers '{name}': {e}")

        return False

    def load_all(self, bot: "Bot") -> list[str]:
        """
        Load every discovered handler package, in name order.

        Returns:
            Names of the packages that registered successfully
        """
        return [name for name in self.discover_handlers() if self.load_handler(name, bot)]
