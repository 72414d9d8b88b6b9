"""
Prompt Loader - Loads and manages prompts from text files with hot reloading support.

Prompts are organized in subdirectories:
- level_designer/ - Level metadata prompts (differences + image prompts)
- image_generator/ - Framing for base and modified image requests

Prompts are loaded at startup and reloaded when a file changes on disk.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class PromptLoader:
    """Loads and caches prompts from text files with hot reloading support."""

    def __init__(self, prompts_dir: Optional[Path] = None):
        """
        Initialize the prompt loader.

        Args:
            prompts_dir: Directory containing prompt files. If None, uses the
                        prompts/ directory next to this module.
        """
        if prompts_dir is None:
            prompts_dir = Path(__file__).parent / "prompts"

        self.prompts_dir = Path(prompts_dir)
        self._cache: Dict[str, str] = {}
        self._file_timestamps: Dict[str, float] = {}

        self.reload_all()

    def _get_prompt_path(self, category: str, filename: str) -> Path:
        return self.prompts_dir / category / filename

    def _read_prompt_file(self, category: str, filename: str) -> str:
        """Read a prompt file and cache its timestamp."""
        path = self._get_prompt_path(category, filename)
        content = path.read_text(encoding="utf-8")
        self._file_timestamps[f"{category}/{filename}"] = path.stat().st_mtime
        return content

    def get_prompt(self, category: str, filename: str, reload: bool = False) -> str:
        """
        Get a prompt from cache or file.

        Args:
            category: Subdirectory name (e.g., 'level_designer')
            filename: Prompt filename (e.g., 'system_prompt.txt')
            reload: If True, force reload from file even if cached

        Returns:
            Prompt content as string
        """
        cache_key = f"{category}/{filename}"
        path = self._get_prompt_path(category, filename)

        needs_reload = reload or cache_key not in self._cache

        # Hot reload: check if file has been modified since last load
        if not needs_reload and path.exists():
            if path.stat().st_mtime > self._file_timestamps.get(cache_key, 0):
                needs_reload = True
                logger.info(f"Hot reloading modified prompt: {cache_key}")

        if needs_reload:
            if path.exists():
                logger.debug(f"Loading prompt: {cache_key}")
                self._cache[cache_key] = self._read_prompt_file(category, filename)
            elif cache_key in self._cache:
                logger.warning(
                    f"Prompt file deleted but using cached version: {cache_key}"
                )
            else:
                raise FileNotFoundError(
                    f"Prompt file not found: {path}\n"
                    f"Expected location: {self.prompts_dir}/{category}/{filename}"
                )

        return self._cache[cache_key]

    def reload_all(self):
        """Reload all prompts from files."""
        logger.info(f"Loading prompts from: {self.prompts_dir}")
        self._cache.clear()
        self._file_timestamps.clear()

        if not self.prompts_dir.exists():
            logger.warning(f"Prompts directory does not exist: {self.prompts_dir}")
            return

        loaded_count = 0
        for category_dir in self.prompts_dir.iterdir():
            if not category_dir.is_dir():
                continue
            for prompt_file in category_dir.glob("*.txt"):
                cache_key = f"{category_dir.name}/{prompt_file.name}"
                try:
                    self._cache[cache_key] = self._read_prompt_file(
                        category_dir.name, prompt_file.name
                    )
                    loaded_count += 1
                except OSError as e:
                    logger.error(f"Failed to load prompt {cache_key}: {e}")

        logger.info(f"Loaded {loaded_count} prompt file(s)")


# Global instance, created on first use
_loader: Optional[PromptLoader] = None


def get_loader() -> PromptLoader:
    """Get the global prompt loader instance."""
    global _loader
    if _loader is None:
        _loader = PromptLoader()
    return _loader
