"""Post-checkout patching of the generated project files."""

from .cleanup import remove_scaffold_dirs
from .dotenv import append_env_lines, augment_env
from .providers import inject_into_text, inject_service_providers

__all__ = [
    "append_env_lines",
    "augment_env",
    "inject_into_text",
    "inject_service_providers",
    "remove_scaffold_dirs",
]
