"""Key sources for encryption key discovery.

Each bundled source registers itself with the KeySourceRegistry when this
package is imported.
"""

from .base import KeySource, resolve_key
from .executable import ExecutableKeySource
from .explicit import ExplicitKeySource
from .header import PngHeaderKeySource
from .manifest import ManifestKeySource

# Auto-register with the registry
from ..registry import KeySourceRegistry

KeySourceRegistry.register_factory(ExplicitKeySource.name, ExplicitKeySource)
KeySourceRegistry.register_factory(ManifestKeySource.name, ManifestKeySource)
KeySourceRegistry.register_factory(ExecutableKeySource.name, ExecutableKeySource)
KeySourceRegistry.register_factory(PngHeaderKeySource.name, PngHeaderKeySource)

__all__ = [
    "KeySource",
    "resolve_key",
    "ExecutableKeySource",
    "ExplicitKeySource",
    "ManifestKeySource",
    "PngHeaderKeySource",
]
