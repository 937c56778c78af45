"""
Factory for creating frame prober instances.

Supports lazy loading to avoid import overhead for unused backends.
"""

from typing import Dict, Type, Any, List, Tuple
import importlib
import importlib.util
import logging

from .base import FrameProber

logger = logging.getLogger("vadscope")

# Registry of available backends: name -> class path
_BACKEND_REGISTRY: Dict[str, str] = {
    "silero": "vadscope.modules.speech_segmentation.backends.silero_onnx.SileroOnnxProber",
    "silero-onnx": "vadscope.modules.speech_segmentation.backends.silero_onnx.SileroOnnxProber",
    "sequence": "vadscope.modules.speech_segmentation.backends.sequence.SequenceProber",
}

# Cache for loaded backend classes (avoid repeated imports)
_BACKEND_CACHE: Dict[str, Type] = {}

# Dependency information for each backend
_BACKEND_DEPENDENCIES: Dict[str, Dict[str, Any]] = {
    "silero": {
        "packages": ["onnxruntime", "silero_vad"],
        "install_hint": "pip install onnxruntime silero-vad",
        "always_available": False,
    },
    "sequence": {
        "packages": [],
        "install_hint": "",
        "always_available": True,
    },
}


class FrameProberFactory:
    """
    Factory for creating frame prober instances.

    Example:
        # Default Silero prober
        prober = FrameProberFactory.create("silero")

        # Replay precomputed probabilities
        prober = FrameProberFactory.create("sequence", probabilities=probs)

        # Check availability before creating
        available, hint = FrameProberFactory.is_backend_available("silero")
    """

    @staticmethod
    def list_backends() -> List[str]:
        """Return list of all registered backend names."""
        return list(_BACKEND_REGISTRY.keys())

    @staticmethod
    def list_unique_backends() -> List[str]:
        """Return list of unique backend names (without aliases)."""
        return ["silero", "sequence"]

    @staticmethod
    def is_backend_available(name: str) -> Tuple[bool, str]:
        """
        Check if a backend's dependencies are installed.

        Returns:
            Tuple of (is_available, install_hint)
        """
        if name in _BACKEND_DEPENDENCIES:
            dep_info = _BACKEND_DEPENDENCIES[name]
        else:
            base_name = name.split("-")[0] if "-" in name else name
            if base_name not in _BACKEND_DEPENDENCIES:
                return False, f"Unknown backend: {name}"
            dep_info = _BACKEND_DEPENDENCIES[base_name]

        if dep_info["always_available"]:
            return True, ""

        # Check importability without importing (silero_vad pulls in torch)
        for package in dep_info["packages"]:
            if importlib.util.find_spec(package) is None:
                return False, dep_info["install_hint"]

        return True, ""

    @staticmethod
    def _load_backend_class(name: str) -> Type:
        """
        Lazy load a backend class.

        Raises:
            ValueError: If backend name is unknown
            ImportError: If backend dependencies not installed
        """
        if name in _BACKEND_CACHE:
            return _BACKEND_CACHE[name]

        if name not in _BACKEND_REGISTRY:
            available = FrameProberFactory.list_backends()
            raise ValueError(
                f"Unknown frame prober: '{name}'. "
                f"Available backends: {available}"
            )

        available, hint = FrameProberFactory.is_backend_available(name)
        if not available:
            raise ImportError(
                f"Frame prober '{name}' is not available. {hint}"
            )

        module_name, class_name = _BACKEND_REGISTRY[name].rsplit(".", 1)

        try:
            module = importlib.import_module(module_name)
            backend_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ImportError(
                f"Failed to load frame prober '{name}': {e}"
            ) from e

        _BACKEND_CACHE[name] = backend_class
        return backend_class

    @staticmethod
    def create(name: str = "silero", **kwargs) -> FrameProber:
        """
        Create a frame prober instance.

        Args:
            name: Backend name ('silero', 'silero-onnx', 'sequence')
            **kwargs: Backend-specific parameters

        Raises:
            ValueError: If backend name is unknown
            ImportError: If backend dependencies not installed
        """
        backend_class = FrameProberFactory._load_backend_class(name)

        logger.debug(f"Creating frame prober: {name} with params: {sorted(kwargs)}")
        return backend_class(**kwargs)
