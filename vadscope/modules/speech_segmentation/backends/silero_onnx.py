"""
Silero VAD frame prober (ONNX runtime).

Runs the Silero VAD ONNX graph one window at a time. By default the graph
bundled with the silero-vad pip package is used; pass ``model_path`` to use
another copy.

Requires: pip install onnxruntime silero-vad
"""

from typing import Dict, List, Optional, Union
from pathlib import Path
import importlib.util
import logging

import numpy as np

logger = logging.getLogger("vadscope")

MODEL_FILE_NAME = "silero_vad.onnx"


def find_bundled_model() -> Path:
    """
    Locate the ONNX graph shipped inside the silero-vad package.

    Uses the import spec only, so torch (a silero-vad import-time
    dependency) is never imported.

    Raises:
        FileNotFoundError: If silero-vad is not installed or has no ONNX graph
    """
    spec = importlib.util.find_spec("silero_vad")
    if spec is None or spec.origin is None:
        raise FileNotFoundError(
            "silero-vad package not found. Install with: pip install silero-vad"
        )
    model_path = Path(spec.origin).parent / "data" / MODEL_FILE_NAME
    if not model_path.exists():
        raise FileNotFoundError(f"Silero VAD ONNX model not found at {model_path}")
    return model_path


class SileroOnnxProber:
    """
    Silero VAD speech probability model.

    Keeps the model's recurrent state and the tail of the previous window
    (the "context") between calls, so windows must be fed in order.
    ``reset()`` clears both.

    Example:
        prober = SileroOnnxProber()
        prober.reset()
        prob = prober.probe(window, 16000)
    """

    # Samples of the previous window prepended to each input
    CONTEXT_SIZES: Dict[int, int] = {8000: 32, 16000: 64}
    WINDOW_SIZES: Dict[int, int] = {8000: 256, 16000: 512}
    STATE_SHAPE = (2, 1, 128)

    def __init__(
        self,
        model_path: Optional[Union[str, Path]] = None,
        use_gpu: bool = False,
        num_threads: int = 1,
        **kwargs
    ):
        """
        Initialize the prober. The ONNX session is created lazily.

        Args:
            model_path: Path to a Silero VAD ONNX file. None = bundled model.
            use_gpu: Prefer CUDAExecutionProvider when onnxruntime offers it
            num_threads: Intra/inter-op thread count for the session
            **kwargs: Absorbs factory-injected parameters harmlessly
        """
        self.model_path = Path(model_path) if model_path is not None else None
        self.use_gpu = bool(use_gpu)
        self.num_threads = int(num_threads)

        self._session = None
        self._state = np.zeros(self.STATE_SHAPE, dtype=np.float32)
        self._context: Optional[np.ndarray] = None
        self._last_sr: Optional[int] = None

    @property
    def name(self) -> str:
        return "silero"

    @property
    def display_name(self) -> str:
        return "Silero VAD (ONNX)"

    def _ensure_model(self) -> None:
        """Create the ONNX session if not already created."""
        if self._session is not None:
            return

        try:
            import onnxruntime as ort
        except ImportError:
            raise ImportError(
                "Silero ONNX prober requires onnxruntime. Install with:\n"
                "pip install onnxruntime"
            )

        model_path = self.model_path or find_bundled_model()

        providers = ['CPUExecutionProvider']
        if self.use_gpu:
            available_providers = ort.get_available_providers()
            if 'CUDAExecutionProvider' in available_providers:
                providers = ['CUDAExecutionProvider', 'CPUExecutionProvider']

        options = ort.SessionOptions()
        options.inter_op_num_threads = self.num_threads
        options.intra_op_num_threads = self.num_threads

        logger.debug(f"Loading Silero VAD ONNX model from: {model_path}")
        try:
            self._session = ort.InferenceSession(
                str(model_path),
                sess_options=options,
                providers=providers
            )
        except Exception as e:
            logger.error(f"Failed to load Silero VAD ONNX model: {e}", exc_info=True)
            raise
        logger.debug(f"Silero VAD ONNX loaded (providers: {providers})")

    def reset(self) -> None:
        """Zero the recurrent state and forget the previous window."""
        self._state = np.zeros(self.STATE_SHAPE, dtype=np.float32)
        self._context = None
        self._last_sr = None

    def probe(self, window: np.ndarray, sample_rate: int) -> float:
        """Return the speech probability of one window."""
        if sample_rate not in self.WINDOW_SIZES:
            raise ValueError(
                f"Unsupported sampling rate {sample_rate}; expected one of "
                f"{sorted(self.WINDOW_SIZES)}"
            )
        expected = self.WINDOW_SIZES[sample_rate]
        x = np.asarray(window, dtype=np.float32).reshape(-1)
        if x.shape[0] != expected:
            raise ValueError(
                f"Window must be {expected} samples at {sample_rate} Hz, got {x.shape[0]}"
            )

        self._ensure_model()

        # Sampling rate change invalidates the recurrent memory
        if self._last_sr is not None and self._last_sr != sample_rate:
            self.reset()

        context_size = self.CONTEXT_SIZES[sample_rate]
        if self._context is None:
            self._context = np.zeros(context_size, dtype=np.float32)

        model_input = np.concatenate([self._context, x])[np.newaxis, :]
        ort_inputs = {
            "input": model_input,
            "state": self._state,
            "sr": np.array(sample_rate, dtype=np.int64),
        }
        output, state = self._session.run(None, ort_inputs)

        self._state = state
        self._context = model_input[0, -context_size:]
        self._last_sr = sample_rate

        return float(np.asarray(output).reshape(-1)[0])

    def cleanup(self) -> None:
        """Release the ONNX session."""
        if self._session is not None:
            del self._session
            self._session = None
            logger.debug("Silero VAD ONNX session released")
        self.reset()

    def get_supported_sample_rates(self) -> List[int]:
        return sorted(self.WINDOW_SIZES)

    def __repr__(self) -> str:
        return f"SileroOnnxProber(model_path={self.model_path!r}, use_gpu={self.use_gpu})"
