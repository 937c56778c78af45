"""
Frame prober backend implementations.

Available backends:
- silero: Silero VAD ONNX graph run with onnxruntime
- sequence: Replays precomputed probabilities
"""

# Backends are lazily imported via factory to avoid unnecessary dependencies
