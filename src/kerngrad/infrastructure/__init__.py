"""
Infrastructure layer: NumPy tensors and backends, the engine, and ops.
"""
