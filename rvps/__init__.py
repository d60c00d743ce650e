"""Reference Value Provider Service: provenance verification, storage and gRPC serving of reference values, plus Key Broker Service admin helpers."""

__version__ = "0.1.0"