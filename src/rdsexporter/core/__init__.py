"""Core domain: models, ports, encoders and the telemetry feeds."""
