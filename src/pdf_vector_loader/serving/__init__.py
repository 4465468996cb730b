"""
Serving — FastAPI application whose startup runs the PDF ingestion.

The app exposes liveness (``/health``) and readiness (``/ready``) probes;
readiness stays 503 until ingestion has completed.
"""
