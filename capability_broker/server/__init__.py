"""FastAPI server exposing the broker's control-plane API."""
