"""
API gateway: FastAPI app, orchestration and service wiring.
"""
