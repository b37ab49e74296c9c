"""
Web frontend/backend for the MLFQ simulator
"""
