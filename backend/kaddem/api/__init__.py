"""
kaddem.api

Routes FastAPI (transport HTTP) : contrats, étudiants, health, statut système.
"""
