"""
Dépendances FastAPI: accès aux services construits par la factory (app.state).
Les tests injectent leurs propres implémentations via create_app(...).
"""
from fastapi import Request


def get_gateway(request: Request):
    return request.app.state.gateway


def get_dispatcher(request: Request):
    return request.app.state.dispatcher


def get_processed_store(request: Request):
    return request.app.state.processed
