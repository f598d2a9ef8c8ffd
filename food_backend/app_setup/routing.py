"""
Politique de lecture du corps des requêtes.
- RawBodyRoute: capture les octets bruts dans request.state.raw_body avant le handler.
  Réservée au webhook Stripe (la signature porte sur les octets exacts).
- Toutes les autres routes utilisent APIRoute (corps JSON validé par pydantic).
"""
from typing import Callable, Iterable, Iterator

from fastapi import Request, Response
from fastapi.routing import APIRoute
from starlette.routing import BaseRoute


class RawBodyRoute(APIRoute):
    def get_route_handler(self) -> Callable:
        original_handler = super().get_route_handler()

        async def raw_body_handler(request: Request) -> Response:
            request.state.raw_body = await request.body()
            return await original_handler(request)

        return raw_body_handler


def iter_routes(routes: Iterable[BaseRoute]) -> Iterator[BaseRoute]:
    """
    Parcourt les routes à plat, en descendant dans les routers inclus
    (selon la version de FastAPI, include_router garde un noeud par router).
    """
    for route in routes:
        if isinstance(route, APIRoute):
            yield route
            continue
        nested = getattr(route, "routes", None)
        if nested is None:
            nested = getattr(getattr(route, "router", None), "routes", None)
        if nested is None:
            yield route
        else:
            yield from iter_routes(nested)


def raw_body_paths(app) -> set:
    """Retourne {(méthode, chemin)} des routes qui reçoivent le corps brut."""
    return {
        (method, route.path)
        for route in iter_routes(app.routes)
        if isinstance(route, RawBodyRoute)
        for method in route.methods
    }
