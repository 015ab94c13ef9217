"""
Erreurs typées du serveur MCP SGU.

Chaque erreur porte un code stable et des détails sérialisables en JSON,
renvoyés tels quels à l'agent par la couche MCP.
"""

from typing import Any, Dict, Optional


class McpToolError(Exception):
    """Erreur de base remontée par un outil MCP."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class ValidationError(McpToolError):
    """Coordonnées ou géométrie invalides fournies par l'appelant."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR", {"field": field})
        self.field = field


class UpstreamApiError(McpToolError):
    """Le service SGU a répondu en erreur, a expiré ou est injoignable (status 0)."""

    def __init__(
        self,
        message: str,
        status_code: int,
        upstream: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            "UPSTREAM_API_ERROR",
            {"statusCode": status_code, "upstream": upstream, **(details or {})},
        )
        self.status_code = status_code
        self.upstream = upstream


class NotFoundError(McpToolError):
    """Ressource introuvable lors d'une recherche par identifiant."""

    def __init__(self, resource_type: str, identifier: str):
        super().__init__(
            f"{resource_type} not found: {identifier}",
            "NOT_FOUND",
            {"resourceType": resource_type, "identifier": identifier},
        )
        self.resource_type = resource_type
        self.identifier = identifier


def error_payload(exc: Exception) -> Dict[str, Any]:
    """Réponse JSON d'erreur renvoyée à l'agent"""
    if isinstance(exc, McpToolError):
        return {
            "error": True,
            "code": exc.code,
            "message": exc.message,
            "details": exc.details,
        }
    return {
        "error": True,
        "code": "INTERNAL_ERROR",
        "message": str(exc),
        "details": None,
    }
