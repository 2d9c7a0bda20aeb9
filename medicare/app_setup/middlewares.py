"""
Middlewares transverses de l'application.
- CORSMiddleware: origines définies par CORS_ORIGINS (le front Vite par défaut est servi ailleurs)
- TrustedHostMiddleware: limite les hôtes acceptés
- ProxyHeadersMiddleware: confiance aux en-têtes X-Forwarded-* (Render, Nginx, etc.)
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from medicare import config


def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=config.ALLOWED_HOSTS + ["*"] if "*" in config.CORS_ORIGINS else config.ALLOWED_HOSTS,
    )
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])
