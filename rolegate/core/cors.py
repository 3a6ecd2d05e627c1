from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rolegate.core.constants import CLIENT_PRINCIPAL_HEADER
from rolegate.core.settings import get_settings


def add_cors_middleware(app: FastAPI):
    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", CLIENT_PRINCIPAL_HEADER],
    )
