# FILE: cepoka/appwrite_client.py
"""
Appwrite project wiring: collection ids and the shared ``Databases`` service.

Server-side jobs authenticate with an API key instead of a browser session.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from appwrite.client import Client
from appwrite.services.databases import Databases

from . import settings


@dataclass(frozen=True)
class AppwriteConfig:
    database_id: str
    products_collection_id: str
    categories_collection_id: str
    stock_products_collection_id: str
    stock_movements_collection_id: str
    storage_id: str


appwrite_config = AppwriteConfig(
    database_id=settings.APPWRITE_DATABASE_ID,
    products_collection_id=settings.APPWRITE_PRODUCTS_COLLECTION_ID,
    categories_collection_id=settings.APPWRITE_CATEGORIES_COLLECTION_ID,
    stock_products_collection_id=settings.APPWRITE_STOCK_PRODUCTS_COLLECTION_ID,
    stock_movements_collection_id=settings.APPWRITE_STOCK_MOVEMENTS_COLLECTION_ID,
    storage_id=settings.APPWRITE_STORAGE_ID,
)


def create_client(
    endpoint: str = settings.APPWRITE_ENDPOINT,
    project_id: str = settings.APPWRITE_PROJECT_ID,
    api_key: str = settings.APPWRITE_API_KEY,
) -> Client:
    client = Client().set_endpoint(endpoint).set_project(project_id)
    if api_key:
        client.set_key(api_key)
    return client


_databases: Optional[Databases] = None


def get_databases() -> Databases:
    global _databases
    if _databases is None:
        _databases = Databases(create_client())
    return _databases
