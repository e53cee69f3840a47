"""
Client list API.

The enrollment form offers these names; export filters match on them.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from auth.dependencies import require_admin
from auth.models import User
from dependencies import get_client_store
from exceptions import NotFoundError
from models.client import Client, ClientCreate
from models.common import parse_record_id
from records.client_store import ClientStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[Client])
async def list_clients(store: ClientStore = Depends(get_client_store)):
    return [Client.model_validate(c) for c in await store.list_clients()]


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    client: ClientCreate,
    current_user: User = Depends(require_admin),
    store: ClientStore = Depends(get_client_store),
):
    created = await store.create(client.name)
    logger.info(f"Client '{created['name']}' added by {current_user.id}")
    return Client.model_validate(created)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str,
    current_user: User = Depends(require_admin),
    store: ClientStore = Depends(get_client_store),
):
    if not await store.delete(parse_record_id(client_id, "client")):
        raise NotFoundError("Client not found", resource="client")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
