from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from weekmenu.logic.menu.store_service import MenuStoreService

router = APIRouter(tags=["menu"])


def get_menu_service(request: Request) -> MenuStoreService:
    return request.app.state.menu_service


@router.get("/menu")
def read_menu(service: MenuStoreService = Depends(get_menu_service)):
    """Current week's menu; rolls a stale record over to a fresh week."""
    return service.fetch_current_menu()


@router.post("/menu")
def save_menu(candidate: Any = Body(None), service: MenuStoreService = Depends(get_menu_service)):
    """Replace the whole stored menu with the posted document."""
    service.replace_menu(candidate)
    return {"success": True}
