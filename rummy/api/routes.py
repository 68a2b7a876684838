"""API routes."""

import uuid

from fastapi import APIRouter, HTTPException, Query, WebSocket

from rummy.api.game_handler import HostController
from rummy.api.responses import (
    CreateGameRequest,
    CreateGameResponse,
    GameInfo,
    PhaseInfo,
    PhaseListResponse,
    PlayerInfo,
    RequirementInfo,
)
from rummy.api.websocket import websocket_manager
from rummy.models.enums import GameState
from rummy.models.phase import STANDARD_PHASES
from rummy.services.phase_provider import default_provider

router = APIRouter()


def _get_table_or_404(game_id: str) -> HostController:
    table = websocket_manager.get_table(game_id)
    if table is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return table


def _require_host(table: HostController, player_id: str) -> None:
    if player_id != table.host_id:
        raise HTTPException(status_code=403, detail="Only the host can do this")


def _game_info(table: HostController) -> GameInfo:
    view = table.view
    current = view.current_player if view.state != GameState.LOBBY else None
    return GameInfo(
        id=table.game_id,
        state=view.state.value,
        round_number=view.round_number,
        theme=table.theme,
        lobby=list(view.lobby),
        players=[
            PlayerInfo(
                id=p.id,
                name=p.name,
                is_bot=p.is_bot,
                phase=p.phase_index + 1,
                score=p.score,
                has_laid_down=p.has_laid_down,
                card_count=len(p.hand),
            )
            for p in view.players
        ],
        current_player_id=current.id if current else None,
        deck_size=view.deck_size,
    )


@router.post("/games")
async def create_game(request: CreateGameRequest) -> CreateGameResponse:
    """Host a new table.

    The caller becomes the host and still has to connect over the join
    websocket like every other participant.
    """
    game_id = str(uuid.uuid4())
    host_id = request.player_id or str(uuid.uuid4())

    table = HostController(
        websocket_manager,
        game_id,
        host_id,
        request.host_name,
        theme=request.theme,
        provider=default_provider(),
    )
    websocket_manager.add_table(table)

    return CreateGameResponse(game_id=game_id, host_id=host_id)


@router.websocket("/games/join")
async def join_game(
    websocket: WebSocket,
    game_id: str = Query(..., description="Game ID to join"),
    player_id: str = Query(..., description="Player ID"),
    name: str = Query(default="Player", description="Player display name"),
) -> None:
    """WebSocket endpoint to join a table.

    The first frame sent must be a JOIN message; after that the socket
    carries ACTION messages up and STATE_UPDATE messages down.

    Args:
        websocket: WebSocket connection
        game_id: Table to join
        player_id: Stable participant id
        name: Display name (the JOIN message's name wins)

    """
    table = websocket_manager.get_table(game_id)

    if table is None:
        # Must accept before closing to avoid HTTP 403
        await websocket.accept()
        await websocket.close(code=4004, reason="Game not found")
        return

    seated = player_id in table.lobby
    if not seated and table.view.state != GameState.LOBBY:
        await websocket.accept()
        await websocket.close(code=4005, reason="Game already in progress")
        return

    if not seated and len(table.lobby) >= table.config.table_size:
        await websocket.accept()
        await websocket.close(code=4003, reason="Game is full")
        return

    await websocket_manager.connect(websocket, game_id, player_id)
    await websocket_manager.handle_player_messages(websocket, game_id, player_id)


@router.post("/games/{game_id}/start")
async def start_game(
    game_id: str, player_id: str = Query(..., description="Host's player ID")
) -> GameInfo:
    """Start the game, filling empty seats with bots."""
    table = _get_table_or_404(game_id)
    _require_host(table, player_id)

    if not await table.start():
        raise HTTPException(status_code=409, detail="Game already started")
    return _game_info(table)


@router.post("/games/{game_id}/next-round")
async def start_next_round(
    game_id: str, player_id: str = Query(..., description="Host's player ID")
) -> GameInfo:
    """Deal the next round once the current one is over."""
    table = _get_table_or_404(game_id)
    _require_host(table, player_id)

    if not await table.next_round():
        raise HTTPException(status_code=409, detail="Round is not over")
    return _game_info(table)


@router.get("/games/{game_id}")
async def get_game(game_id: str) -> GameInfo:
    """Get the public game summary (no hand contents)."""
    return _game_info(_get_table_or_404(game_id))


@router.delete("/games/{game_id}")
async def delete_game(
    game_id: str, player_id: str = Query(..., description="Host's player ID")
) -> dict[str, str]:
    """Close a table."""
    table = _get_table_or_404(game_id)
    _require_host(table, player_id)
    await websocket_manager.remove_table(game_id)
    return {"status": "closed"}


@router.get("/phases/standard")
async def get_standard_phases() -> PhaseListResponse:
    """Get the ten standard phases."""
    return PhaseListResponse(
        phases=[
            PhaseInfo(
                id=phase.id,
                name=phase.name,
                description=phase.description,
                requirements=[
                    RequirementInfo(kind=r.kind.value, count=r.count) for r in phase.requirements
                ],
            )
            for phase in STANDARD_PHASES
        ]
    )
