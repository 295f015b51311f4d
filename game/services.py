"""
Persistence side of match coordination.

Everything here is synchronous ORM code. Async callers (the live consumer,
the matchmaking hub) reach it through ``sync_to_async``; every call starts
from a fresh read, so state seen before an await is never trusted here.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from accounts.models import Friendship, canonical_pair
from matchmaking.models import Notification
from .engine.board import board_from_moves, current_turn, empty_board, is_draw, is_valid_position, winner
from .engine.rules import TIC_TAC_TOE, X, is_supported_game
from .errors import (
    FORBIDDEN, INVALID_MOVE, INVALID_PAYLOAD, INVALID_STATE, NOT_FOUND, NOT_YOUR_TURN, GameError,
)
from .models import FriendGameRecord, Match, Move, UserGameStats

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    match_id: uuid.UUID
    position: int
    finished: bool = False
    winner_id: Optional[int] = None


@dataclass
class ChallengeResult:
    CREATED = "created"
    ACCEPTED = "accepted"
    EXISTING = "existing"
    BUSY = "busy"

    outcome: str
    match: Optional[Match] = None


def parse_match_id(value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def check_game_type(game_type):
    if not is_supported_game(game_type):
        raise GameError(INVALID_PAYLOAD, "Unsupported game type")
    return game_type


def user_summary(user):
    if user is None:
        return None
    return {"id": user.id, "username": user.username}


def build_match_state(match):
    """Wire representation of a match; the board is derived from its moves."""
    if match.player_o_id is None:
        board, moves = empty_board(), []
    else:
        moves = [{"position": m.position, "playerId": m.player_id} for m in match.moves.all()]
        board = board_from_moves(
            [(m["position"], m["playerId"]) for m in moves], match.player_x_id, match.player_o_id
        )
    return {
        "id": str(match.id),
        "gameType": match.game_type,
        "status": match.status,
        "winnerId": match.winner_id,
        "playerX": user_summary(match.player_x),
        "playerO": user_summary(match.player_o),
        "board": board,
        "currentTurn": current_turn(board),
        "moves": moves,
        "finishedAt": match.finished_at.isoformat() if match.finished_at else None,
    }


def load_match(match_id, game_type=TIC_TAC_TOE):
    pk = parse_match_id(match_id)
    if pk is None:
        return None
    return (Match.objects.select_related("player_x", "player_o")
            .prefetch_related("moves")
            .filter(pk=pk, game_type=game_type)
            .first())


def get_match_state(match_id, game_type=TIC_TAC_TOE):
    match = load_match(match_id, game_type)
    return build_match_state(match) if match else None


def get_player_match(match_id, user_id, game_type=TIC_TAC_TOE):
    match = load_match(match_id, game_type)
    if match is None:
        raise GameError(NOT_FOUND, "Match not found")
    if not match.has_player(user_id):
        raise GameError(FORBIDDEN, "Not a player in this match")
    return match


def _lock_match(match_id, game_type=TIC_TAC_TOE):
    pk = parse_match_id(match_id)
    match = None
    if pk is not None:
        match = Match.objects.select_for_update().filter(pk=pk, game_type=game_type).first()
    if match is None:
        raise GameError(NOT_FOUND, "Match not found")
    return match


# --- invites --------------------------------------------------------------

def purge_expired_game_invites(user_id=None):
    qs = Notification.objects.expired_game_invites()
    if user_id is not None:
        qs = qs.filter(to_user_id=user_id)
    deleted, _ = qs.delete()
    return deleted


def has_live_invite(match_id, user_id):
    return Notification.objects.live_game_invites().filter(match_id=match_id, to_user_id=user_id).exists()


def _reserved_for_other(match, user_id):
    return Notification.objects.live_game_invites().filter(match=match).exclude(to_user_id=user_id).exists()


def _seat_second_player(match, user_id):
    if match.status != Match.WAITING:
        raise GameError(INVALID_STATE, "Match is not waiting for a player")
    if match.player_x_id == user_id:
        raise GameError(INVALID_STATE, "You are already in this match")
    match.player_o_id = user_id
    match.status = Match.IN_PROGRESS
    match.save(update_fields=["player_o", "status"])
    Notification.objects.filter(match=match, type=Notification.GAME_INVITE).delete()
    logger.info("match %s started: X=%s O=%s", match.id, match.player_x_id, user_id)
    return match


# --- match creation -------------------------------------------------------

def create_open_match(user_id, game_type=TIC_TAC_TOE):
    check_game_type(game_type)
    match = Match.objects.create(game_type=game_type, player_x_id=user_id, status=Match.WAITING)
    logger.info("open match %s created by %s", match.id, user_id)
    return match


def create_challenge(creator_id, opponent_id, game_type=TIC_TAC_TOE):
    """Challenge a friend directly.

    If the opponent is already in an active match that one of the two
    invited the other to, that match is reused instead of creating a
    duplicate (accepting it when the creator was the one invited).
    Otherwise a busy opponent means no match at all.
    """
    check_game_type(game_type)
    if creator_id == opponent_id:
        raise GameError(INVALID_PAYLOAD, "Cannot play against yourself")
    with transaction.atomic():
        # Serializes concurrent challenges between the same two users
        list(User.objects.select_for_update().filter(id__in=canonical_pair(creator_id, opponent_id)).order_by("id"))
        if not User.objects.filter(id=opponent_id).exists():
            raise GameError(NOT_FOUND, "User not found")
        if not Friendship.are_friends(creator_id, opponent_id):
            raise GameError(FORBIDDEN, "Can only challenge friends")

        hosted = (Match.objects.select_for_update()
                  .filter(game_type=game_type, status=Match.WAITING, player_x_id=creator_id)
                  .order_by("created_at"))
        for match in hosted:
            if has_live_invite(match.id, opponent_id):
                return ChallengeResult(ChallengeResult.EXISTING, match)

        busy = list(Match.objects.select_for_update()
                    .filter(game_type=game_type, status__in=Match.ACTIVE)
                    .filter(Q(player_x_id=opponent_id) | Q(player_o_id=opponent_id))
                    .order_by("created_at"))
        for match in busy:
            if match.status == Match.WAITING and match.player_x_id == opponent_id \
                    and has_live_invite(match.id, creator_id):
                return ChallengeResult(ChallengeResult.ACCEPTED, _seat_second_player(match, creator_id))
        if busy:
            logger.info("challenge %s -> %s refused: opponent busy", creator_id, opponent_id)
            return ChallengeResult(ChallengeResult.BUSY)

        match = Match.objects.create(game_type=game_type, player_x_id=creator_id, status=Match.WAITING)
        Notification.objects.create(to_user_id=opponent_id, type=Notification.GAME_INVITE, match=match)
    logger.info("challenge match %s: %s invited %s", match.id, creator_id, opponent_id)
    return ChallengeResult(ChallengeResult.CREATED, match)


def join_open_match(match_id, user_id, game_type=TIC_TAC_TOE):
    with transaction.atomic():
        match = _lock_match(match_id, game_type)
        if match.status == Match.WAITING and _reserved_for_other(match, user_id):
            raise GameError(FORBIDDEN, "Match is reserved for an invited player")
        return _seat_second_player(match, user_id)


def accept_game_invite(match_id, user_id, game_type=TIC_TAC_TOE):
    with transaction.atomic():
        match = _lock_match(match_id, game_type)
        purge_expired_game_invites(user_id)
        if not has_live_invite(match.id, user_id):
            raise GameError(NOT_FOUND, "Invite not found or expired")
        return _seat_second_player(match, user_id)


def decline_game_invite(match_id, user_id, game_type=TIC_TAC_TOE):
    with transaction.atomic():
        match = _lock_match(match_id, game_type)
        if not has_live_invite(match.id, user_id):
            raise GameError(NOT_FOUND, "Invite not found or expired")
        Notification.objects.filter(match=match, to_user_id=user_id, type=Notification.GAME_INVITE).delete()
        if match.status == Match.WAITING:
            match.status = Match.ABANDONED
            match.save(update_fields=["status"])
            logger.info("match %s abandoned: invite declined by %s", match.id, user_id)
        return match


def abandon_waiting_matches(user_id, game_type=TIC_TAC_TOE):
    count = (Match.objects
             .filter(game_type=game_type, status=Match.WAITING, player_x_id=user_id)
             .update(status=Match.ABANDONED))
    if count:
        logger.info("abandoned %d waiting match(es) hosted by %s", count, user_id)
    return count


def create_paired_match(player_x_id, player_o_id, game_type=TIC_TAC_TOE):
    match = Match.objects.create(
        game_type=game_type, player_x_id=player_x_id, player_o_id=player_o_id, status=Match.IN_PROGRESS,
    )
    logger.info("matchmaking paired %s vs %s in %s", player_x_id, player_o_id, match.id)
    return match


# --- moves ----------------------------------------------------------------

def apply_move(match_id, user_id, position, game_type=TIC_TAC_TOE):
    """Validate and append one move, finishing the match if it ends the game.

    The match row is locked and its moves re-read on every call; the unique
    (match, position) and (match, number) constraints settle any write that
    still races past the checks.
    """
    if not is_valid_position(position):
        raise GameError(INVALID_PAYLOAD, "position must be 0-8")
    with transaction.atomic():
        match = _lock_match(match_id, game_type)
        if match.status != Match.IN_PROGRESS:
            raise GameError(INVALID_STATE, "Match is not in progress")
        if match.player_o_id is None:
            raise GameError(INVALID_STATE, "Waiting for second player")
        if not match.has_player(user_id):
            raise GameError(FORBIDDEN, "Not a player in this match")

        moves = [(m.position, m.player_id) for m in Move.objects.filter(match=match).order_by("number")]
        board = board_from_moves(moves, match.player_x_id, match.player_o_id)
        if board[position] is not None:
            raise GameError(INVALID_MOVE, "Position already taken")
        turn_player = match.player_x_id if current_turn(board) == X else match.player_o_id
        if turn_player != user_id:
            raise GameError(NOT_YOUR_TURN, "Not your turn")

        try:
            with transaction.atomic():
                Move.objects.create(match=match, player_id=user_id, number=len(moves) + 1, position=position)
        except IntegrityError:
            raise GameError(INVALID_MOVE, "Position already taken")

        board = board_from_moves(moves + [(position, user_id)], match.player_x_id, match.player_o_id)
        mark = winner(board)
        result = MoveResult(match.id, position)
        if mark is not None or is_draw(board):
            result.finished = True
            result.winner_id = match.player_x_id if mark == X else (match.player_o_id if mark else None)
            finish_match(match, result.winner_id)
    return result


def finish_match(match, winner_id):
    """Mark finished and record stats; callers must already be inside a transaction."""
    match.status = Match.FINISHED
    match.winner_id = winner_id
    match.finished_at = timezone.now()
    match.save(update_fields=["status", "winner", "finished_at"])
    _record_result(match.game_type, match.player_x_id, match.player_o_id, winner_id)
    logger.info("match %s finished, winner=%s", match.id, winner_id)


def _increment(model, lookup, **deltas):
    model.objects.get_or_create(**lookup)
    model.objects.filter(**lookup).update(**{field: F(field) + n for field, n in deltas.items()})


def _record_result(game_type, player_x_id, player_o_id, winner_id):
    draw = winner_id is None
    for me, other in ((player_x_id, player_o_id), (player_o_id, player_x_id)):
        _increment(
            UserGameStats, {"user_id": me, "game_type": game_type},
            wins=int(winner_id == me), losses=int(winner_id == other), draws=int(draw),
        )
    a, b = canonical_pair(player_x_id, player_o_id)
    _increment(
        FriendGameRecord, {"user_a_id": a, "user_b_id": b, "game_type": game_type},
        wins_a=int(winner_id == a), wins_b=int(winner_id == b), draws=int(draw),
    )


# --- stats ----------------------------------------------------------------

def user_stats(user_id, game_type=TIC_TAC_TOE):
    row = UserGameStats.objects.filter(user_id=user_id, game_type=game_type).first()
    if row is None:
        return {"wins": 0, "losses": 0, "draws": 0}
    return {"wins": row.wins, "losses": row.losses, "draws": row.draws}


def head_to_head(user_id, other_id, game_type=TIC_TAC_TOE):
    a, b = canonical_pair(user_id, other_id)
    row = FriendGameRecord.objects.filter(user_a_id=a, user_b_id=b, game_type=game_type).first()
    if row is None:
        return {"wins": 0, "losses": 0, "draws": 0}
    mine, theirs = (row.wins_a, row.wins_b) if user_id == a else (row.wins_b, row.wins_a)
    return {"wins": mine, "losses": theirs, "draws": row.draws}


def leaderboard(game_type=TIC_TAC_TOE, limit=10):
    rows = (UserGameStats.objects.select_related("user")
            .filter(game_type=game_type)
            .order_by("-wins", "losses", "-draws")[:limit])
    return [{
        "rank": i + 1, "userId": r.user_id, "username": r.user.username,
        "wins": r.wins, "losses": r.losses, "draws": r.draws,
    } for i, r in enumerate(rows)]
