"""
Round rules - Turn advancement, consensus, challenge adjudication, wins.

Pure helpers used by the reducer. None of them mutate their inputs.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import replace

from .cards import Card, Rank
from .deck import full_deck
from .state import EntryKind, HistoryEntry, MatchPhase, MatchState


def next_index(index: int, num_players: int) -> int:
    """Strict round-robin; nobody is ever skipped."""
    return (index + 1) % num_players


def with_turn(state: MatchState, index: int) -> MatchState:
    """Move the turn to a seat and refresh the per-player turn flags."""
    players = tuple(
        p if p.is_current_turn == (i == index) else replace(p, is_current_turn=(i == index))
        for i, p in enumerate(state.players)
    )
    return state._copy_with(players=players, current_player_idx=index)


def advance_turn(state: MatchState) -> MatchState:
    return with_turn(state, next_index(state.current_player_idx, state.num_players))


def claimed_batch(pile: tuple[Card, ...], count: int) -> tuple[Card, ...]:
    """The cards put down by the most recent claim: the last `count` on the pile."""
    if count <= 0:
        return ()
    return pile[-count:]


def is_claim_honest(pile: tuple[Card, ...], rank: Rank, count: int) -> bool:
    """
    True if every card of the latest batch matches the claimed rank.

    Earlier unchallenged plays further down the pile are not inspected.
    """
    batch = claimed_batch(pile, count)
    return bool(batch) and all(card.rank == rank for card in batch)


def entries_since_claim(state: MatchState) -> tuple[HistoryEntry, ...]:
    """History entries recorded after the most recent claim."""
    history = state.action_history
    for idx in range(len(history) - 1, -1, -1):
        if history[idx].kind is EntryKind.CLAIM:
            return history[idx + 1:]
    return ()


def passed_since_claim(state: MatchState) -> set[str]:
    """Ids of participants who passed on the standing claim."""
    return {
        entry.player_id
        for entry in entries_since_claim(state)
        if entry.kind is EntryKind.PASS
    }


def has_consensus(state: MatchState) -> bool:
    """Every participant except the claim owner has passed on the claim."""
    if state.claim is None:
        return False
    passed = passed_since_claim(state)
    return all(
        p.player_id in passed
        for p in state.players
        if p.player_id != state.claim.owner_id
    )


def find_winner(state: MatchState) -> str | None:
    """Lowest-seat participant with an empty hand, if any."""
    for p in state.players:
        if p.hand_size == 0:
            return p.player_id
    return None


def check_win(state: MatchState) -> MatchState:
    """End the match if somebody has run out of cards."""
    if state.phase is not MatchPhase.PLAYING:
        return state
    winner = find_winner(state)
    if winner is None:
        return state
    return state._copy_with(phase=MatchPhase.ENDED, winner_id=winner)


def rank_groups(hand: tuple[Card, ...]) -> dict[Rank, list[Card]]:
    """Group a hand by rank, keeping first-seen order."""
    groups: dict[Rank, list[Card]] = {}
    for card in hand:
        groups.setdefault(card.rank, []).append(card)
    return groups


def check_integrity(state: MatchState) -> list[str]:
    """
    Validate that every card is accounted for exactly once.

    Returns a list of problems (empty when the state is sound).
    A lobby must hold no cards at all.
    """
    problems = []
    all_cards = [c for p in state.players for c in p.hand]
    all_cards.extend(state.pile)
    all_cards.extend(state.discard)

    if state.phase is MatchPhase.LOBBY:
        if all_cards:
            problems.append(f"{len(all_cards)} cards present in the lobby")
        return problems

    counts = Counter(c.card_id for c in all_cards)
    duplicates = sorted(cid for cid, n in counts.items() if n > 1)
    if duplicates:
        problems.append(f"Duplicated cards: {', '.join(duplicates)}")

    expected = {c.card_id for c in full_deck()}
    missing = sorted(expected - set(counts))
    if missing:
        problems.append(f"Missing cards: {', '.join(missing)}")

    if (state.claim is None) != (not state.pile):
        problems.append("Claim and pile disagree")
    if state.claim is not None and state.claim.count < 1:
        problems.append("Claim count below 1")
    if state.players and not 0 <= state.current_player_idx < state.num_players:
        problems.append(f"Turn index {state.current_player_idx} out of range")

    return problems


def describe_entry(state: MatchState, entry: HistoryEntry) -> str:
    """One-line account of a history entry, e.g. "Alice claimed 2 Ks"."""
    player = state.get_player(entry.player_id)
    name = player.name if player else entry.player_id
    if entry.kind is EntryKind.CLAIM:
        count = entry.claimed_count or 0
        rank = entry.claimed_rank.value if entry.claimed_rank else "?"
        return f"{name} claimed {count} {rank}{'s' if count != 1 else ''}"
    if entry.kind is EntryKind.PASS:
        return f"{name} passed"
    taker = state.get_player(entry.pile_taker_id) if entry.pile_taker_id else None
    verdict = "the claim was honest" if entry.was_honest else "caught a bluff"
    suffix = f", {taker.name} takes the pile" if taker else ""
    return f"{name} challenged: {verdict}{suffix}"
