"""Deck creation, shuffling, dealing and discard recycling.

Decks and piles are tuples of cards used as stacks: the top card is the last
element and drawing pops from the end.
"""

import random
from dataclasses import dataclass

from rummy.constants import NUMBER_MAX, NUMBER_MIN, RUNS_PER_COLOR, SKIP_COUNT, WILD_COUNT
from rummy.models.card import Card, number_card, skip_card, wild_card
from rummy.models.enums import PLAYABLE_COLORS


@dataclass(frozen=True)
class DrawSupply:
    """Deck and discard pile after a card has been taken from the deck."""

    card: Card
    deck: tuple[Card, ...]
    discard: tuple[Card, ...]
    recycled: bool = False


def create_deck() -> tuple[Card, ...]:
    """Create the full 108-card deck in a fixed order.

    For each of the four colors, two runs of 1-12 (96 number cards),
    followed by 8 wilds and 4 skips.
    """
    cards: list[Card] = []
    counter = 0

    for color in PLAYABLE_COLORS:
        for _ in range(RUNS_PER_COLOR):
            for value in range(NUMBER_MIN, NUMBER_MAX + 1):
                cards.append(number_card(f"card-{counter}", color, value))
                counter += 1

    for _ in range(WILD_COUNT):
        cards.append(wild_card(f"card-{counter}"))
        counter += 1

    for _ in range(SKIP_COUNT):
        cards.append(skip_card(f"card-{counter}"))
        counter += 1

    return tuple(cards)


def shuffle(deck: tuple[Card, ...], rng: random.Random | None = None) -> tuple[Card, ...]:
    """Return a uniformly shuffled copy of the deck (Fisher-Yates)."""
    rng = rng or random.Random()  # noqa: S311
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return tuple(cards)


def deal(
    deck: tuple[Card, ...], player_count: int, hand_size: int
) -> tuple[list[tuple[Card, ...]], tuple[Card, ...]]:
    """Deal cards round-robin, one card per player per pass, popping from the deck.

    Args:
        deck: Deck to deal from (top is the last card)
        player_count: Number of hands to deal
        hand_size: Cards per hand

    Returns:
        Tuple of (hands, remaining deck)

    Raises:
        ValueError: If the deck holds fewer than player_count * hand_size cards

    """
    if player_count * hand_size > len(deck):
        raise ValueError(
            f"Cannot deal {hand_size} cards to {player_count} players from {len(deck)} cards"
        )

    remaining = list(deck)
    hands: list[list[Card]] = [[] for _ in range(player_count)]
    for _ in range(hand_size):
        for hand in hands:
            hand.append(remaining.pop())

    return [tuple(hand) for hand in hands], tuple(remaining)


def recycle_discard(
    discard: tuple[Card, ...], rng: random.Random | None = None
) -> tuple[tuple[Card, ...], tuple[Card, ...]] | None:
    """Turn all but the top discard into a fresh shuffled deck.

    Returns:
        Tuple of (new deck, new discard pile holding only the old top card),
        or None if the discard pile has one card or fewer (stalemate)

    """
    if len(discard) <= 1:
        return None
    top = discard[-1]
    return shuffle(discard[:-1], rng), (top,)


def draw_from_deck(
    deck: tuple[Card, ...], discard: tuple[Card, ...], rng: random.Random | None = None
) -> DrawSupply | None:
    """Pop the top card of the deck, recycling the discard pile first if the deck is empty.

    Returns:
        DrawSupply with the drawn card and updated piles, or None on stalemate

    """
    recycled = False
    if not deck:
        refreshed = recycle_discard(discard, rng)
        if refreshed is None:
            return None
        deck, discard = refreshed
        recycled = True

    return DrawSupply(card=deck[-1], deck=deck[:-1], discard=discard, recycled=recycled)
