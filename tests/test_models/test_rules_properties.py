"""Property-based tests for rule invariants using Hypothesis.

Random decks, random selections and random bot-driven games are checked
against the invariants every snapshot must keep.
"""

import random
from collections import Counter

from hypothesis import given, settings
from hypothesis import strategies as st

from rummy.bots import HeuristicBot
from rummy.constants import DECK_SIZE
from rummy.models.card import Card, number_card, skip_card, wild_card
from rummy.models.deck import create_deck, shuffle
from rummy.models.enums import PLAYABLE_COLORS, GameState, RequirementKind
from rummy.models.phase import PhaseRequirement
from rummy.models.player import Player
from rummy.models.round import next_round, start_game
from rummy.models.validator import is_valid_color, is_valid_run, is_valid_set, satisfies


@st.composite
def cards(draw, max_size: int = 8) -> list[Card]:
    """Lists of cards with unique ids."""
    specs = draw(
        st.lists(
            st.one_of(
                st.tuples(st.just("n"), st.sampled_from(PLAYABLE_COLORS), st.integers(1, 12)),
                st.tuples(st.just("w")),
                st.tuples(st.just("s")),
            ),
            min_size=1,
            max_size=max_size,
        )
    )
    result = []
    for i, spec in enumerate(specs):
        if spec[0] == "n":
            result.append(number_card(f"h-{i}", spec[1], spec[2]))
        elif spec[0] == "w":
            result.append(wild_card(f"h-{i}"))
        else:
            result.append(skip_card(f"h-{i}"))
    return result


def _seat(count: int) -> list[Player]:
    return [Player(id=f"bot-{i}", name=f"Bot {i}", is_human=False) for i in range(count)]


class TestShuffleProperties:
    """Shuffling only permutes."""

    @given(seed=st.integers(0, 100000))
    @settings(max_examples=50, deadline=None)
    def test_shuffle_is_permutation(self, seed: int) -> None:
        """A shuffled deck holds exactly the factory cards."""
        deck = create_deck()
        shuffled = shuffle(deck, random.Random(seed))

        assert len(shuffled) == DECK_SIZE
        assert Counter(shuffled) == Counter(deck)


class TestValidatorProperties:
    """Group checks don't depend on card order."""

    @given(selection=cards(), seed=st.integers(0, 1000), count=st.integers(1, 8))
    @settings(max_examples=100, deadline=None)
    def test_order_invariance(self, selection: list[Card], seed: int, count: int) -> None:
        """Permuting a group never changes SET, RUN or COLOR validity."""
        permuted = list(selection)
        random.Random(seed).shuffle(permuted)

        assert is_valid_set(selection, count) == is_valid_set(permuted, count)
        assert is_valid_run(selection) == is_valid_run(permuted)
        assert is_valid_color(selection, count) == is_valid_color(permuted, count)

    @given(selection=cards(), count=st.integers(1, 8))
    @settings(max_examples=100, deadline=None)
    def test_short_groups_never_satisfy(self, selection: list[Card], count: int) -> None:
        """No requirement is met with fewer cards than its count."""
        for kind in RequirementKind:
            if len(selection) < count:
                assert not satisfies(selection, PhaseRequirement(kind, count))

    @given(selection=cards())
    @settings(max_examples=100, deadline=None)
    def test_adding_a_wild_keeps_runs_valid(self, selection: list[Card]) -> None:
        """A wild can always pad a valid run."""
        if is_valid_run(selection):
            assert is_valid_run([*selection, wild_card("extra")])


class TestBotGameProperties:
    """Snapshots stay consistent through bot-driven play."""

    @given(seed=st.integers(0, 100000), seats=st.integers(1, 4))
    @settings(max_examples=15, deadline=None)
    def test_invariants_hold_through_play(self, seed: int, seats: int) -> None:
        """Cards are conserved, phases and scores never go backwards."""
        rng = random.Random(seed)
        state = start_game(_seat(seats), rng=rng, turn_duration=0)
        bots = {p.id: HeuristicBot(p.id, meld_chance=0.3) for p in state.players}
        expected = Counter(state.all_card_ids())

        for _ in range(400):
            if state.state == GameState.GAME_OVER:
                break
            if state.state == GameState.ROUND_OVER:
                before = state
                state = next_round(state, rng)
                assert state.round_number == before.round_number + 1
                continue

            before = state
            transition = bots[state.current_player.id].take_turn(state, rng)
            if not transition.accepted:
                assert transition.state is before
                break
            state = transition.state

            assert Counter(state.all_card_ids()) == expected
            assert 0 <= state.current_player_index < seats
            for old, new in zip(before.players, state.players, strict=True):
                assert new.score >= old.score
                assert old.phase_index <= new.phase_index <= old.phase_index + 1
                assert new.phase_index <= state.last_phase_index
            if state.state == GameState.PLAYING:
                assert all(p.hand for p in state.players)
            else:
                assert state.round_winner_id is not None
