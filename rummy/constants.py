"""Game constants for Infinite Rummy."""

# Table limits
MAX_PLAYERS = 4
MIN_PLAYERS = 1
HAND_SIZE = 10

# Deck composition
NUMBER_MIN = 1
NUMBER_MAX = 12
RUNS_PER_COLOR = 2
WILD_COUNT = 8
SKIP_COUNT = 4
DECK_SIZE = 108

# Scoring
WILD_SCORE = 25
SKIP_SCORE = 15
HIGH_CARD_THRESHOLD = 10  # Number cards with value >= this score HIGH_CARD_SCORE
HIGH_CARD_SCORE = 10
LOW_CARD_SCORE = 5

# Turn timing
DEFAULT_TURN_DURATION = 30  # seconds
TIMER_TICK_SECONDS = 1.0

# Upper bound on cards submitted in one meld; the two-requirement search is 2^n
MAX_MELD_SELECTION = 15

BOT_NAMES = [
    "Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta", "Eta", "Theta", "Iota", "Kappa",
    "Omega", "Sigma", "Vector", "Matrix", "Cipher", "Glitch", "Pixel", "Vortex", "Quantum", "Flux",
    "Neon", "Cyber", "Logic", "Binary", "Spark", "Volt", "Echo", "Pulse", "Nova", "Terra",
]
