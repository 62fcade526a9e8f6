"""Game constants for Chinchón."""

# Suits (compact encoding), Spanish deck order
OROS = "o"
COPAS = "c"
ESPADAS = "e"
BASTOS = "b"
WILDCARD_SUIT = "w"
SUITS = [OROS, COPAS, ESPADAS, BASTOS]

# Suit display names
SUIT_NAMES = {
    OROS: "oros",
    COPAS: "copas",
    ESPADAS: "espadas",
    BASTOS: "bastos",
    WILDCARD_SUIT: "comodín",
}

# Ranks: the 40-card deck has no 8 or 9
WILDCARD_RANK = 0
SOTA = 10
CABALLO = 11
REY = 12
RANKS = [1, 2, 3, 4, 5, 6, 7, SOTA, CABALLO, REY]

# Rank display names
RANK_NAMES = {
    1: "1",
    2: "2",
    3: "3",
    4: "4",
    5: "5",
    6: "6",
    7: "7",
    10: "10",
    11: "11",
    12: "12",
}

# Game parameters
CARDS_PER_PLAYER = 7
SUITED_CARDS = 40
DEFAULT_WILDCARDS = 2
DEFAULT_PLAYERS = 4
MIN_PLAYERS = 2
MAX_PLAYERS = 5
DEFAULT_ELIMINATION_SCORE = 100  # over this (strictly) means out
MIN_MELD_SIZE = 3
LOW_CARD_LIMIT = 5  # loose card must rank below this to close

# Point values for scoring (unmatched cards at round end)
WILDCARD_POINTS = 20
FACE_POINTS = 10

# Turn phases
PHASE_DRAW = "draw"
PHASE_DISCARD = "discard"

# Game statuses
STATUS_WAITING = "waiting"
STATUS_PLAYING = "playing"
STATUS_CLOSED = "closed"
STATUS_ROUND_END = "round_end"
STATUS_FINISHED = "finished"

# Meld types
MELD_SET = "set"
MELD_RUN = "run"

# Closing shapes
CLOSING_SEVEN_RUN = "seven_run"
CLOSING_TWO_GROUPS_3_4 = "two_groups_3_4"
CLOSING_TWO_GROUPS_LOW_CARD = "two_groups_low_card"

# Bonus subtracted from the closer's score when nothing is left unmatched.
# Keyed by (closing type, wildcards used); None matches any wildcard count.
CLOSING_BONUSES = {
    (CLOSING_SEVEN_RUN, 1): 50,
    (CLOSING_SEVEN_RUN, 2): 25,
    (CLOSING_TWO_GROUPS_3_4, None): 10,
}
