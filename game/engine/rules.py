TIC_TAC_TOE = "tic_tac_toe"
GAME_TYPES = {TIC_TAC_TOE}

X = "X"
O = "O"

BOARD_SIZE = 9

# Rows, columns, diagonals; checked in this order
LINES = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

def is_supported_game(game_type):
    return game_type in GAME_TYPES
